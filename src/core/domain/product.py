"""
Product / PriceRange — Модели товара и ценового диапазона

Товары принадлежат внешнему каталогу и используются ядром только для чтения.
Фильтрация по диапазону всегда возвращает новую последовательность.
"""

from typing import Iterable

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# PRODUCT MODEL
# =============================================================================


class Product(BaseModel):
    """
    Товар, который игрок "покупает" в раунде.

    Immutable модель (frozen=True).
    """

    id: str = Field(..., min_length=1, description="Идентификатор товара")
    name: str = Field(..., min_length=1, description="Название товара")
    price: int = Field(..., gt=0, description="Цена (целое, > 0)")
    image: str = Field(default="", description="URL или Base64 изображения")
    is_custom: bool = Field(default=False, description="Добавлен учителем вручную")

    model_config = {"frozen": True}


# =============================================================================
# PRICE RANGE MODEL
# =============================================================================


class PriceRange(BaseModel):
    """
    Ценовой диапазон для выбора товара (границы включительно).

    Выбирается снаружи (экран настроек раунда).
    """

    id: str = Field(..., min_length=1, description="Идентификатор диапазона (например, '41-50')")
    label: str = Field(default="", description="Подпись для UI")
    min_price: int = Field(..., ge=0, description="Нижняя граница (включительно)")
    max_price: int = Field(..., ge=0, description="Верхняя граница (включительно)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_bounds(self) -> "PriceRange":
        """Нижняя граница не может превышать верхнюю."""
        if self.min_price > self.max_price:
            raise ValueError(
                f"min_price {self.min_price} exceeds max_price {self.max_price}"
            )
        return self

    def contains(self, price: int) -> bool:
        return self.min_price <= price <= self.max_price


def filter_products_by_range(
    products: Iterable[Product], price_range: PriceRange | None
) -> list[Product]:
    """
    Пул товаров, цена которых попадает в диапазон.

    Args:
        products: Товары внешнего каталога (не изменяются)
        price_range: Диапазон; None — без фильтрации

    Returns:
        Новый список товаров
    """
    if price_range is None:
        return list(products)
    return [p for p in products if price_range.contains(p.price)]
