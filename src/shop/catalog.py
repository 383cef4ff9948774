"""
Shop Catalog — Внешний каталог номиналов, товаров, диапазонов и фраз

Каталог принадлежит внешнему владельцу (экран настроек + локальное хранилище).
Ядро использует его только для чтения: все модели frozen, фильтрация
возвращает новые последовательности.

Загрузка конфигурации (load_catalog):
1. JSON Schema валидация (contracts/schema/shop_catalog.json)
2. Pydantic валидация моделей
3. Проверка канонического подмножества номиналов против каталога
"""

import json
from pathlib import Path
from typing import Any, Dict, Final, Iterable

from pydantic import BaseModel, Field, model_validator

from src.core.contracts import validate_shop_catalog
from src.core.domain import (
    Denomination,
    DenominationKind,
    PriceRange,
    Product,
)
from src.core.math.change_decomposition import (
    CANONICAL_PRICE_VALUES_DEFAULT,
    missing_canonical_values,
)
from src.shop.voice import VoicePhrases


# =============================================================================
# EXCEPTIONS
# =============================================================================


class CatalogConfigurationError(ValueError):
    """Каталог несовместим с конфигурацией игры (конфигурация отклоняется)."""
    pass


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_DENOMINATIONS: Final[tuple[Denomination, ...]] = (
    Denomination(value=1, kind=DenominationKind.COIN, label="1元", color_description="銅黃色"),
    Denomination(value=5, kind=DenominationKind.COIN, label="5元", color_description="銀色"),
    Denomination(value=10, kind=DenominationKind.COIN, label="10元", color_description="銀白色"),
    Denomination(value=50, kind=DenominationKind.COIN, label="50元", color_description="金色"),
    Denomination(value=100, kind=DenominationKind.NOTE, label="100元", color_description="紅色紙鈔"),
    Denomination(value=500, kind=DenominationKind.NOTE, label="500元", color_description="咖啡色紙鈔"),
    Denomination(value=1000, kind=DenominationKind.NOTE, label="1000元", color_description="藍色紙鈔"),
)

DEFAULT_PRODUCTS: Final[tuple[Product, ...]] = (
    Product(id="p1", name="漢堡", price=45),
    Product(id="p2", name="牛奶", price=32),
    Product(id="p3", name="玩具車", price=120),
    Product(id="p4", name="筆記本", price=15),
    Product(id="p5", name="彩色筆", price=85),
)


def _decade_ranges() -> list[PriceRange]:
    ranges = [PriceRange(id="1-10", label="1-10元", min_price=1, max_price=10)]
    for start in range(11, 100, 10):
        end = start + 9
        ranges.append(
            PriceRange(id=f"{start}-{end}", label=f"{start}-{end}元", min_price=start, max_price=end)
        )
    return ranges


DEFAULT_PRICE_RANGES: Final[tuple[PriceRange, ...]] = (
    *_decade_ranges(),
    PriceRange(id="100-500", label="100-500元", min_price=100, max_price=500),
    PriceRange(id="500-1000", label="500-1000元", min_price=500, max_price=1000),
    PriceRange(id="all", label="全部隨機", min_price=0, max_price=10000),
)

DEFAULT_PRICE_RANGE_ID: Final[str] = "all"


# =============================================================================
# CATALOG MODEL
# =============================================================================


class ShopCatalog(BaseModel):
    """
    Снапшот внешнего каталога на время раунда.

    Immutable модель (frozen=True).
    """

    denominations: tuple[Denomination, ...] = Field(
        ..., min_length=1, description="Активный набор номиналов"
    )
    products: tuple[Product, ...] = Field(default=(), description="Товары")
    price_ranges: tuple[PriceRange, ...] = Field(
        default=DEFAULT_PRICE_RANGES, description="Ценовые диапазоны для выбора товара"
    )
    voice: VoicePhrases = Field(default_factory=VoicePhrases, description="Голосовые фразы")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "ShopCatalog":
        """Номиналы уникальны по value, товары и диапазоны — по id."""
        values = [d.value for d in self.denominations]
        if len(values) != len(set(values)):
            raise ValueError(f"Duplicate denomination values: {values}")

        product_ids = [p.id for p in self.products]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError(f"Duplicate product ids: {product_ids}")

        range_ids = [r.id for r in self.price_ranges]
        if len(range_ids) != len(set(range_ids)):
            raise ValueError(f"Duplicate price range ids: {range_ids}")
        return self

    def denomination_for(self, value: int) -> Denomination:
        """
        Номинал каталога по значению.

        Raises:
            ValueError: если номинала нет в каталоге
        """
        for denomination in self.denominations:
            if denomination.value == value:
                return denomination
        raise ValueError(f"Unknown denomination value: {value}")

    def price_range(self, range_id: str) -> PriceRange:
        """
        Диапазон по id.

        Raises:
            ValueError: если диапазона нет в каталоге
        """
        for price_range in self.price_ranges:
            if price_range.id == range_id:
                return price_range
        raise ValueError(f"Unknown price range: {range_id}")

    def ensure_canonical_values(
        self, canonical_values: Iterable[int] = CANONICAL_PRICE_VALUES_DEFAULT
    ) -> None:
        """
        Проверка, что все канонические номиналы есть в каталоге.

        Raises:
            CatalogConfigurationError: если какие-то значения отсутствуют
        """
        missing = missing_canonical_values(self.denominations, canonical_values)
        if missing:
            raise CatalogConfigurationError(
                f"Canonical price denominations missing from catalog: {missing}"
            )


def default_catalog() -> ShopCatalog:
    """Каталог по умолчанию (NT$: 1, 5, 10, 50, 100, 500, 1000)."""
    return ShopCatalog(
        denominations=DEFAULT_DENOMINATIONS,
        products=DEFAULT_PRODUCTS,
        price_ranges=DEFAULT_PRICE_RANGES,
    )


# =============================================================================
# LOADING
# =============================================================================


def load_catalog(
    data: Dict[str, Any],
    canonical_values: Iterable[int] = CANONICAL_PRICE_VALUES_DEFAULT,
) -> ShopCatalog:
    """
    Загрузка каталога из dict (JSON контракт shop_catalog).

    Args:
        data: Данные каталога
        canonical_values: Каноническое подмножество для разложения цены

    Returns:
        Валидный ShopCatalog

    Raises:
        jsonschema.ValidationError: нарушение JSON Schema
        pydantic.ValidationError: нарушение инвариантов моделей
        CatalogConfigurationError: канонические номиналы отсутствуют
    """
    validate_shop_catalog(data)

    payload = {key: value for key, value in data.items() if key != "schema_version"}
    catalog = ShopCatalog.model_validate(payload)
    catalog.ensure_canonical_values(canonical_values)
    return catalog


def load_catalog_file(
    path: Path | str,
    canonical_values: Iterable[int] = CANONICAL_PRICE_VALUES_DEFAULT,
) -> ShopCatalog:
    """Загрузка каталога из JSON файла."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return load_catalog(data, canonical_values)
