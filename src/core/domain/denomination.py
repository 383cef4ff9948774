"""
Denomination — Модель номинала (монета / купюра)

Immutable Pydantic модель. Номиналы принадлежат внешнему каталогу:
ядро никогда не изменяет экземпляры, только копирует ссылки в списки
(лоток, breakdown-списки).
"""

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class DenominationKind(str, Enum):
    """Тип номинала"""

    COIN = "coin"
    NOTE = "note"


# =============================================================================
# DENOMINATION MODEL
# =============================================================================


class Denomination(BaseModel):
    """
    Номинал валюты.

    Immutable модель (frozen=True). Значение — целое положительное число
    в минимальных единицах валюты (валюта одна, целочисленная).
    """

    value: int = Field(..., gt=0, description="Номинал (целое, > 0)")
    kind: DenominationKind = Field(..., description="Монета или купюра")
    label: str = Field(default="", description="Подпись для UI (например, '50元')")
    color_description: str = Field(
        default="", description="Описание цвета для озвучки в режиме обучения"
    )

    model_config = {"frozen": True}

    @property
    def is_note(self) -> bool:
        return self.kind == DenominationKind.NOTE


def sort_by_value_desc(denominations: Iterable[Denomination]) -> list[Denomination]:
    """
    Новый список номиналов, отсортированный по убыванию value.

    Исходная коллекция не изменяется.
    """
    return sorted(denominations, key=lambda d: d.value, reverse=True)


def total_value(denominations: Iterable[Denomination]) -> int:
    """Сумма номиналов (всегда пересчитывается, не кэшируется)."""
    return sum(d.value for d in denominations)
