"""
Change Decomposition — Greedy разложение цены и сдачи на номиналы

Модуль раскладывает цену товара и сдачу (переплата - цена) на списки номиналов,
которые затем проигрываются Animation Sequencer'ом в лоток:
- Разложение цены: жадно по фиксированному каноническому подмножеству
  номиналов (по умолчанию 50, 10, 5, 1) — одинаковая картинка для ученика
  независимо от каталога
- Разложение сдачи: жадно по всему активному набору номиналов
- Оба этапа — один и тот же алгоритм жадного вычитания, отличается только
  список номиналов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. sum(price_breakdown) == price
2. sum(price_breakdown) + sum(change_breakdown) == overpaid_total
3. Остаток != 0 → DecompositionIncomplete (никогда не обрезается молча)
4. Входные коллекции номиналов не изменяются

ВАЖНО: жадный алгоритм гарантирует точную сумму, но НЕ минимальное
количество предметов для произвольного набора номиналов.
"""

from typing import Final, Iterable, NamedTuple, Sequence

from src.core.domain.denomination import Denomination, sort_by_value_desc, total_value

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Каноническое подмножество номиналов для разложения цены
CANONICAL_PRICE_VALUES_DEFAULT: Final[tuple[int, ...]] = (50, 10, 5, 1)

PHASE_PRICE: Final[str] = "price"
PHASE_CHANGE: Final[str] = "change"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class DecompositionIncomplete(ArithmeticError):
    """
    Остаток не может быть полностью разложен доступными номиналами.

    Например: в наборе нет номинала 1, а остаток нечётный. Транзакция
    не должна переходить в CHANGE_ACTION с несогласованным breakdown.
    """

    def __init__(self, amount: int, remainder: int, phase: str):
        self.amount = amount
        self.remainder = remainder
        self.phase = phase
        super().__init__(
            f"Cannot decompose {phase} amount {amount}: "
            f"remainder {remainder} left after greedy pass"
        )


# =============================================================================
# RESULT TYPES
# =============================================================================


class GreedyResult(NamedTuple):
    """Результат одного жадного прохода."""

    pieces: tuple[Denomination, ...]  # В порядке убывания value
    remainder: int  # 0 если сумма разложена полностью


class ChangeBreakdown(NamedTuple):
    """
    Полный breakdown для режима сдачи.

    Чистое значение: потребляется один раз Animation Sequencer'ом.
    """

    price_breakdown: tuple[Denomination, ...]
    change_breakdown: tuple[Denomination, ...]

    @property
    def sequence(self) -> list[Denomination]:
        """Порядок проигрывания: сначала цена, затем сдача."""
        return [*self.price_breakdown, *self.change_breakdown]

    @property
    def price_total(self) -> int:
        return total_value(self.price_breakdown)

    @property
    def change_total(self) -> int:
        return total_value(self.change_breakdown)


# =============================================================================
# GREEDY
# =============================================================================


def greedy_breakdown(amount: int, denominations: Iterable[Denomination]) -> GreedyResult:
    """
    Жадное вычитание: повторно берётся наибольший номинал <= остатка.

    Args:
        amount: Сумма для разложения (>= 0)
        denominations: Доступные номиналы (в любом порядке, не изменяются)

    Returns:
        GreedyResult(pieces, remainder)

    Raises:
        ValueError: если amount < 0

    Examples:
        >>> coins = [Denomination(value=v, kind="coin") for v in (1, 5, 10)]
        >>> [d.value for d in greedy_breakdown(27, coins).pieces]
        [10, 10, 5, 1, 1]
    """
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")

    pieces: list[Denomination] = []
    remaining = amount

    for denomination in sort_by_value_desc(denominations):
        if remaining == 0:
            break
        count, remaining = divmod(remaining, denomination.value)
        pieces.extend([denomination] * count)

    return GreedyResult(pieces=tuple(pieces), remainder=remaining)


def _unique_by_value(denominations: Iterable[Denomination]) -> list[Denomination]:
    """Первый номинал для каждого value (дубликаты каталога отбрасываются)."""
    seen: dict[int, Denomination] = {}
    for d in denominations:
        seen.setdefault(d.value, d)
    return list(seen.values())


def canonical_subset(
    available: Iterable[Denomination],
    canonical_values: Iterable[int] = CANONICAL_PRICE_VALUES_DEFAULT,
) -> list[Denomination]:
    """
    Номиналы каталога, входящие в каноническое подмножество.

    Отсутствующие в каталоге канонические значения пропускаются:
    недоразложенный остаток тогда проявится как DecompositionIncomplete.
    """
    wanted = set(canonical_values)
    return sort_by_value_desc(d for d in _unique_by_value(available) if d.value in wanted)


def missing_canonical_values(
    available: Iterable[Denomination],
    canonical_values: Iterable[int] = CANONICAL_PRICE_VALUES_DEFAULT,
) -> list[int]:
    """
    Канонические значения, которых нет среди номиналов каталога.

    Returns:
        Отсортированный по убыванию список отсутствующих значений (пустой — OK)
    """
    present = {d.value for d in available}
    return sorted((v for v in set(canonical_values) if v not in present), reverse=True)


# =============================================================================
# DECOMPOSITION
# =============================================================================


def decompose(
    price: int,
    overpaid_total: int,
    available: Sequence[Denomination],
    canonical_values: Iterable[int] = CANONICAL_PRICE_VALUES_DEFAULT,
) -> ChangeBreakdown:
    """
    Разложение цены и сдачи для режима сдачи.

    1. price_breakdown: жадно по каноническому подмножеству
    2. change_breakdown: change = overpaid_total - price, жадно по всему набору

    Args:
        price: Цена товара (> 0)
        overpaid_total: Сумма в лотке (>= price)
        available: Активный набор номиналов (непустой)
        canonical_values: Каноническое подмножество для цены

    Returns:
        ChangeBreakdown, каждая часть отсортирована по убыванию value

    Raises:
        ValueError: если price <= 0, overpaid_total < price или набор пуст
        DecompositionIncomplete: если остаток какого-либо этапа != 0

    Examples:
        >>> coins = [Denomination(value=v, kind="coin") for v in (1, 5, 10, 50)]
        >>> result = decompose(45, 50, coins)
        >>> [d.value for d in result.sequence]
        [10, 10, 10, 10, 5, 5]
    """
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    if overpaid_total < price:
        raise ValueError(
            f"overpaid_total {overpaid_total} is below price {price}"
        )
    if not available:
        raise ValueError("available denominations cannot be empty")

    price_result = greedy_breakdown(price, canonical_subset(available, canonical_values))
    if price_result.remainder != 0:
        raise DecompositionIncomplete(price, price_result.remainder, PHASE_PRICE)

    change_amount = overpaid_total - price
    change_result = greedy_breakdown(change_amount, _unique_by_value(available))
    if change_result.remainder != 0:
        raise DecompositionIncomplete(change_amount, change_result.remainder, PHASE_CHANGE)

    return ChangeBreakdown(
        price_breakdown=price_result.pieces,
        change_breakdown=change_result.pieces,
    )


def solve_exact_payment(price: int, available: Sequence[Denomination]) -> list[Denomination]:
    """
    Пример точной оплаты цены: жадно по всему активному набору.

    Используется для подсказки "как надо было заплатить".

    Raises:
        ValueError: если price <= 0
        DecompositionIncomplete: если цену нельзя разложить без остатка
    """
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")

    result = greedy_breakdown(price, _unique_by_value(available))
    if result.remainder != 0:
        raise DecompositionIncomplete(price, result.remainder, PHASE_PRICE)
    return list(result.pieces)
