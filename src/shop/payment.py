"""Payment Evaluator — классификация оплаты и прогресса в режиме сдачи.

Оплата (ledger_total vs price):
- ledger_total == price → EXACT
- ledger_total < price → SHORT (diff = price - ledger_total)
- ledger_total > price, режим сдачи выключен → OVER_REJECTED
- ledger_total > price, режим сдачи включён → OVER_ACCEPTED

Режим сдачи (после каждого удаления из лотка):
- paid_so_far = initial_payment_total - ledger_total
- paid_so_far == price → COMPLETE (остаток лотка — сдача)
- paid_so_far > price → REMOVED_TOO_MUCH
- paid_so_far < price → KEEP_REMOVING
"""

from dataclasses import dataclass
from enum import Enum

from src.core.domain.round import TransactionSnapshot


class PaymentOutcome(str, Enum):
    """Исход нажатия "оплатить"."""
    EXACT = "EXACT"
    SHORT = "SHORT"
    OVER_REJECTED = "OVER_REJECTED"
    OVER_ACCEPTED = "OVER_ACCEPTED"


class ChangeProgressOutcome(str, Enum):
    """Исход удаления номинала в CHANGE_ACTION."""
    COMPLETE = "COMPLETE"
    REMOVED_TOO_MUCH = "REMOVED_TOO_MUCH"
    KEEP_REMOVING = "KEEP_REMOVING"


@dataclass(frozen=True)
class PaymentEvaluation:
    """Результат оценки оплаты."""

    outcome: PaymentOutcome
    ledger_total: int
    price: int

    # price - ledger_total (> 0 при недоплате, < 0 при переплате)
    diff: int

    details: str

    @property
    def overpaid_by(self) -> int:
        return max(0, -self.diff)


@dataclass(frozen=True)
class ChangeProgress:
    """Результат оценки прогресса в режиме сдачи."""

    outcome: ChangeProgressOutcome
    paid_so_far: int
    price: int
    ledger_total: int

    # price - paid_so_far (отрицательно, если забрали слишком много)
    remaining_to_remove: int

    details: str

    @property
    def change_returned(self) -> int:
        """Сдача: то, что осталось в лотке после точной оплаты."""
        return self.ledger_total if self.outcome == ChangeProgressOutcome.COMPLETE else 0


class PaymentEvaluator:
    """Payment Evaluator (stateless)."""

    def evaluate(
        self,
        ledger_total: int,
        price: int,
        change_mode_enabled: bool,
    ) -> PaymentEvaluation:
        """Оценка оплаты.

        Args:
            ledger_total: сумма в лотке
            price: цена товара
            change_mode_enabled: включён ли режим сдачи

        Returns:
            PaymentEvaluation
        """
        _validate_amounts(ledger_total, price)
        diff = price - ledger_total

        if diff == 0:
            outcome = PaymentOutcome.EXACT
            details = f"Exact payment: {ledger_total}"
        elif diff > 0:
            outcome = PaymentOutcome.SHORT
            details = f"Short by {diff}: paid {ledger_total} of {price}"
        elif change_mode_enabled:
            outcome = PaymentOutcome.OVER_ACCEPTED
            details = f"Overpaid by {-diff}, change mode: paid {ledger_total} of {price}"
        else:
            outcome = PaymentOutcome.OVER_REJECTED
            details = f"Overpaid by {-diff}, change mode disabled"

        return PaymentEvaluation(
            outcome=outcome,
            ledger_total=ledger_total,
            price=price,
            diff=diff,
            details=details,
        )

    def evaluate_change_progress(
        self,
        snapshot: TransactionSnapshot,
        ledger_total: int,
        price: int,
    ) -> ChangeProgress:
        """Оценка прогресса после удаления номинала в CHANGE_ACTION.

        Args:
            snapshot: снапшот транзакции (initial_payment_total)
            ledger_total: текущая сумма в лотке
            price: цена товара

        Returns:
            ChangeProgress
        """
        _validate_amounts(ledger_total, price)
        paid_so_far = snapshot.paid_so_far(ledger_total)
        remaining = price - paid_so_far

        if remaining == 0:
            outcome = ChangeProgressOutcome.COMPLETE
            details = f"Paid {paid_so_far}, change returned {ledger_total}"
        elif remaining < 0:
            outcome = ChangeProgressOutcome.REMOVED_TOO_MUCH
            details = f"Removed too much: paid {paid_so_far} of {price}"
        else:
            outcome = ChangeProgressOutcome.KEEP_REMOVING
            details = f"Paid {paid_so_far} of {price}, {remaining} left to remove"

        return ChangeProgress(
            outcome=outcome,
            paid_so_far=paid_so_far,
            price=price,
            ledger_total=ledger_total,
            remaining_to_remove=remaining,
            details=details,
        )


def _validate_amounts(ledger_total: int, price: int) -> None:
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    if ledger_total < 0:
        raise ValueError(f"ledger_total must be non-negative, got {ledger_total}")
