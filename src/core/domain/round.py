"""
Round / TransactionSnapshot — Модели раунда покупки

Round создаётся генератором раундов при входе в BUYING и живёт до завершения
раунда. TransactionSnapshot фиксируется один раз в момент переплаты при
включённом режиме сдачи.
"""

from pydantic import BaseModel, Field

from .product import Product


class Round(BaseModel):
    """
    Один раунд "купи этот товар за эту цену".

    Immutable модель (frozen=True).
    """

    product: Product = Field(..., description="Покупаемый товар")
    started_at_ts_utc_ms: int = Field(
        ..., ge=0, description="Время старта раунда (UTC, миллисекунды)"
    )

    model_config = {"frozen": True}

    @property
    def price(self) -> int:
        return self.product.price


class TransactionSnapshot(BaseModel):
    """
    Снапшот транзакции в режиме сдачи.

    paid_so_far = initial_payment_total - current_ledger_total
    """

    initial_payment_total: int = Field(
        ..., ge=0, description="Сумма в лотке в момент переплаты"
    )

    model_config = {"frozen": True}

    def paid_so_far(self, ledger_total: int) -> int:
        """
        Сколько уже "отдано продавцу" (убрано из лотка).

        Args:
            ledger_total: Текущая сумма в лотке

        Returns:
            initial_payment_total - ledger_total
        """
        return self.initial_payment_total - ledger_total
