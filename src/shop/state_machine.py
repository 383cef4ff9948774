"""Shop State Machine — управление стадиями игры "Магазин".

Стадии:
- SETUP: только настройка, активного раунда нет
- BUYING: игрок свободно добавляет/убирает номиналы в лотке
- CHANGE_ACTION: игрок только убирает номиналы (упражнение со сдачей)

Переходы:
- SETUP → BUYING: start_round, пул товаров диапазона не пуст (иначе NoProductsInRange)
- BUYING → BUYING: EXACT (новый раунд после паузы показа) / SHORT / OVER_REJECTED
- BUYING → CHANGE_ACTION: OVER_ACCEPTED, только после завершения анимации
- CHANGE_ACTION → BUYING (новый раунд): paid_so_far == price

Пока Animation Sequencer держит блокировку лотка, все изменяющие операции
игрока отклоняются (no-op) независимо от стадии.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Final, Optional, TypeVar, Union

from src.core.domain import Denomination, PriceRange, Product, Round, TransactionSnapshot
from src.core.log import get_logger
from src.core.math.change_decomposition import (
    DecompositionIncomplete,
    decompose,
    solve_exact_payment,
)
from src.shop.animation import AnimationSequencer
from src.shop.catalog import DEFAULT_PRICE_RANGE_ID, ShopCatalog, default_catalog
from src.shop.config import ShopConfig
from src.shop.ledger import TenderLedger
from src.shop.payment import (
    ChangeProgress,
    ChangeProgressOutcome,
    PaymentEvaluation,
    PaymentEvaluator,
    PaymentOutcome,
)
from src.shop.round_generator import NoProductsInRange, RoundGenerator
from src.shop.voice import SupersedingNotifier, render

log = get_logger(__name__)

_T = TypeVar("_T")

# Тексты баннера обратной связи
FEEDBACK_SHORTAGE: Final[str] = "還差 {diff} 元"
FEEDBACK_CHANGE_INSTRUCTION: Final[str] = "請點選錢幣，拿走 {price} 元付給老闆"
FEEDBACK_NO_PRODUCTS: Final[str] = "此範圍 ({range}) 沒有商品，請先至後台新增商品或選擇其他範圍"
FEEDBACK_DECOMPOSITION_FAILED: Final[str] = "無法用現有錢幣組出 {amount} 元"


class ShopStage(str, Enum):
    """Стадия игры."""
    SETUP = "SETUP"
    BUYING = "BUYING"
    CHANGE_ACTION = "CHANGE_ACTION"


@dataclass(frozen=True)
class ShopActionResult:
    """Результат операции игрока."""

    accepted: bool
    reason: str

    previous_stage: ShopStage
    stage: ShopStage
    transition_occurred: bool

    ledger_total: int

    # Для отладки
    details: str

    payment: Optional[PaymentEvaluation] = None
    change_progress: Optional[ChangeProgress] = None


class ShopGame:
    """Игра "Магазин": стадии, лоток, оплата, режим сдачи.

    Player-facing операции:
    - start_round(range), return_to_setup()
    - add_denomination(value), remove_denomination(index), reset_tray()
    - pay(), reveal_solution()  (корутины: могут запускать анимацию)
    """

    def __init__(
        self,
        catalog: Optional[ShopCatalog] = None,
        config: Optional[ShopConfig] = None,
        notifier: Optional[SupersedingNotifier] = None,
        sequencer: Optional[AnimationSequencer] = None,
        round_generator: Optional[RoundGenerator] = None,
        evaluator: Optional[PaymentEvaluator] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            catalog: внешний каталог (номиналы, товары, диапазоны, фразы)
            config: режимы и тайминги
            notifier: озвучка (fire-and-forget)
            sequencer: Animation Sequencer
            round_generator: генератор раундов
            evaluator: Payment Evaluator
            sleep: таймер паузы показа успеха (подменяется в тестах)

        Raises:
            CatalogConfigurationError: канонические номиналы отсутствуют в каталоге
        """
        self.catalog = catalog or default_catalog()
        self.config = config or ShopConfig()
        self.catalog.ensure_canonical_values(self.config.canonical_price_values)

        self.ledger = TenderLedger()
        self.notifier = notifier or SupersedingNotifier()
        self.sequencer = sequencer or AnimationSequencer()
        self.round_generator = round_generator or RoundGenerator()
        self.evaluator = evaluator or PaymentEvaluator()
        self._sleep = sleep

        self.change_mode_enabled = self.config.change_mode_enabled
        self.voice_feedback_enabled = self.config.voice_feedback_enabled

        self._stage = ShopStage.SETUP
        self._round: Optional[Round] = None
        self._snapshot: Optional[TransactionSnapshot] = None
        self._price_range: Optional[PriceRange] = None
        self._pool: list[Product] = []
        self._round_complete = False
        self._completion_task: Optional[asyncio.Task] = None

        self.feedback = ""
        self.completed_rounds = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def stage(self) -> ShopStage:
        return self._stage

    @property
    def current_round(self) -> Optional[Round]:
        return self._round

    @property
    def price(self) -> Optional[int]:
        return self._round.price if self._round else None

    @property
    def snapshot(self) -> Optional[TransactionSnapshot]:
        return self._snapshot

    @property
    def paid_so_far(self) -> Optional[int]:
        """Сколько уже забрано из лотка в CHANGE_ACTION."""
        if self._snapshot is None:
            return None
        return self._snapshot.paid_so_far(self.ledger.total())

    @property
    def is_animating(self) -> bool:
        return self.ledger.is_locked

    @property
    def round_complete(self) -> bool:
        """Раунд завершён, ждём паузу показа перед следующим."""
        return self._round_complete

    def set_change_mode(self, enabled: bool) -> None:
        self.change_mode_enabled = enabled

    def set_voice_feedback(self, enabled: bool) -> None:
        self.voice_feedback_enabled = enabled

    # -------------------------------------------------------------------------
    # Player operations
    # -------------------------------------------------------------------------

    def start_round(self, price_range: Union[PriceRange, str, None] = DEFAULT_PRICE_RANGE_ID) -> ShopActionResult:
        """SETUP → BUYING.

        Args:
            price_range: диапазон или его id; None — все товары

        Raises:
            NoProductsInRange: пул диапазона пуст (стадия остаётся SETUP)
        """
        previous = self._stage
        if self.is_animating:
            return self._reject("ledger_locked", previous)
        if previous != ShopStage.SETUP:
            return self._reject(f"start_not_allowed_in_{previous.value}", previous)

        if isinstance(price_range, str):
            price_range = self.catalog.price_range(price_range)

        pool = self.round_generator.build_pool(self.catalog.products, price_range)
        range_id = price_range.id if price_range else None
        try:
            new_round = self.round_generator.next_round(pool, range_id)
        except NoProductsInRange:
            self.feedback = render(FEEDBACK_NO_PRODUCTS, range=range_id or "all")
            log.warning("Cannot start round: no products in range %s", range_id)
            raise

        self._price_range = price_range
        self._pool = pool
        self._begin_round(new_round)
        return self._result(True, "round_started", previous, details=f"price_range={range_id}")

    def return_to_setup(self) -> ShopActionResult:
        """Возврат к настройкам (отклоняется во время анимации)."""
        previous = self._stage
        if self.is_animating:
            return self._reject("ledger_locked", previous)

        self._cancel_completion()
        self.notifier.cancel_pending()
        self.ledger.clear()
        self._stage = ShopStage.SETUP
        self._round = None
        self._snapshot = None
        self._round_complete = False
        self.feedback = ""
        log.info("Stage %s → SETUP", previous.value)
        return self._result(True, "returned_to_setup", previous)

    def add_denomination(self, value: int) -> ShopActionResult:
        """Игрок кладёт номинал из кошелька в лоток (только BUYING).

        Raises:
            ValueError: номинала нет в каталоге
        """
        previous = self._stage

        rejection = self._mutation_rejection(allowed=(ShopStage.BUYING,))
        if rejection:
            return self._reject(rejection, previous)

        denomination = self.catalog.denomination_for(value)

        self.ledger.add(denomination)
        total = self.ledger.total()
        if self.voice_feedback_enabled:
            self.notifier.notify(render(self.catalog.voice.shop_total, total=total))
        return self._result(True, "added", previous, details=f"+{value} → {total}")

    def remove_denomination(self, index: int) -> ShopActionResult:
        """Игрок убирает номинал из лотка (BUYING и CHANGE_ACTION)."""
        previous = self._stage

        rejection = self._mutation_rejection(allowed=(ShopStage.BUYING, ShopStage.CHANGE_ACTION))
        if rejection:
            return self._reject(rejection, previous)

        removed = self.ledger.remove(index)
        if removed is None:
            return self._reject("invalid_index", previous)

        if previous == ShopStage.BUYING:
            return self._result(True, "removed", previous, details=f"-{removed.value}")

        return self._on_change_removal(removed, previous)

    def reset_tray(self) -> ShopActionResult:
        """Очистка лотка (только BUYING)."""
        previous = self._stage

        rejection = self._mutation_rejection(allowed=(ShopStage.BUYING,))
        if rejection:
            return self._reject(rejection, previous)

        self.ledger.clear()
        self.feedback = ""
        return self._result(True, "tray_reset", previous)

    async def pay(self) -> ShopActionResult:
        """Игрок нажимает "оплатить".

        Raises:
            DecompositionIncomplete: переплату нельзя разложить доступными
                номиналами (стадия и лоток не меняются)
        """
        previous = self._stage

        rejection = self._mutation_rejection(allowed=(ShopStage.BUYING,))
        if rejection:
            return self._reject(rejection, previous)

        price = self._round.price
        evaluation = self.evaluator.evaluate(
            ledger_total=self.ledger.total(),
            price=price,
            change_mode_enabled=self.change_mode_enabled,
        )
        log.info("Payment: %s (%s)", evaluation.outcome.value, evaluation.details)
        voice = self.catalog.voice

        if evaluation.outcome == PaymentOutcome.EXACT:
            self.feedback = voice.correct
            self.notifier.notify(voice.correct)
            self._complete_round()
            return self._result(True, "exact", previous, details=evaluation.details, payment=evaluation)

        if evaluation.outcome == PaymentOutcome.SHORT:
            self.feedback = render(FEEDBACK_SHORTAGE, diff=evaluation.diff)
            self.notifier.notify(render(voice.shop_shortage, diff=evaluation.diff))
            return self._result(True, "short", previous, details=evaluation.details, payment=evaluation)

        if evaluation.outcome == PaymentOutcome.OVER_REJECTED:
            self.feedback = voice.shop_over
            self.notifier.notify(voice.shop_over)
            return self._result(True, "over_rejected", previous, details=evaluation.details, payment=evaluation)

        # OVER_ACCEPTED → разложение + анимация → CHANGE_ACTION
        breakdown = self._decompose_or_surface(
            lambda: decompose(
                price,
                evaluation.ledger_total,
                self.catalog.denominations,
                self.config.canonical_price_values,
            )
        )
        self._snapshot = TransactionSnapshot(initial_payment_total=evaluation.ledger_total)
        self.feedback = render(FEEDBACK_CHANGE_INSTRUCTION, price=price)
        self.notifier.notify(render(voice.shop_change_mode_prompt, price=price))

        sequence = await self.sequencer.replay(
            self.ledger, breakdown.sequence, on_item=self._announce_total
        )
        if not sequence.started:
            self._snapshot = None
            return self._reject("ledger_locked", previous)

        self._stage = ShopStage.CHANGE_ACTION
        log.info(
            "Stage BUYING → CHANGE_ACTION: initial_payment_total=%d, price=%d",
            self._snapshot.initial_payment_total,
            price,
        )
        return self._result(
            True, "over_accepted", previous, details=sequence.details, payment=evaluation
        )

    async def reveal_solution(self) -> ShopActionResult:
        """Показ правильной оплаты: точное разложение цены проигрывается в лоток.

        Стадия остаётся BUYING, игрок сам нажимает "оплатить".

        Raises:
            DecompositionIncomplete: цену нельзя разложить доступными номиналами
        """
        previous = self._stage

        rejection = self._mutation_rejection(allowed=(ShopStage.BUYING,))
        if rejection:
            return self._reject(rejection, previous)

        price = self._round.price
        solution = self._decompose_or_surface(
            lambda: solve_exact_payment(price, self.catalog.denominations)
        )
        self.feedback = ""
        self.notifier.notify(self.catalog.voice.shop_reveal)

        sequence = await self.sequencer.replay(self.ledger, solution, on_item=self._announce_total)
        if not sequence.started:
            return self._reject("ledger_locked", previous)
        return self._result(True, "solution_revealed", previous, details=sequence.details)

    async def wait_until_idle(self) -> None:
        """Ожидание запланированного перехода к следующему раунду."""
        if self._completion_task is not None:
            await self._completion_task

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _mutation_rejection(self, allowed: tuple[ShopStage, ...]) -> Optional[str]:
        """Причина отклонения изменяющей операции; None — операция допустима."""
        if self.is_animating:
            return "ledger_locked"
        if self._stage not in allowed or self._round is None:
            return f"not_allowed_in_{self._stage.value}"
        if self._round_complete:
            return "round_complete"
        return None

    def _on_change_removal(self, removed: Denomination, previous: ShopStage) -> ShopActionResult:
        progress = self.evaluator.evaluate_change_progress(
            self._snapshot, self.ledger.total(), self._round.price
        )
        voice = self.catalog.voice

        if progress.outcome == ChangeProgressOutcome.COMPLETE:
            text = render(voice.shop_change_complete, change=progress.change_returned)
            self.feedback = text
            self.notifier.notify(text)
            self._complete_round()
            reason = "change_complete"
        elif progress.outcome == ChangeProgressOutcome.REMOVED_TOO_MUCH:
            text = render(voice.shop_change_mode_prompt, price=progress.price)
            self.feedback = render(FEEDBACK_CHANGE_INSTRUCTION, price=progress.price)
            self.notifier.notify(text)
            reason = "removed_too_much"
        else:
            text = render(
                voice.shop_change_progress,
                paid=progress.paid_so_far,
                remaining=progress.remaining_to_remove,
            )
            self.feedback = text
            self.notifier.notify(text)
            reason = "keep_removing"

        return self._result(
            True,
            reason,
            previous,
            details=f"-{removed.value}: {progress.details}",
            change_progress=progress,
        )

    def _decompose_or_surface(self, compute: Callable[[], _T]) -> _T:
        """Разложение; DecompositionIncomplete показывается игроку и пробрасывается."""
        try:
            return compute()
        except DecompositionIncomplete as e:
            self.feedback = render(FEEDBACK_DECOMPOSITION_FAILED, amount=e.amount)
            self.notifier.notify(self.feedback)
            log.error("Decomposition failed (%s phase): %s", e.phase, e)
            raise

    def _announce_total(self, denomination: Denomination, total: int) -> None:
        if self.voice_feedback_enabled:
            self.notifier.notify(render(self.catalog.voice.shop_total, total=total))

    def _begin_round(self, new_round: Round) -> None:
        previous = self._stage
        self._round = new_round
        self._snapshot = None
        self._round_complete = False
        self._completion_task = None
        self.ledger.clear()
        self.feedback = ""
        self._stage = ShopStage.BUYING

        product = new_round.product
        self.notifier.notify(
            render(self.catalog.voice.shop_welcome, name=product.name, price=product.price),
            delay_sec=self.config.welcome_delay_sec,
        )
        log.info("Stage %s → BUYING: %s (%d)", previous.value, product.name, product.price)

    def _complete_round(self) -> None:
        """Раунд завершён; следующий начнётся после паузы показа."""
        self._round_complete = True
        self.completed_rounds += 1

        self._completion_task = asyncio.get_running_loop().create_task(self._advance_after_delay())

    async def _advance_after_delay(self) -> None:
        await self._sleep(self.config.completion_display_delay_sec)
        self._advance_round()

    def _advance_round(self) -> None:
        if self._stage == ShopStage.SETUP or not self._round_complete:
            return
        new_round = self.round_generator.next_round(
            self._pool, self._price_range.id if self._price_range else None
        )
        self._begin_round(new_round)

    def _cancel_completion(self) -> None:
        if self._completion_task is not None and not self._completion_task.done():
            self._completion_task.cancel()
        self._completion_task = None

    def _reject(self, reason: str, previous: ShopStage) -> ShopActionResult:
        log.debug("Operation rejected: %s (stage=%s)", reason, previous.value)
        return self._result(False, reason, previous)

    def _result(
        self,
        accepted: bool,
        reason: str,
        previous: ShopStage,
        details: str = "",
        payment: Optional[PaymentEvaluation] = None,
        change_progress: Optional[ChangeProgress] = None,
    ) -> ShopActionResult:
        return ShopActionResult(
            accepted=accepted,
            reason=reason,
            previous_stage=previous,
            stage=self._stage,
            transition_occurred=previous != self._stage,
            ledger_total=self.ledger.total(),
            details=details,
            payment=payment,
            change_progress=change_progress,
        )
