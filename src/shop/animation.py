"""Animation Sequencer — пошаговое проигрывание breakdown-списка в лоток.

Контракт:
- очищает лоток, затем для каждого номинала по порядку:
  полёт (flight_duration_sec) → добавление в лоток + уведомление о сумме
  → пауза (inter_item_pause_sec)
- держит эксклюзивную блокировку лотка на всё время проигрывания
- номинал i+1 никогда не появляется в лотке раньше номинала i
- отмены нет: начатая последовательность доигрывается до конца
- повторный запуск при активной последовательности — no-op
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from src.core.domain.denomination import Denomination
from src.core.log import get_logger
from src.shop.ledger import TenderLedger

log = get_logger(__name__)

# (номинал, новая сумма лотка)
ItemCallback = Callable[[Denomination, int], None]


@dataclass(frozen=True)
class SequencerConfig:
    """Фиксированные тайминги анимации (секунды)."""
    flight_duration_sec: float = 0.6
    inter_item_pause_sec: float = 0.2

    def __post_init__(self):
        if self.flight_duration_sec < 0:
            raise ValueError(f"flight_duration_sec must be non-negative, got {self.flight_duration_sec}")
        if self.inter_item_pause_sec < 0:
            raise ValueError(f"inter_item_pause_sec must be non-negative, got {self.inter_item_pause_sec}")


@dataclass(frozen=True)
class SequenceResult:
    """Результат проигрывания."""

    started: bool
    items_placed: int
    ledger_total: int

    # Для отладки
    details: str


class AnimationSequencer:
    """Кооперативная задача проигрывания номиналов в лоток."""

    def __init__(
        self,
        config: Optional[SequencerConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            config: тайминги анимации
            sleep: таймер ожидания (подменяется в тестах)
        """
        self.config = config or SequencerConfig()
        self._sleep = sleep
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def replay(
        self,
        ledger: TenderLedger,
        breakdown: Sequence[Denomination],
        on_item: Optional[ItemCallback] = None,
    ) -> SequenceResult:
        """Проигрывание breakdown-списка в лоток.

        Args:
            ledger: лоток оплаты
            breakdown: номиналы в порядке появления
            on_item: уведомление о текущей сумме после каждого номинала

        Returns:
            SequenceResult; started=False если лоток уже заблокирован
        """
        if self._running or ledger.is_locked:
            log.debug("Sequence already running, replay of %d items rejected", len(breakdown))
            return SequenceResult(
                started=False,
                items_placed=0,
                ledger_total=ledger.total(),
                details="ledger_locked",
            )

        items = list(breakdown)
        placed = 0
        self._running = True
        try:
            async with ledger.exclusive() as writer:
                writer.clear()
                for denomination in items:
                    await self._sleep(self.config.flight_duration_sec)
                    total = writer.append(denomination)
                    placed += 1
                    if on_item is not None:
                        on_item(denomination, total)
                    await self._sleep(self.config.inter_item_pause_sec)
        finally:
            self._running = False

        log.debug("Sequence finished: %d items, total=%d", placed, ledger.total())
        return SequenceResult(
            started=True,
            items_placed=placed,
            ledger_total=ledger.total(),
            details=f"Replayed {placed} items: {[d.value for d in items]}",
        )
