"""Tender Ledger — лоток оплаты с эксклюзивной блокировкой.

Упорядоченная последовательность ссылок на номиналы, которые игрок положил
в лоток. Сумма всегда пересчитывается суммированием.

Блокировка:
- asyncio.Lock захватывается Animation Sequencer'ом на всё время проигрывания
- add/remove/clear игрока при захваченной блокировке отклоняются (no-op, без очереди)
- запись под блокировкой идёт только через LedgerWriter
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from src.core.domain.denomination import Denomination, total_value
from src.core.log import get_logger

log = get_logger(__name__)


class TenderLedger:
    """Лоток оплаты."""

    def __init__(self):
        self._items: list[Denomination] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[Denomination, ...]:
        """Снапшот содержимого в порядке добавления."""
        return tuple(self._items)

    @property
    def is_locked(self) -> bool:
        return self._lock.locked()

    def total(self) -> int:
        return total_value(self._items)

    def add(self, denomination: Denomination) -> bool:
        """Добавление в конец лотка. False если лоток заблокирован."""
        if self.is_locked:
            log.debug("Ledger locked, add(%s) rejected", denomination.value)
            return False
        self._items.append(denomination)
        return True

    def remove(self, index: int) -> Optional[Denomination]:
        """
        Удаление по позиции.

        Returns:
            Удалённый номинал; None если лоток заблокирован или индекс
            вне диапазона (устаревшее действие UI)
        """
        if self.is_locked:
            log.debug("Ledger locked, remove(%d) rejected", index)
            return None
        if not 0 <= index < len(self._items):
            log.debug("remove(%d) ignored: ledger has %d items", index, len(self._items))
            return None
        return self._items.pop(index)

    def clear(self) -> bool:
        """Очистка лотка. False если лоток заблокирован."""
        if self.is_locked:
            log.debug("Ledger locked, clear() rejected")
            return False
        self._items.clear()
        return True

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator["LedgerWriter"]:
        """
        Эксклюзивный доступ к лотку на время блока.

        Захват без ожидания при свободной блокировке: между проверкой
        is_locked и входом в блок другие корутины не выполняются.
        """
        async with self._lock:
            yield LedgerWriter(self._items)


class LedgerWriter:
    """Запись в лоток под блокировкой (только для Animation Sequencer)."""

    def __init__(self, items: list[Denomination]):
        self._items = items

    def append(self, denomination: Denomination) -> int:
        """Добавление номинала. Returns: новая сумма лотка."""
        self._items.append(denomination)
        return total_value(self._items)

    def clear(self) -> None:
        self._items.clear()
