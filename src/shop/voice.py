"""Voice — шаблоны голосовых фраз и уведомления в режиме fire-and-forget.

Шаблоны содержат именованные placeholders ({price}, {diff}, {total}, ...),
ядро подставляет значения перед вызовом сервиса озвучки.

Сервис озвучки:
- notify() не ждёт результата и не повторяет попытки
- новая фраза отменяет ещё не произнесённую предыдущую (без очереди)
"""

import asyncio
from collections import deque
from typing import Awaitable, Callable, Final, Optional, Protocol

from pydantic import BaseModel, Field

from src.core.log import get_logger

log = get_logger(__name__)

# Сколько последних фраз хранит notifier
ANNOUNCED_HISTORY_SIZE: Final[int] = 32


# =============================================================================
# PHRASE TEMPLATES
# =============================================================================


class VoicePhrases(BaseModel):
    """
    Шаблоны голосовых фраз игры "Магазин".

    Placeholders:
    - shop_welcome: {name}, {price}
    - shop_total: {total}
    - shop_shortage: {diff}
    - shop_change_mode_prompt: {price}
    - shop_change_progress: {paid}, {remaining}
    - shop_change_complete: {change}
    """

    correct: str = Field(default="答對了！好棒！", description="Точная оплата")
    shop_welcome: str = Field(default="我要買{name}，{price}元", description="Приветствие раунда")
    shop_total: str = Field(default="{total}元", description="Текущая сумма лотка")
    shop_shortage: str = Field(default="還差 {diff} 元", description="Недоплата")
    shop_over: str = Field(
        default="付太多了，試試看能不能付剛好？", description="Переплата без режима сдачи"
    )
    shop_change_mode_prompt: str = Field(
        default="付太多了，我們來練習找錢。請拿走要付的{price}元。",
        description="Старт режима сдачи / забрали слишком много",
    )
    shop_change_progress: str = Field(
        default="目前拿了{paid}元，還要再拿{remaining}元。", description="Промежуточная подсказка в режиме сдачи"
    )
    shop_change_complete: str = Field(
        default="付好了！剩下{change}元是找的錢。", description="Завершение режима сдачи"
    )
    shop_reveal: str = Field(default="像這樣付就對了", description="Показ правильной оплаты")

    model_config = {"frozen": True}


def render(template: str, **values: object) -> str:
    """
    Подстановка значений во все вхождения {placeholder}.

    Неизвестные placeholders остаются как есть.

    Examples:
        >>> render("我要買{name}，{price}元", name="漢堡", price=45)
        '我要買漢堡，45元'
    """
    text = template
    for key, value in values.items():
        text = text.replace("{" + key + "}", str(value))
    return text


# =============================================================================
# SPEAKERS
# =============================================================================


class Speaker(Protocol):
    """Внешний сервис озвучки."""

    async def speak(self, text: str) -> None:
        ...


class LoggingSpeaker:
    """Speaker по умолчанию: только пишет фразу в лог."""

    async def speak(self, text: str) -> None:
        log.info("speak: %s", text)


# =============================================================================
# NOTIFIER
# =============================================================================


class SupersedingNotifier:
    """
    Fire-and-forget уведомления поверх Speaker.

    notify() синхронный: отменяет pending-фразу и планирует новую задачу
    в текущем event loop. Без запущенного loop фраза только фиксируется.
    """

    def __init__(
        self,
        speaker: Optional[Speaker] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._speaker = speaker or LoggingSpeaker()
        self._sleep = sleep
        self._pending: Optional[asyncio.Task] = None

        # Последние запрошенные фразы в порядке вызова notify()
        self.announced: deque[str] = deque(maxlen=ANNOUNCED_HISTORY_SIZE)

    @property
    def last_text(self) -> Optional[str]:
        return self.announced[-1] if self.announced else None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def notify(self, text: str, delay_sec: float = 0.0) -> None:
        """
        Запрос озвучки фразы.

        Args:
            text: Готовая фраза (placeholders уже подставлены)
            delay_sec: Задержка перед озвучкой
        """
        self.announced.append(text)
        self.cancel_pending()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running event loop, speech skipped: %s", text)
            return

        self._pending = loop.create_task(self._speak(text, delay_sec))

    def cancel_pending(self) -> None:
        """Отмена ещё не произнесённой фразы."""
        if self.has_pending:
            self._pending.cancel()
        self._pending = None

    async def _speak(self, text: str, delay_sec: float) -> None:
        if delay_sec > 0:
            await self._sleep(delay_sec)
        try:
            await self._speaker.speak(text)
        except asyncio.CancelledError:
            raise
        except Exception:
            # best-effort
            log.exception("Speaker failed for text: %s", text)
