"""Тесты для Round Generator и голосовых уведомлений.

Coverage:
- Равномерный выбор из пула, NoProductsInRange
- Подстановка placeholders
- Fire-and-forget notifier: отмена предыдущей фразы, ошибки speaker'а
"""

import asyncio
import logging
import random

import pytest

from src.core.domain import PriceRange, Product
from src.shop.round_generator import NoProductsInRange, RoundGenerator
from src.shop.voice import (
    ANNOUNCED_HISTORY_SIZE,
    LoggingSpeaker,
    SupersedingNotifier,
    VoicePhrases,
    render,
)


@pytest.fixture
def products():
    return [
        Product(id="p1", name="漢堡", price=45),
        Product(id="p2", name="牛奶", price=32),
        Product(id="p3", name="玩具車", price=120),
    ]


class TestRoundGenerator:
    """Тесты генератора раундов."""

    def test_next_round_from_pool(self, products):
        generator = RoundGenerator(rng=random.Random(7), clock=lambda: 1700000000000)

        game_round = generator.next_round(products)

        assert game_round.product in products
        assert game_round.started_at_ts_utc_ms == 1700000000000

    def test_all_products_reachable(self, products):
        generator = RoundGenerator(rng=random.Random(42))
        picked = {generator.next_round(products).product.id for _ in range(200)}
        assert picked == {"p1", "p2", "p3"}

    def test_build_pool_filters_by_range(self, products):
        generator = RoundGenerator()
        pool = generator.build_pool(products, PriceRange(id="41-50", min_price=41, max_price=50))
        assert [p.id for p in pool] == ["p1"]
        assert len(products) == 3

    def test_empty_pool_raises(self):
        with pytest.raises(NoProductsInRange) as exc_info:
            RoundGenerator().next_round([], "500-1000")
        assert exc_info.value.price_range_id == "500-1000"
        assert "500-1000" in str(exc_info.value)

    def test_no_products_is_lookup_error(self):
        assert issubclass(NoProductsInRange, LookupError)


class TestRender:
    """Тесты подстановки placeholders."""

    def test_welcome(self):
        phrases = VoicePhrases()
        assert render(phrases.shop_welcome, name="漢堡", price=45) == "我要買漢堡，45元"

    def test_repeated_placeholder(self):
        assert render("{total}/{total}", total=5) == "5/5"

    def test_unknown_placeholder_kept(self):
        assert render("{price} {unknown}", price=3) == "3 {unknown}"

    def test_default_phrases(self):
        phrases = VoicePhrases()
        assert render(phrases.shop_shortage, diff=5) == "還差 5 元"
        assert render(phrases.shop_change_complete, change=5) == "付好了！剩下5元是找的錢。"
        assert "{price}" in phrases.shop_change_mode_prompt

    def test_change_progress_reports_remaining(self):
        phrases = VoicePhrases()
        text = render(phrases.shop_change_progress, paid=10, remaining=35)
        assert text == "目前拿了10元，還要再拿35元。"


class RecordingSpeaker:
    """Speaker-заглушка."""

    def __init__(self, fail: bool = False):
        self.spoken: list[str] = []
        self.fail = fail

    async def speak(self, text: str) -> None:
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("tts unavailable")
        self.spoken.append(text)


class TestSupersedingNotifier:
    """Тесты fire-and-forget уведомлений."""

    def test_without_loop_only_records(self):
        speaker = RecordingSpeaker()
        notifier = SupersedingNotifier(speaker)

        notifier.notify("hello")

        assert list(notifier.announced) == ["hello"]
        assert notifier.last_text == "hello"
        assert not notifier.has_pending
        assert speaker.spoken == []

    def test_history_bounded(self):
        """История фраз не растёт бесконечно."""
        notifier = SupersedingNotifier(RecordingSpeaker())

        for i in range(ANNOUNCED_HISTORY_SIZE * 10):
            notifier.notify(f"{i}元")

        assert len(notifier.announced) == ANNOUNCED_HISTORY_SIZE
        assert notifier.last_text == f"{ANNOUNCED_HISTORY_SIZE * 10 - 1}元"

    @pytest.mark.asyncio
    async def test_speaks(self):
        speaker = RecordingSpeaker()
        notifier = SupersedingNotifier(speaker)

        notifier.notify("45元")
        for _ in range(3):
            await asyncio.sleep(0)

        assert speaker.spoken == ["45元"]

    @pytest.mark.asyncio
    async def test_new_phrase_cancels_pending(self):
        speaker = RecordingSpeaker()
        notifier = SupersedingNotifier(speaker)

        notifier.notify("first", delay_sec=10.0)
        notifier.notify("second")
        for _ in range(3):
            await asyncio.sleep(0)

        assert speaker.spoken == ["second"]
        assert list(notifier.announced) == ["first", "second"]

    @pytest.mark.asyncio
    async def test_speaker_failure_logged(self, caplog):
        notifier = SupersedingNotifier(RecordingSpeaker(fail=True))

        with caplog.at_level(logging.ERROR):
            notifier.notify("boom")
            for _ in range(3):
                await asyncio.sleep(0)

        assert "Speaker failed" in caplog.text
        assert not notifier.has_pending

    @pytest.mark.asyncio
    async def test_logging_speaker(self, caplog):
        with caplog.at_level(logging.INFO):
            await LoggingSpeaker().speak("付好了")
        assert "付好了" in caplog.text
