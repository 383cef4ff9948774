"""Round Generator — выбор товара для нового раунда."""

import random
import time
from typing import Callable, Iterable, Optional, Sequence

from src.core.domain import PriceRange, Product, Round, filter_products_by_range
from src.core.log import get_logger

log = get_logger(__name__)


class NoProductsInRange(LookupError):
    """В выбранном ценовом диапазоне нет ни одного товара."""

    def __init__(self, price_range_id: Optional[str] = None):
        self.price_range_id = price_range_id
        super().__init__(f"No products in price range: {price_range_id or 'unfiltered'}")


def _now_ms() -> int:
    return int(time.time() * 1000)


class RoundGenerator:
    """Равномерный случайный выбор товара из пула."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Args:
            rng: генератор случайных чисел (seed в тестах)
            clock: текущее время UTC в миллисекундах
        """
        self._rng = rng or random.Random()
        self._clock = clock

    def build_pool(
        self, products: Iterable[Product], price_range: Optional[PriceRange]
    ) -> list[Product]:
        """Пул товаров диапазона (новый список, каталог не изменяется)."""
        return filter_products_by_range(products, price_range)

    def next_round(
        self, pool: Sequence[Product], price_range_id: Optional[str] = None
    ) -> Round:
        """Новый раунд.

        Raises:
            NoProductsInRange: если пул пуст
        """
        if not pool:
            raise NoProductsInRange(price_range_id)

        product = self._rng.choice(list(pool))
        log.info("New round: %s (%d)", product.name, product.price)
        return Round(product=product, started_at_ts_utc_ms=self._clock())
