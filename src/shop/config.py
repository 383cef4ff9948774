"""Конфигурация игры "Магазин": режимы и фиксированные тайминги."""

from dataclasses import dataclass

from src.core.math.change_decomposition import CANONICAL_PRICE_VALUES_DEFAULT


@dataclass(frozen=True)
class ShopConfig:
    """Конфигурация раунда покупки.

    - change_mode_enabled: режим сдачи (переплата → упражнение "забери цену")
    - voice_feedback_enabled: озвучка текущей суммы лотка при добавлении
    - completion_display_delay_sec: показ "Отлично!" перед следующим раундом
    - welcome_delay_sec: задержка приветственной фразы нового раунда
    - canonical_price_values: подмножество номиналов для разложения цены
    """
    change_mode_enabled: bool = False
    voice_feedback_enabled: bool = True
    completion_display_delay_sec: float = 3.0
    welcome_delay_sec: float = 0.5
    canonical_price_values: tuple[int, ...] = CANONICAL_PRICE_VALUES_DEFAULT

    def __post_init__(self):
        if self.completion_display_delay_sec < 0:
            raise ValueError(
                f"completion_display_delay_sec must be non-negative, got {self.completion_display_delay_sec}"
            )
        if self.welcome_delay_sec < 0:
            raise ValueError(f"welcome_delay_sec must be non-negative, got {self.welcome_delay_sec}")
        if not self.canonical_price_values:
            raise ValueError("canonical_price_values cannot be empty")
        if any(v <= 0 for v in self.canonical_price_values):
            raise ValueError(
                f"canonical_price_values must be positive, got {self.canonical_price_values}"
            )
