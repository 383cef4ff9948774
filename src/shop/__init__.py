"""Shop — модуль покупки: лоток, оплата, режим сдачи, анимация.

- Tender Ledger с эксклюзивной блокировкой
- Payment Evaluator (EXACT / SHORT / OVER)
- Animation Sequencer (пошаговое проигрывание breakdown)
- Round Generator
- Shop State Machine (SETUP → BUYING → CHANGE_ACTION)
"""

from .animation import AnimationSequencer, SequenceResult, SequencerConfig
from .catalog import (
    DEFAULT_DENOMINATIONS,
    DEFAULT_PRICE_RANGES,
    DEFAULT_PRODUCTS,
    CatalogConfigurationError,
    ShopCatalog,
    default_catalog,
    load_catalog,
    load_catalog_file,
)
from .config import ShopConfig
from .ledger import LedgerWriter, TenderLedger
from .payment import (
    ChangeProgress,
    ChangeProgressOutcome,
    PaymentEvaluation,
    PaymentEvaluator,
    PaymentOutcome,
)
from .round_generator import NoProductsInRange, RoundGenerator
from .state_machine import ShopActionResult, ShopGame, ShopStage
from .voice import LoggingSpeaker, Speaker, SupersedingNotifier, VoicePhrases, render

__all__ = [
    "AnimationSequencer",
    "SequenceResult",
    "SequencerConfig",
    "DEFAULT_DENOMINATIONS",
    "DEFAULT_PRICE_RANGES",
    "DEFAULT_PRODUCTS",
    "CatalogConfigurationError",
    "ShopCatalog",
    "default_catalog",
    "load_catalog",
    "load_catalog_file",
    "ShopConfig",
    "LedgerWriter",
    "TenderLedger",
    "ChangeProgress",
    "ChangeProgressOutcome",
    "PaymentEvaluation",
    "PaymentEvaluator",
    "PaymentOutcome",
    "NoProductsInRange",
    "RoundGenerator",
    "ShopActionResult",
    "ShopGame",
    "ShopStage",
    "LoggingSpeaker",
    "Speaker",
    "SupersedingNotifier",
    "VoicePhrases",
    "render",
]
