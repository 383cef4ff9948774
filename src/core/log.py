"""
Logging — единая точка получения логгеров

Модули получают логгер через get_logger(__name__). Обработчики настраиваются
один раз приложением (configure_logging); библиотечный код сам root-логгер
не трогает.

Уровень:
- SHOP_DEBUG=1 → DEBUG
- иначе → INFO
"""

import logging
import os
import sys
from typing import Final, Optional

LOG_FORMAT: Final[str] = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
DEBUG_ENV_VAR: Final[str] = "SHOP_DEBUG"

_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    """
    Логгер модуля.

    Example:
        log = get_logger(__name__)
        log.info("round started")
    """
    return logging.getLogger(name)


def resolve_log_level(level: Optional[int] = None) -> int:
    """Явный уровень, иначе из переменной окружения SHOP_DEBUG."""
    if level is not None:
        return level
    return logging.DEBUG if os.getenv(DEBUG_ENV_VAR, "0") == "1" else logging.INFO


def configure_logging(level: Optional[int] = None) -> None:
    """
    Установка консольного обработчика на root-логгер.

    Повторный вызов только обновляет уровень.

    Args:
        level: Уровень логирования (None — из SHOP_DEBUG)
    """
    global _handler

    log_level = resolve_log_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(_handler)

    _handler.setLevel(log_level)
