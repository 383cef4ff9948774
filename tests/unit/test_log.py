"""Тесты для настройки логирования."""

import logging

import pytest

from src.core import log as shop_log


class TestResolveLogLevel:
    """Тесты выбора уровня логирования."""

    def test_explicit_level(self, monkeypatch):
        monkeypatch.setenv(shop_log.DEBUG_ENV_VAR, "1")
        assert shop_log.resolve_log_level(logging.WARNING) == logging.WARNING

    def test_debug_from_env(self, monkeypatch):
        monkeypatch.setenv(shop_log.DEBUG_ENV_VAR, "1")
        assert shop_log.resolve_log_level() == logging.DEBUG

    def test_default_info(self, monkeypatch):
        monkeypatch.delenv(shop_log.DEBUG_ENV_VAR, raising=False)
        assert shop_log.resolve_log_level() == logging.INFO


class TestConfigureLogging:
    """Тесты установки обработчика."""

    @pytest.fixture
    def clean_root(self, monkeypatch):
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        monkeypatch.setattr(shop_log, "_handler", None)
        yield root
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
        root.setLevel(level)

    def test_idempotent(self, clean_root):
        before = len(clean_root.handlers)

        shop_log.configure_logging(logging.INFO)
        shop_log.configure_logging(logging.DEBUG)

        assert len(clean_root.handlers) == before + 1
        assert clean_root.level == logging.DEBUG

    def test_format(self, clean_root):
        shop_log.configure_logging(logging.INFO)
        assert shop_log._handler in clean_root.handlers
        assert shop_log._handler.formatter._fmt == shop_log.LOG_FORMAT

    def test_get_logger_name(self):
        assert shop_log.get_logger("src.shop.ledger").name == "src.shop.ledger"
