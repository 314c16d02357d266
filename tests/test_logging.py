"""
Tests for logging configuration (dev_inventory/logging_config.py).
"""

import logging

import pytest

from dev_inventory.common import vlog
from dev_inventory.logging_config import ColoredFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("dev_inventory")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_default_level(self, monkeypatch):
        monkeypatch.delenv("DEV_INVENTORY_LOG_LEVEL", raising=False)
        logger = setup_logging()
        assert logger.name == "dev_inventory"
        assert logger.level == logging.INFO

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("DEV_INVENTORY_LOG_LEVEL", "warning")
        assert setup_logging().level == logging.WARNING

    def test_verbose(self):
        assert setup_logging(verbose=True).level == logging.DEBUG

    def test_quiet_has_no_console_handler(self):
        logger = setup_logging(quiet=True)
        assert logger.level == logging.WARNING
        assert not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
                       for h in logger.handlers)

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging(level="LOUD")

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "inventory.log"
        logger = setup_logging(log_file=str(log_file), quiet=True)
        logger.warning("written to file")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_propagate(self, caplog):
        setup_logging(propagate=True)
        with caplog.at_level(logging.INFO, logger="dev_inventory"):
            logging.getLogger("dev_inventory.engine").info("probe done")
        assert "probe done" in caplog.text

    def test_get_logger(self):
        assert get_logger().name == "dev_inventory"


class TestColoredFormatter:
    """Level tag formatting."""

    def _record(self, level=logging.WARNING):
        return logging.LogRecord("dev_inventory", level, __file__, 1, "hello", None, None)

    def test_colors(self):
        text = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=True).format(self._record())
        assert text.startswith("\033[33mWARNING")
        assert text.endswith("hello")

    def test_plain(self):
        text = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=False).format(self._record())
        assert text == "WARNING hello"


class TestVlog:
    """vlog gating."""

    def test_silent_by_default(self, monkeypatch, caplog):
        monkeypatch.delenv("DEV_INVENTORY_DEBUG", raising=False)
        setup_logging(propagate=True)
        with caplog.at_level(logging.INFO, logger="dev_inventory"):
            vlog("hidden")
        assert "hidden" not in caplog.text

    def test_verbose(self, caplog):
        setup_logging(propagate=True)
        with caplog.at_level(logging.INFO, logger="dev_inventory"):
            vlog("shown", verbose=True)
        assert "shown" in caplog.text

    def test_debug_env(self, monkeypatch, caplog):
        monkeypatch.setenv("DEV_INVENTORY_DEBUG", "1")
        setup_logging(propagate=True)
        with caplog.at_level(logging.INFO, logger="dev_inventory"):
            vlog("from env")
        assert "from env" in caplog.text
