"""Tests for logging configuration."""

import json
import logging
import sys

from logsync.logging_config import JsonFormatter, setup_logging


def _our_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, "_logsync_handler", False)]


class TestJsonFormatter:
    def test_format_produces_json(self):
        formatter = JsonFormatter()
        record = logging.LogRecord(
            name="logsync.test",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg="hello %s",
            args=("world",),
            exc_info=None,
        )
        data = json.loads(formatter.format(record))
        assert data["level"] == "INFO"
        assert data["logger"] == "logsync.test"
        assert data["message"] == "hello world"

    def test_format_with_exception(self):
        formatter = JsonFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                name="logsync.test",
                level=logging.ERROR,
                pathname="test.py",
                lineno=1,
                msg="failed",
                args=(),
                exc_info=sys.exc_info(),
            )
        data = json.loads(formatter.format(record))
        assert "ValueError" in data["exception"]


class TestSetupLogging:
    def test_setup_default(self):
        setup_logging(level="DEBUG")
        logger = logging.getLogger("logsync")
        assert logger.level == logging.DEBUG
        # Cleanup
        logger.handlers.clear()

    def test_setup_json(self):
        setup_logging(level="INFO", json_output=True)
        logger = logging.getLogger("logsync")
        assert any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers)
        # Cleanup
        logger.handlers.clear()

    def test_no_duplicate_handlers(self):
        logger = logging.getLogger("logsync")
        logger.handlers.clear()
        setup_logging(level="INFO")
        setup_logging(level="INFO")
        setup_logging(level="INFO")
        assert len(_our_handlers(logger)) == 1
        # Cleanup
        logger.handlers.clear()

    def test_keeps_foreign_handlers(self):
        logger = logging.getLogger("logsync")
        logger.handlers.clear()
        foreign = logging.NullHandler()
        logger.addHandler(foreign)
        setup_logging(level="INFO")
        assert foreign in logger.handlers
        # Cleanup
        logger.handlers.clear()
