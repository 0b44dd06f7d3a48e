"""Line formatting and file sinks for log instances."""

from __future__ import annotations

import logging
import pprint
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}
LEVEL_NAMES: dict[int, str] = {value: key for key, value in LEVELS.items()}

SEPARATOR = "\n\t"


def render_message(values: Iterable[Any]) -> str:
    """Join call arguments into one message; non-strings are pretty-printed."""
    parts = []
    for value in values:
        if isinstance(value, str):
            parts.append(value)
        else:
            try:
                parts.append(pprint.pformat(value))
            except Exception:
                parts.append(object.__repr__(value))
    return SEPARATOR.join(parts)


def format_timestamp(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return f"{dt:%m/%d/%y, %H:%M:%S}.{dt.microsecond // 1000:03d}"


class LineFormatter(logging.Formatter):
    """Formats ``<timestamp>::<level>::<message>``.

    The timestamp is taken from ``record.issued_at`` when present, so lines
    carry the time the call was made rather than the time it was written.
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = getattr(record, "issued_at", record.created)
        level = LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        return f"{format_timestamp(ts)}::{level}::{record.getMessage()}"


class PartitionFileHandler(logging.FileHandler):
    """Append-only file sink inside one session partition."""

    def __init__(self, filename: str) -> None:
        super().__init__(filename, mode="a", encoding="utf-8", delay=True)
        self.setFormatter(LineFormatter())

    def handleError(self, record: logging.LogRecord) -> None:
        logger.warning("Failed to append to %s", self.baseFilename, exc_info=True)


def console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(LineFormatter())
    return handler
