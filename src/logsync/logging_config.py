"""Diagnostics logging for logsync itself.

The ``logsync`` stdlib logger is the fallback channel: any failure on a
logging path (append, prune, archive, transport) is reported here instead
of being raised into application code.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

_HANDLER_MARKER = "_logsync_handler"


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured output."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(
                record.exc_info,
            )
        return json.dumps(log_entry)


def setup_logging(
    level: str = "WARNING",
    json_output: bool = False,
) -> None:
    """Configure the logsync diagnostics logger.

    Calling this more than once replaces the previous handler rather than
    stacking another one.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
        json_output: If True, use JSON formatter.
    """
    root = logging.getLogger("logsync")
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    setattr(handler, _HANDLER_MARKER, True)

    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.addHandler(handler)
