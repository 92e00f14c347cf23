"""
Structured Logging — Page-Level Context in Every Line

Everything the engine logs goes through the "derigo" logger tree.
Context travels as `extra=` keyword data (url, domain, action, reason,
truth_score, ...) and is rendered either as one JSON object per line
for production or as a readable line with key=value pairs for local
work.

Usage:
    from derigo.logging import get_logger
    logger = get_logger("analyzer")
    logger.info("Page analyzed", extra={"domain": "bbc.com", "action": "badge"})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from derigo.config import settings

ROOT_LOGGER = "derigo"

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

# Marks the handler installed by setup_logging so a second call replaces it
_HANDLER_FLAG = "_derigo_handler"


def log_context(record: logging.LogRecord) -> dict:
    """The `extra` fields attached to a record, in insertion order."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_") and value is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line; context fields sit beside the message."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in log_context(record).items():
            entry.setdefault(key, value)

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Development format: `12:00:01 INFO    derigo.analyzer  message  key=value ...`."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s  %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = log_context(record)
        if not context:
            return line
        return line + "  " + " ".join(f"{k}={v}" for k, v in context.items())


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Install the derigo handler. Call once at app startup.

    Safe to call again: only the handler this function installed is
    replaced, so handlers added by a host application or test harness
    stay in place.
    """
    root = logging.getLogger(ROOT_LOGGER)
    level = (level or settings.LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level, logging.INFO))

    for handler in [h for h in root.handlers if getattr(h, _HANDLER_FLAG, False)]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(TextFormatter() if (fmt or settings.LOG_FORMAT) == "text" else JSONFormatter())
    setattr(handler, _HANDLER_FLAG, True)
    root.addHandler(handler)

    # Per-request access lines duplicate the api logger's own entries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Named logger under the derigo tree, e.g. get_logger("cache") -> derigo.cache."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
