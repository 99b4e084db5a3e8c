"""
Structured Logging — JSON Output for Production

Configures Python logging to emit structured JSON logs.
Each log entry includes timestamp, level, module, and
any additional context fields.

Usage:
    from reasonbridge.logging import get_logger
    logger = get_logger("feedback")
    logger.info("Analysis complete", extra={"feedback_type": FeedbackType.FALLACY, "confidence": 0.78})

Enum fields are logged by value and scores at four decimals, in both
formats. The text format appends context as key=value pairs.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from enum import Enum


LOG_LEVEL = os.getenv("REASONBRIDGE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("REASONBRIDGE_LOG_FORMAT", "json")  # "json" or "text"

_EXTRA_FIELDS = (
    "feedback_type", "confidence", "detections", "topic_id",
    "proposition_count", "cluster_count", "duration_ms", "status_code",
    "method", "path", "error", "error_type",
)

# Scores are logged at the precision they are reported with
_SCORE_FIELDS = frozenset({"confidence"})
_SCORE_DIGITS = 4


def _log_value(key: str, value):
    """Plain JSON value for an extra field: enums by value, scores rounded."""
    if isinstance(value, Enum):
        return value.value
    if key in _SCORE_FIELDS and isinstance(value, float):
        return round(value, _SCORE_DIGITS)
    if isinstance(value, (tuple, list)):
        return [_log_value(key, v) for v in value]
    return value


def extract_context(record: logging.LogRecord) -> dict:
    """The whitelisted extra fields present on a record, normalized."""
    context = {}
    for key in _EXTRA_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            context[key] = _log_value(key, val)
    return context


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(extract_context(record))

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development. Context fields trail as key=value."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = extract_context(record)
        if not context:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


def setup_logging():
    """Configure the package logger. Call once at app startup."""
    root = logging.getLogger("reasonbridge")
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if LOG_FORMAT == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the reasonbridge namespace."""
    return logging.getLogger(f"reasonbridge.{name}")
