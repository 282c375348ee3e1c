"""
Structured logging configuration for binforecast.

Provides JSON-formatted (one object per line) or human-readable logging with
extra-field filtering so that feature matrices, probability vectors and other
bulk numeric payloads never end up in log lines.

Usage:
    from binforecast.logging_config import setup_logging, get_logger

    setup_logging()  # Call once at startup
    logger = get_logger(__name__)
    logger.info("fit done", extra={"model_id": "v1", "loss": 0.41})
"""

from __future__ import annotations

import logging
import math
import sys
from datetime import UTC, datetime
from typing import Any

import numpy as np
import orjson

# Sequences longer than this are summarized instead of logged
MAX_LIST_ITEMS = 10
# Nested dict depth kept in extra fields
MAX_DEPTH = 3

# Extra-field names that carry bulk data and are always summarized
BULK_FIELDS: frozenset[str] = frozenset(
    {
        "X",
        "y",
        "features",
        "labels",
        "predictions",
        "probabilities",
        "outcomes",
    }
)

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


def _summarize(value: Any) -> str:
    if isinstance(value, np.ndarray):
        return f"[array:{'x'.join(str(d) for d in value.shape)} {value.dtype}]"
    return f"[list:{len(value)} items]"


def _scalar(value: float) -> float | str:
    # NaN/inf are not valid JSON
    if math.isfinite(value):
        return value
    return str(value)


def _filter_log_record(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Filter bulk payloads out of the extra fields of a log record.

    - numpy arrays and long lists/tuples become a short summary
    - fields named in BULK_FIELDS are always summarized when sequence-like
    - numpy scalars become Python scalars
    - nested dicts are filtered recursively up to MAX_DEPTH
    """
    if _depth > MAX_DEPTH:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}

    for key, value in record.items():
        if isinstance(value, np.generic):
            value = value.item()

        if isinstance(value, bool) or value is None or isinstance(value, int):
            filtered[key] = value
        elif isinstance(value, float):
            filtered[key] = _scalar(value)
        elif isinstance(value, str):
            filtered[key] = value
        elif isinstance(value, np.ndarray):
            filtered[key] = _summarize(value)
        elif isinstance(value, (list, tuple)):
            if key in BULK_FIELDS or len(value) > MAX_LIST_ITEMS:
                filtered[key] = _summarize(value)
            else:
                filtered[key] = [_scalar(v) if isinstance(v, float) else v for v in value]
        elif isinstance(value, dict):
            filtered[key] = _filter_log_record(value, _depth=_depth + 1)
        else:
            filtered[key] = str(value)

    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Output format:
    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        if extra:
            log_dict.update(_filter_log_record(extra))

        return orjson.dumps(log_dict, default=str).decode()


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development and CLI use."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single line with key=value extras."""
        base = f"{record.levelname:8s} {record.name}: {record.getMessage()}"

        extra = _extra_fields(record)
        if extra:
            filtered = _filter_log_record(extra)
            if filtered:
                extra_str = " ".join(f"{k}={v}" for k, v in filtered.items())
                base = f"{base} | {extra_str}"

        if record.exc_info:
            base = f"{base}\n{self.formatException(record.exc_info)}"

        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure logging for the application.

    Call once at startup. Replaces any handlers on the root logger.

    Args:
        level: Log level (default INFO).
        json_format: Use JSON formatter (default True).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically for __name__)."""
    return logging.getLogger(name)
