"""Logging setup for declguard.

Modules log through ``logging.getLogger(__name__)``; everything lands under
the ``declguard`` logger. The CLI calls :func:`configure_logging` once to
attach a handler writing to stderr, either as readable console lines or as
one JSON object per line for CI log collectors.

Example:
    >>> from declguard.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", format="json")
    >>> get_logger(__name__).info("Loaded declarations", extra={"count": 42})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER = "declguard"

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith("_")
    }


class ConsoleFormatter(logging.Formatter):
    """Human-readable single-line format with structured fields appended."""

    def __init__(self, timestamp_format: str = "%Y-%m-%d %H:%M:%S") -> None:
        super().__init__()
        self._timestamp_format = timestamp_format

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(self._timestamp_format)
        parts = [
            timestamp,
            f"[{record.levelname:<8}]",
            f"{record.name}:",
            record.getMessage(),
        ]

        fields = _extra_fields(record)
        if fields:
            parts.append(" ".join(f"{key}={value}" for key, value in fields.items()))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
            **_extra_fields(record),
        }

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            data["exception"] = {
                "type": type(error).__name__,
                "message": str(error),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(data, default=str)


def _remove_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, "_declguard_handler", False):
            logger.removeHandler(handler)
            handler.close()


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "console": ConsoleFormatter,
    "json": JsonFormatter,
}


def configure_logging(
    *,
    level: str | int = "WARNING",
    format: str = "console",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the ``declguard`` logger.

    Replaces any handler installed by an earlier call, so calling this more
    than once is safe.

    Args:
        level: Log level name or number.
        format: ``console`` or ``json``.
        stream: Output stream (stderr if None).

    Returns:
        The configured package logger.

    Raises:
        ValueError: If the format is unknown.
    """
    formatter_class = _FORMATTERS.get(format)
    if formatter_class is None:
        raise ValueError(f"Unknown log format: {format!r}. Available: {', '.join(_FORMATTERS)}")

    logger = logging.getLogger(ROOT_LOGGER)
    _remove_handlers(logger)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter_class())
    handler._declguard_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Remove handlers installed by :func:`configure_logging`."""
    logger = logging.getLogger(ROOT_LOGGER)
    _remove_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``declguard`` namespace.

    Args:
        name: Logger name (usually __name__).
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
