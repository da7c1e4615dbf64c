"""Logging helpers for sparrowsql.

Library modules log through :func:`get_logger`, which places every logger
under the ``sparrowsql`` namespace. Nothing is emitted until the application
configures handlers, either on its own or with :func:`configure_logging`.

Records may carry an ``extra_fields`` mapping, e.g. the SQL text and driver
kind of an executed statement. :class:`StructuredFormatter` merges it into the
JSON line it writes.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING, Any, Final

from sparrowsql._serialization import encode_json

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = ("ROOT_LOGGER_NAME", "StructuredFormatter", "configure_logging", "get_logger")

ROOT_LOGGER_NAME: Final = "sparrowsql"
PLAIN_FORMAT: Final = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            entry.update(extra_fields)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return encode_json(entry)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the ``sparrowsql`` namespace.

    Args:
        name: Dotted suffix such as ``"driver"``. Names already starting with
            ``sparrowsql`` are used as given; ``None`` returns the root logger.
    """
    if name is None or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str = "WARNING", format_style: str = "simple", stream: IO[str] | None = None) -> None:
    """Send sparrowsql log records to ``stream``.

    Handlers installed by an earlier call are replaced, and records stop
    propagating to the root logger.

    Args:
        level: Level name, e.g. ``"DEBUG"``.
        format_style: ``"structured"`` for JSON lines, ``"simple"`` for plain text.
        stream: Target stream, standard error by default.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(StructuredFormatter() if format_style == "structured" else logging.Formatter(PLAIN_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())
    root_logger.propagate = False
    root_logger.debug("Logging configured", extra={"extra_fields": {"level": level, "format_style": format_style}})
