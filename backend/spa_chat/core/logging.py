"""Structured logging for the spa chat service."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import orjson

LOG_LEVEL_ENV = "SPA_LOG_LEVEL"
CONTEXT_PREFIX = "ctx_"
# HTTP client libraries log every connection at DEBUG
_QUIET_LOGGERS = ("urllib3", "httpx")


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Record attributes prefixed with ``ctx_`` (passed through ``extra=``) are
    copied into the object so call sites can attach conversation ids,
    operation names and similar context.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in record.__dict__.items() if key.startswith(CONTEXT_PREFIX)
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode("utf-8")


def configure_logging(level: str | int | None = None) -> None:
    """Install the JSON handler on the root logger; level defaults to ``SPA_LOG_LEVEL`` or INFO."""
    root = logging.getLogger()
    root.setLevel(level if level is not None else os.environ.get(LOG_LEVEL_ENV, "INFO").upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers = [handler]
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = "spa_chat") -> logging.Logger:
    """Return a named logger, configuring the root logger on first use."""
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
