"""Tests for structured logging."""

import logging

import orjson
import pytest

from spa_chat.core.logging import JsonFormatter, configure_logging


def test_json_formatter_copies_context_fields() -> None:
    record = logging.LogRecord("spa_chat.rag", logging.WARNING, __file__, 1, "embed failed: %s", ("boom",), None)
    record.ctx_operation = "embed"
    line = orjson.loads(JsonFormatter().format(record))
    assert line["message"] == "embed failed: boom"
    assert line["level"] == "WARNING"
    assert line["ctx_operation"] == "embed"


def test_configure_logging_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPA_LOG_LEVEL", "debug")
    try:
        configure_logging()
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        configure_logging("INFO")
