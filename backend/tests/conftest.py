"""Test fixtures for the spa chat backend."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Sequence

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from spa_chat.models.dto import Reply  # noqa: E402


class FakeCompletionClient:
    """Echoes the grounded system message back as the reply."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[list[dict[str, Any]]] = []
        self.error = error

    def complete(self, messages: Sequence[dict[str, Any]]) -> Reply:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return Reply(role="assistant", content=messages[0]["content"])


def _reset_dependencies() -> None:
    from spa_chat.api import dependencies as deps
    from spa_chat.core.config import get_settings

    if deps._DB is not None:
        deps._DB.close()
    deps.get_app_settings.cache_clear()
    get_settings.cache_clear()
    deps._DB = None
    deps._EMBEDDER = None
    deps._COMPLETION_CLIENT = None
    deps._BUSINESS_LOADER = None
    deps._CHAT_SERVICE = None
    deps._BOOKING_RELAY = None
    deps._INTENT_RULES = None


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("SPA_DB_PATH", str(tmp_path / "spa.db"))
    monkeypatch.setenv("SPA_OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("SPA_EMBEDDING_BACKEND", "hashed")
    monkeypatch.setenv("SPA_EMBEDDING_DIM", "256")
    for name in ("SPA_CONFIG", "OPENAI_API_KEY", "OPENAI_KEY", "SPA_INTENT_TABLE_PATH", "SPA_BOOKING_RELAY_URL"):
        monkeypatch.delenv(name, raising=False)

    _reset_dependencies()
    yield
    _reset_dependencies()


@pytest.fixture
def fake_completion() -> FakeCompletionClient:
    from spa_chat.api import dependencies as deps

    client = FakeCompletionClient()
    deps._COMPLETION_CLIENT = client
    return client


@pytest.fixture
def spa_business() -> dict[str, Any]:
    return {
        "name": "Serenity Spa",
        "address": "123 Wellness Boulevard, Serenity District, SD 12345",
        "hours": {"mon_fri": "09:00–19:00", "sat": "10:00–18:00", "sun": "Closed"},
        "policies": {"cancellation": "We kindly ask for 24 hours notice to cancel or reschedule."},
    }


@pytest.fixture(scope="session")
def sample_markdown() -> str:
    return (
        "# Serenity Spa Knowledge Base\n\n"
        "Welcome to the spa.\n\n"
        "## Gift Cards\n\n"
        "Gift cards are available in any amount and valid for 12 months.\n\n"
        "## Parking\n\n"
        "Street and lot parking are available near the entrance.\n"
    )
