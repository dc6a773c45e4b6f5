"""Best-effort conversation persistence.

Transcript writes are an audit side effect. Every operation returns a
:class:`PersistOutcome` the caller may inspect or ignore; failures are logged
and counted, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from spa_chat.core.errors import UpstreamFailure
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import UPSTREAM_FAILURES
from spa_chat.db.conversations import ConversationRepository
from spa_chat.models.entities import Role

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PersistOutcome:
    operation: str
    ok: bool
    error: str | None = None


class ConversationStore:
    def __init__(self, repository: ConversationRepository) -> None:
        self.repository = repository

    def start(self, conversation_id: str) -> PersistOutcome:
        return self._attempt("create_conversation", conversation_id, lambda: self.repository.create(conversation_id))

    def record(self, conversation_id: str, role: Role, content: str) -> PersistOutcome:
        return self._attempt(
            f"record_{role}_message",
            conversation_id,
            lambda: self.repository.append_message(conversation_id, role, content),
        )

    def _attempt(self, operation: str, conversation_id: str, action: Callable[[], object]) -> PersistOutcome:
        try:
            action()
        except Exception as exc:  # noqa: BLE001 - persistence never fails the request
            failure = UpstreamFailure(operation, exc)
            logger.warning(
                "%s",
                failure,
                extra={"ctx_operation": operation, "ctx_conversation_id": conversation_id},
            )
            UPSTREAM_FAILURES.labels(operation=operation).inc()
            return PersistOutcome(operation=operation, ok=False, error=str(exc))
        return PersistOutcome(operation=operation, ok=True)


__all__ = ["ConversationStore", "PersistOutcome"]
