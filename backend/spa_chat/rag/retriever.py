"""Vector retriever over the knowledge table."""

from __future__ import annotations

from spa_chat.core.errors import UpstreamFailure
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import UPSTREAM_FAILURES
from spa_chat.db.knowledge import KnowledgeRepository
from spa_chat.models.entities import KnowledgeMatch
from spa_chat.rag.embeddings import EmbeddingClient

logger = get_logger(__name__)


class VectorRetriever:
    """Embeds a query and returns the closest knowledge passages.

    Never raises for "no results": a failed embedding, a failed search or
    nothing above the threshold all yield an empty list.
    """

    def __init__(self, knowledge: KnowledgeRepository, embedder: EmbeddingClient) -> None:
        self.knowledge = knowledge
        self.embedder = embedder

    def retrieve(self, query: str, top_k: int, threshold: float) -> list[KnowledgeMatch]:
        if not query.strip():
            return []
        vector = self.embedder.embed(query)
        if vector is None:
            return []
        try:
            matches = self.knowledge.match(vector, match_count=top_k, threshold=threshold)
        except Exception as exc:  # noqa: BLE001 - store errors degrade to "no context"
            failure = UpstreamFailure("match_knowledge", exc)
            logger.warning("%s", failure, extra={"ctx_operation": failure.operation})
            UPSTREAM_FAILURES.labels(operation=failure.operation).inc()
            return []
        ranked = sorted(
            (match for match in matches if match.similarity >= threshold),
            key=lambda match: match.similarity,
            reverse=True,
        )
        return ranked[:top_k]


__all__ = ["VectorRetriever"]
