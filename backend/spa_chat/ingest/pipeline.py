"""Knowledge ingestion jobs: seed, backfill, re-embed."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from spa_chat.core.config import Settings
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import KNOWLEDGE_CHUNKS
from spa_chat.db.knowledge import KnowledgeRepository
from spa_chat.ingest.chunker import chunk_markdown
from spa_chat.ingest.types import IngestError, IngestStats
from spa_chat.models.entities import KnowledgeChunk
from spa_chat.rag.embeddings import EmbeddingClient
from spa_chat.utils.time import minutes_ago_ms

logger = get_logger(__name__)

INSERT_BATCH = 100
EMBED_BATCH = 64
REEMBED_LIMIT = 2000


class KnowledgeIngestor:
    """Coordinate chunking, embeddings, and persistence of the knowledge table."""

    def __init__(self, knowledge: KnowledgeRepository, embedder: EmbeddingClient, settings: Settings) -> None:
        self.knowledge = knowledge
        self.embedder = embedder
        self.settings = settings

    def seed(self, path: Path, embed: bool = True) -> IngestStats:
        """Chunk a markdown file and insert every chunk.

        With *embed*, each chunk is embedded on the way in; a failed embedding
        leaves that row NULL for :meth:`backfill` to pick up later.
        """
        markdown = path.expanduser().read_text(encoding="utf-8")
        drafts = chunk_markdown(markdown, self.settings.kb_root_slug, self.settings.kb_chunk_chars)
        stats = IngestStats()
        rows: list[KnowledgeChunk] = []
        for draft in drafts:
            vector = self.embedder.embed(draft.text) if embed else None
            if vector is not None:
                stats.embedded += 1
            rows.append(KnowledgeChunk(id=None, slug=draft.slug, title=draft.title, text=draft.text, embedding=vector))

        for start in range(0, len(rows), INSERT_BATCH):
            batch = rows[start : start + INSERT_BATCH]
            stats.inserted += self.knowledge.insert_chunks(batch)
            stats.batches += 1
            logger.info("Inserted %s/%s chunks", stats.inserted, len(rows))
        self._update_chunk_metric()
        return stats

    def backfill(self, batch_size: int = EMBED_BATCH) -> IngestStats:
        """Embed rows whose embedding is NULL, batch by batch, until none remain.

        Raises:
            IngestError: the embedding provider failed; rows already embedded stay.
        """
        stats = IngestStats()
        while True:
            pending = self.knowledge.pending_embedding(batch_size)
            if not pending:
                break
            self._embed_batch(pending)
            stats.embedded += len(pending)
            stats.batches += 1
            logger.info("Embedded %s rows so far", stats.embedded)
        self._update_chunk_metric()
        return stats

    def reembed_recent(self, minutes: float, batch_size: int = EMBED_BATCH) -> IngestStats:
        """Re-embed rows with no embedding or updated within the last *minutes*."""
        rows = self.knowledge.updated_since(minutes_ago_ms(minutes), limit=REEMBED_LIMIT)
        work = [row for row in rows if row.text.strip()]
        stats = IngestStats(skipped=len(rows) - len(work))
        for start in range(0, len(work), batch_size):
            batch = work[start : start + batch_size]
            self._embed_batch(batch)
            stats.embedded += len(batch)
            stats.batches += 1
            logger.info("Re-embedded %s/%s", stats.embedded, len(work))
        return stats

    def _embed_batch(self, rows: Sequence[KnowledgeChunk]) -> None:
        vectors = self.embedder.embed_many([row.text for row in rows])
        if vectors is None:
            raise IngestError(f"Embedding failed for a batch of {len(rows)} rows")
        self.knowledge.set_embeddings([(row.id, vector) for row, vector in zip(rows, vectors) if row.id is not None])

    def _update_chunk_metric(self) -> None:
        KNOWLEDGE_CHUNKS.set(self.knowledge.count())


__all__ = ["KnowledgeIngestor", "INSERT_BATCH", "EMBED_BATCH", "REEMBED_LIMIT"]
