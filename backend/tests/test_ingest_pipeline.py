"""Tests for knowledge ingestion jobs."""

from pathlib import Path

import pytest

from spa_chat.core.config import Settings
from spa_chat.db.knowledge import KnowledgeRepository
from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.ingest.pipeline import KnowledgeIngestor
from spa_chat.ingest.types import IngestError
from spa_chat.rag.embeddings import HashedEmbeddingClient


class _FailingEmbedder:
    model = "failing"

    def embed(self, text):
        return None

    def embed_many(self, texts):
        return None


@pytest.fixture
def knowledge(tmp_path: Path) -> KnowledgeRepository:
    db = SQLiteDatabase(tmp_path / "kb.db")
    db.ensure_schema()
    return KnowledgeRepository(db)


@pytest.fixture
def kb_file(tmp_path: Path, sample_markdown: str) -> Path:
    path = tmp_path / "kb.md"
    path.write_text(sample_markdown, encoding="utf-8")
    return path


def test_seed_with_embeddings(knowledge: KnowledgeRepository, kb_file: Path) -> None:
    ingestor = KnowledgeIngestor(knowledge, HashedEmbeddingClient(dim=32), Settings())
    stats = ingestor.seed(kb_file)
    assert stats.inserted == 3
    assert stats.embedded == 3
    assert knowledge.count(embedded_only=True) == 3


def test_seed_then_backfill(knowledge: KnowledgeRepository, kb_file: Path) -> None:
    ingestor = KnowledgeIngestor(knowledge, HashedEmbeddingClient(dim=32), Settings())
    ingestor.seed(kb_file, embed=False)
    assert knowledge.count(embedded_only=True) == 0

    stats = ingestor.backfill(batch_size=2)
    assert stats.embedded == 3
    assert stats.batches == 2
    assert knowledge.pending_embedding(10) == []


def test_backfill_failure_raises(knowledge: KnowledgeRepository, kb_file: Path) -> None:
    ingestor = KnowledgeIngestor(knowledge, _FailingEmbedder(), Settings())
    ingestor.seed(kb_file)
    with pytest.raises(IngestError):
        ingestor.backfill()


def test_reembed_recent(knowledge: KnowledgeRepository, kb_file: Path) -> None:
    ingestor = KnowledgeIngestor(knowledge, HashedEmbeddingClient(dim=32), Settings())
    ingestor.seed(kb_file, embed=False)
    stats = ingestor.reembed_recent(15)
    assert stats.embedded == 3
    assert knowledge.count(embedded_only=True) == 3
