"""Knowledge table access: chunk storage and vector similarity search."""

from __future__ import annotations

import math
import sqlite3
from array import array
from typing import Sequence

from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.models.entities import KnowledgeChunk, KnowledgeMatch
from spa_chat.utils.time import now_ms

_SELECT_COLUMNS = "id, slug, title, chunk, embedding, created_at, updated_at, embedded_at"


def pack_vector(vector: Sequence[float]) -> bytes:
    return array("f", vector).tobytes()


def unpack_vector(blob: bytes | None) -> list[float] | None:
    if blob is None:
        return None
    floats = array("f")
    floats.frombytes(blob)
    return list(floats)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise ValueError("Vector dimension mismatch")
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return dot / norm


class KnowledgeRepository:
    """Stores knowledge chunks and answers similarity queries over them."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def insert_chunks(self, chunks: Sequence[KnowledgeChunk]) -> int:
        if not chunks:
            return 0
        now = now_ms()
        self.db.executemany(
            """
            INSERT INTO knowledge (slug, title, chunk, embedding, dim, created_at, updated_at, embedded_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    chunk.slug,
                    chunk.title,
                    chunk.text,
                    pack_vector(chunk.embedding) if chunk.embedding is not None else None,
                    len(chunk.embedding) if chunk.embedding is not None else None,
                    now,
                    now,
                    now if chunk.embedding is not None else None,
                )
                for chunk in chunks
            ],
        )
        self.db.commit()
        return len(chunks)

    def match(self, query_embedding: Sequence[float], match_count: int, threshold: float) -> list[KnowledgeMatch]:
        """Return up to *match_count* chunks with cosine similarity >= *threshold*, best first.

        Rows without an embedding, or embedded with a different dimension,
        are not searchable.
        """
        if match_count <= 0:
            return []
        rows = self.db.query(
            "SELECT slug, title, chunk, embedding FROM knowledge WHERE embedding IS NOT NULL AND dim = ?",
            [len(query_embedding)],
        )
        scored: list[KnowledgeMatch] = []
        for row in rows:
            vector = unpack_vector(row["embedding"])
            similarity = cosine_similarity(query_embedding, vector)
            if similarity < threshold:
                continue
            scored.append(
                KnowledgeMatch(
                    title=row["title"] or row["slug"] or "kb",
                    text=row["chunk"],
                    similarity=similarity,
                )
            )
        scored.sort(key=lambda item: item.similarity, reverse=True)
        return scored[:match_count]

    def pending_embedding(self, limit: int) -> list[KnowledgeChunk]:
        rows = self.db.query(
            f"SELECT {_SELECT_COLUMNS} FROM knowledge WHERE embedding IS NULL ORDER BY id LIMIT ?",
            [limit],
        )
        return [_row_to_chunk(row) for row in rows]

    def updated_since(self, cutoff_ms: int, limit: int = 2000) -> list[KnowledgeChunk]:
        rows = self.db.query(
            f"""
            SELECT {_SELECT_COLUMNS} FROM knowledge
            WHERE embedding IS NULL OR updated_at >= ?
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            [cutoff_ms, limit],
        )
        return [_row_to_chunk(row) for row in rows]

    def set_embeddings(self, updates: Sequence[tuple[int, Sequence[float]]]) -> None:
        now = now_ms()
        self.db.executemany(
            "UPDATE knowledge SET embedding = ?, dim = ?, embedded_at = ? WHERE id = ?",
            [(pack_vector(vector), len(vector), now, chunk_id) for chunk_id, vector in updates],
        )
        self.db.commit()

    def count(self, embedded_only: bool = False) -> int:
        sql = "SELECT COUNT(*) AS count FROM knowledge"
        if embedded_only:
            sql += " WHERE embedding IS NOT NULL"
        row = self.db.query_one(sql)
        return int(row["count"]) if row else 0


def _row_to_chunk(row: sqlite3.Row) -> KnowledgeChunk:
    return KnowledgeChunk(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        text=row["chunk"],
        embedding=unpack_vector(row["embedding"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        embedded_at=row["embedded_at"],
    )


__all__ = ["KnowledgeRepository", "pack_vector", "unpack_vector", "cosine_similarity"]
