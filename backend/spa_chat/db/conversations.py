"""Conversation and message log tables."""

from __future__ import annotations

from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.models.entities import Message, Role
from spa_chat.utils.time import now_ms


class ConversationRepository:
    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def create(self, conversation_id: str) -> bool:
        """Insert a conversation row; returns False if the id already exists."""
        cursor = self.db.execute(
            "INSERT OR IGNORE INTO conversations (id, created_at) VALUES (?, ?)",
            [conversation_id, now_ms()],
        )
        self.db.commit()
        return cursor.rowcount > 0

    def append_message(self, conversation_id: str, role: Role, content: str) -> int:
        cursor = self.db.execute(
            "INSERT INTO messages (conversation_id, role, content, created_at) VALUES (?, ?, ?, ?)",
            [conversation_id, role, content, now_ms()],
        )
        self.db.commit()
        return int(cursor.lastrowid)

    def messages(self, conversation_id: str) -> list[Message]:
        rows = self.db.query(
            """
            SELECT id, conversation_id, role, content, created_at FROM messages
            WHERE conversation_id = ?
            ORDER BY created_at, id
            """,
            [conversation_id],
        )
        return [
            Message(
                id=row["id"],
                conversation_id=row["conversation_id"],
                role=row["role"],
                content=row["content"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def count(self) -> int:
        row = self.db.query_one("SELECT COUNT(*) AS count FROM conversations")
        return int(row["count"]) if row else 0


__all__ = ["ConversationRepository"]
