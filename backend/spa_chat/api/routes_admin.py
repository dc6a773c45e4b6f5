"""Administrative routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from spa_chat.api.dependencies import get_app_settings, get_database
from spa_chat.core.config import Settings
from spa_chat.core.metrics import KNOWLEDGE_CHUNKS, metrics_response
from spa_chat.db.conversations import ConversationRepository
from spa_chat.db.knowledge import KnowledgeRepository
from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.models.dto import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Liveness and storage counts")
def health(
    db: SQLiteDatabase = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    knowledge = KnowledgeRepository(db)
    chunks = knowledge.count()
    KNOWLEDGE_CHUNKS.set(chunks)
    return HealthResponse(
        ok=True,
        details={
            "knowledge_chunks": chunks,
            "embedded_chunks": knowledge.count(embedded_only=True),
            "conversations": ConversationRepository(db).count(),
            "api_key_configured": bool(settings.openai_api_key),
        },
    )


@router.get("/metrics", summary="Prometheus metrics")
async def get_metrics():
    return metrics_response()


__all__ = ["router"]
