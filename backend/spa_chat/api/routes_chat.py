"""Grounded chat routes."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from spa_chat.api.dependencies import get_chat_service
from spa_chat.chat.service import ChatService
from spa_chat.core.errors import ChatError, ServerError
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import CHAT_LATENCY, CHAT_REQUESTS
from spa_chat.models.dto import ChatResponse, ErrorResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Answer a chat turn grounded in the knowledge base",
)
async def chat(request: Request, service: ChatService = Depends(get_chat_service)) -> ChatResponse:
    # Raw body: malformed JSON must surface as 400 "Bad JSON", not a 422.
    body = await request.body()
    started = time.perf_counter()
    status = 200
    try:
        return await run_in_threadpool(service.handle, body)
    except ChatError as exc:
        status = exc.status_code
        raise
    except Exception as exc:
        status = 500
        logger.exception("Chat request failed")
        raise ServerError("Server error", detail=str(exc)) from exc
    finally:
        CHAT_REQUESTS.labels(status=str(status)).inc()
        CHAT_LATENCY.observe(time.perf_counter() - started)


@router.get("/chat", summary="Chat endpoint probe")
async def chat_probe() -> dict[str, object]:
    return {"ok": True, "name": "chat"}


__all__ = ["router"]
