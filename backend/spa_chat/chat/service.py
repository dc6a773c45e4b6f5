"""Grounded chat orchestration."""

from __future__ import annotations

from typing import Any, Sequence

import orjson
from pydantic import ValidationError

from spa_chat.chat.conversations import ConversationStore
from spa_chat.core.config import Settings
from spa_chat.core.errors import BadRequest, Misconfigured
from spa_chat.core.logging import get_logger
from spa_chat.models.dto import ChatMessage, ChatRequest, ChatResponse, Citation
from spa_chat.rag.business import BusinessConfigLoader
from spa_chat.rag.context import AssembledContext, assemble, business_fallback
from spa_chat.rag.llm import CompletionClient
from spa_chat.rag.prompt import build_grounded_system
from spa_chat.rag.strategy import RetrievalParams, RetrievalStrategy
from spa_chat.utils.ids import new_conversation_id

logger = get_logger(__name__)


def parse_chat_request(raw_body: bytes) -> ChatRequest:
    """Decode and validate a chat request body.

    Raises:
        BadRequest: body is not JSON, not an object, ``messages`` is not a
            list, or a field fails validation.
    """
    try:
        body = orjson.loads(raw_body)
    except orjson.JSONDecodeError as exc:
        raise BadRequest("Bad JSON") from exc
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    if not isinstance(body.get("messages", []), list):
        raise BadRequest("`messages` must be array")
    try:
        return ChatRequest.model_validate(body)
    except ValidationError as exc:
        raise BadRequest("Invalid request", detail=_summarize_validation(exc)) from exc


def last_user_content(messages: Sequence[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user":
            return message.text
    return ""


class ChatService:
    """Runs one chat turn: retrieve, ground, complete, persist."""

    def __init__(
        self,
        settings: Settings,
        strategy: RetrievalStrategy,
        business: BusinessConfigLoader,
        conversations: ConversationStore,
        completion: CompletionClient,
    ) -> None:
        self.settings = settings
        self.strategy = strategy
        self.business = business
        self.conversations = conversations
        self.completion = completion

    def handle(self, raw_body: bytes) -> ChatResponse:
        """Entry point for raw HTTP bodies; validates before any external call."""
        if not self.settings.openai_api_key:
            raise Misconfigured("Missing OPENAI_API_KEY")
        return self.chat(parse_chat_request(raw_body))

    def chat(self, request: ChatRequest) -> ChatResponse:
        conversation_id = request.conversation_id or new_conversation_id()
        if not request.conversation_id:
            self.conversations.start(conversation_id)

        last_user = last_user_content(request.messages)
        if last_user:
            self.conversations.record(conversation_id, "user", last_user)

        assembled = self.build_context(last_user, request)
        system = build_grounded_system(
            request.system or self.settings.default_system_prompt,
            assembled.context,
            business_label=self.settings.business_label,
        )
        history: list[dict[str, Any]] = [{"role": "system", "content": system}]
        history.extend(message.model_dump() for message in request.messages)

        reply = self.completion.complete(history)
        self.conversations.record(conversation_id, "assistant", reply.content)

        logger.info(
            "Chat turn answered",
            extra={"ctx_conversation_id": conversation_id, "ctx_citations": len(assembled.citations)},
        )
        return ChatResponse(
            reply=reply,
            conversation_id=conversation_id,
            citations=[
                Citation(idx=ref.idx, title=ref.title, similarity=ref.similarity) for ref in assembled.citations
            ],
        )

    def build_context(self, query: str, request: ChatRequest) -> AssembledContext:
        if not query:
            return AssembledContext()
        params = RetrievalParams(
            top_k=request.rag_top_k if request.rag_top_k is not None else self.settings.rag_top_k,
            threshold=request.rag_threshold if request.rag_threshold is not None else self.settings.rag_threshold,
        )
        outcome = self.strategy.run(query, params)
        assembled = assemble(outcome.matches)
        if assembled.is_empty:
            assembled.context = business_fallback(self.business.get())
        return assembled


def _summarize_validation(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


__all__ = ["ChatService", "parse_chat_request", "last_user_content"]
