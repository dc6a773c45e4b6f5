"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from spa_chat.utils.text import flatten_content


class ChatMessage(BaseModel):
    """One history entry, forwarded to the provider as sent.

    ``content`` is a string or a list of provider content parts.
    """

    role: str
    content: str | list[dict[str, Any]] = ""

    @property
    def text(self) -> str:
        return flatten_content(self.content)

    model_config = {"extra": "allow"}


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)
    conversation_id: str | None = None
    system: str | None = None
    rag_top_k: int | None = Field(default=None, ge=1, le=50)
    rag_threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class Reply(BaseModel):
    role: str = "assistant"
    content: str = ""


class Citation(BaseModel):
    idx: int
    title: str
    similarity: float


class ChatResponse(BaseModel):
    reply: Reply
    conversation_id: str
    citations: list[Citation]


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None


class AssistRequest(BaseModel):
    text: str = Field(min_length=1)


class ServiceOut(BaseModel):
    id: str
    name: str
    duration: int
    price_from: float
    description: str
    aliases: list[str] = Field(default_factory=list)


class AssistResponse(BaseModel):
    intent: Literal["greeting", "price", "hours", "location", "policy", "book", "none"]
    service: ServiceOut | None = None
    answer: str | None = None


class HoursOut(BaseModel):
    mon_fri: str | None = None
    sat: str | None = None
    sun: str | None = None


class PoliciesOut(BaseModel):
    cancellation: str | None = None
    late: str | None = None


class BusinessOut(BaseModel):
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    hours: HoursOut
    policies: PoliciesOut
    loaded_at: int | None = None


class BookingRequest(BaseModel):
    service_id: str = Field(alias="serviceId")
    service_name: str = Field(default="", alias="serviceName")
    date: str
    name: str
    email: str
    phone: str = ""
    notes: str = ""
    transcript: str = ""
    source: str = "webform"

    model_config = {"populate_by_name": True}


class BookingResponse(BaseModel):
    ok: bool
    status: int | None = None


class HealthResponse(BaseModel):
    ok: bool
    details: dict[str, Any] | None = None


__all__ = [
    "ChatMessage",
    "ChatRequest",
    "Reply",
    "Citation",
    "ChatResponse",
    "ErrorResponse",
    "AssistRequest",
    "AssistResponse",
    "ServiceOut",
    "BusinessOut",
    "HoursOut",
    "PoliciesOut",
    "BookingRequest",
    "BookingResponse",
    "HealthResponse",
]
