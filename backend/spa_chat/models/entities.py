"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "assistant"]


@dataclass(slots=True)
class KnowledgeChunk:
    id: int | None
    slug: str
    text: str
    title: str | None = None
    embedding: list[float] | None = None
    created_at: int | None = None
    updated_at: int | None = None
    embedded_at: int | None = None


@dataclass(slots=True, frozen=True)
class KnowledgeMatch:
    """A retrieved passage with its similarity score (higher is more relevant)."""

    title: str
    text: str
    similarity: float


@dataclass(slots=True)
class Service:
    id: str
    name: str
    duration: int
    price_from: float
    description: str = ""

    def summary(self) -> str:
        return f"{self.name}: {self.description} (~{self.duration} min, from ${_money(self.price_from)})."


@dataclass(slots=True)
class ServiceAlias:
    service_id: str
    alias: str


@dataclass(slots=True)
class BusinessHours:
    mon_fri: str | None = None
    sat: str | None = None
    sun: str | None = None

    def summary(self) -> str:
        """Compact one-line rendering, e.g. ``Mon–Fri 09:00–19:00, Sat 10:00–18:00, Sun Closed``."""
        parts = []
        if self.mon_fri:
            parts.append(f"Mon–Fri {self.mon_fri}")
        if self.sat:
            parts.append(f"Sat {self.sat}")
        parts.append(f"Sun {self.sun}" if self.sun else "Sun Closed")
        return ", ".join(parts)


@dataclass(slots=True)
class BusinessPolicies:
    cancellation: str | None = None
    late: str | None = None


@dataclass(slots=True)
class BusinessConfig:
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    hours: BusinessHours = field(default_factory=BusinessHours)
    policies: BusinessPolicies = field(default_factory=BusinessPolicies)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "BusinessConfig":
        hours = data.get("hours") or {}
        policies = data.get("policies") or {}
        return cls(
            name=str(data.get("name") or ""),
            phone=data.get("phone"),
            email=data.get("email"),
            address=data.get("address"),
            hours=BusinessHours(
                mon_fri=hours.get("mon_fri"),
                sat=hours.get("sat"),
                sun=hours.get("sun"),
            ),
            policies=BusinessPolicies(
                cancellation=policies.get("cancellation"),
                late=policies.get("late"),
            ),
        )


@dataclass(slots=True)
class Message:
    conversation_id: str
    role: Role
    content: str
    created_at: int
    id: int | None = None


@dataclass(slots=True)
class Booking:
    service_id: str
    service_name: str
    date: str
    name: str
    email: str
    phone: str = ""
    notes: str = ""
    transcript: str = ""
    source: str = "webform"

    def to_relay_payload(self) -> dict[str, str]:
        """Flat payload in the column order of the relay spreadsheet."""
        return {
            "serviceId": self.service_id,
            "serviceName": self.service_name,
            "date": self.date,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "notes": self.notes,
            "transcript": self.transcript,
            "source": self.source,
        }


def _money(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


__all__ = [
    "Role",
    "KnowledgeChunk",
    "KnowledgeMatch",
    "Service",
    "ServiceAlias",
    "BusinessHours",
    "BusinessPolicies",
    "BusinessConfig",
    "Message",
    "Booking",
]
