"""Answers that can be given without calling the chat backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from spa_chat.matching.intents import DEFAULT_INTENT_RULES, Intent, IntentRule, detect_intent
from spa_chat.matching.services import find_service
from spa_chat.models.entities import BusinessConfig, Service, ServiceAlias

GREETING_REPLY = "Welcome! I can show services, explain pricing, or start a booking. What would you like?"
BOOK_REPLY = "Great! I'll collect a few details. Use the booking form to pick a service and date."


@dataclass(slots=True)
class LocalAnswer:
    intent: Intent
    service: Service | None = None
    answer: str | None = None

    @property
    def handled(self) -> bool:
        return self.answer is not None


def answer_locally(
    text: str,
    business: BusinessConfig | None,
    services: Sequence[Service],
    aliases: Sequence[ServiceAlias] = (),
    rules: Sequence[IntentRule] = DEFAULT_INTENT_RULES,
) -> LocalAnswer:
    """Classify *text* and produce a canned reply when one fits.

    ``answer`` is None when the message should go to the grounded chat
    endpoint instead.
    """
    intent = detect_intent(text, rules)
    service = find_service(text, services, aliases)
    if service is not None:
        return LocalAnswer(intent=intent, service=service, answer=f"{service.summary()} Would you like to book it?")

    answer: str | None = None
    if intent is Intent.GREETING:
        answer = GREETING_REPLY
    elif intent is Intent.BOOK:
        answer = BOOK_REPLY
    elif intent is Intent.PRICE and services:
        options = "; ".join(
            f"{item.name} (~{item.duration}m) from ${item.price_from:g}" for item in services
        )
        answer = f"Popular options: {options}. Ask about any service for details, or say \"book\" to reserve."
    elif business is not None:
        if intent is Intent.HOURS:
            answer = f"We're open {business.hours.summary()}."
        elif intent is Intent.LOCATION and business.address:
            answer = f"You'll find us at {business.address}."
        elif intent is Intent.POLICY and business.policies.cancellation:
            answer = business.policies.cancellation
    return LocalAnswer(intent=intent, answer=answer)


__all__ = ["LocalAnswer", "answer_locally", "GREETING_REPLY", "BOOK_REPLY"]
