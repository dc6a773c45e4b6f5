"""Tests for the local intent/service matcher."""

from pathlib import Path

import pytest

from spa_chat.matching.answers import GREETING_REPLY, answer_locally
from spa_chat.matching.intents import Intent, detect_intent, load_intent_rules
from spa_chat.matching.services import find_service
from spa_chat.models.entities import BusinessConfig, Service, ServiceAlias

SERVICES = [
    Service(id="massage", name="Signature Massage", duration=60, price_from=150, description="Full-body massage."),
    Service(id="hot-stone", name="Hot Stone Therapy", duration=90, price_from=170, description="Heated stones."),
    Service(id="couples", name="Couples Retreat", duration=120, price_from=350, description="For two."),
]
ALIASES = [
    ServiceAlias(service_id="hot-stone", alias="hot stone"),
    ServiceAlias(service_id="couples", alias="couples massage"),
]


def test_detect_intent_priority() -> None:
    assert detect_intent("Hello there") is Intent.GREETING
    assert detect_intent("How much is a facial?") is Intent.PRICE
    assert detect_intent("What are your Saturday hours?") is Intent.HOURS
    assert detect_intent("Where are you located?") is Intent.LOCATION
    assert detect_intent("I need to cancel") is Intent.POLICY
    assert detect_intent("I want to book") is Intent.BOOK
    assert detect_intent("gift cards?") is Intent.NONE


def test_hot_stone_resolves_through_alias() -> None:
    result = answer_locally("tell me about hot stone", None, SERVICES, ALIASES)
    assert result.service is not None and result.service.id == "hot-stone"
    assert result.handled
    assert result.answer.startswith("Hot Stone Therapy: Heated stones. (~90 min, from $170).")


def test_find_service_name_and_token_overlap() -> None:
    assert find_service("I'd like the signature massage", SERVICES).id == "massage"
    assert find_service("something with stones and therapy", SERVICES).id == "hot-stone"
    assert find_service("pedicure", SERVICES) is None


def test_business_answers_and_fallthrough() -> None:
    business = BusinessConfig.from_mapping(
        {"name": "Serenity Spa", "address": "123 Wellness Blvd", "hours": {"sat": "10:00–18:00"}}
    )
    assert answer_locally("hi", business, SERVICES).answer == GREETING_REPLY
    assert "10:00–18:00" in answer_locally("what are your hours", business, SERVICES).answer
    assert answer_locally("where are you located", business, SERVICES).answer == "You'll find us at 123 Wellness Blvd."
    unanswered = answer_locally("do you sell gift cards", business, SERVICES)
    assert unanswered.intent is Intent.NONE
    assert not unanswered.handled


def test_load_intent_rules(tmp_path: Path) -> None:
    table = tmp_path / "intents.yaml"
    table.write_text("intents:\n  - tag: book\n    pattern: '\\bgift\\b'\n", encoding="utf-8")
    rules = load_intent_rules(table)
    assert detect_intent("gift cards?", rules) is Intent.BOOK

    table.write_text("intents:\n  - tag: unknown\n    pattern: x\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_intent_rules(table)


def test_token_overlap_ignores_word_fragments() -> None:
    services = SERVICES + [
        Service(id="body-wrap", name="Detoxifying Body Wraps", duration=80, price_from=180, description="Detox."),
    ]
    business = BusinessConfig.from_mapping({"name": "Serenity Spa", "hours": {"sat": "10:00–18:00"}})
    result = answer_locally("Can somebody tell me your hours?", business, services)
    assert result.service is None
    assert result.intent is Intent.HOURS
    assert "10:00–18:00" in result.answer
    assert find_service("do you allow photos in the lounge", services) is None
