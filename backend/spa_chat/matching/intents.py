"""Keyword intent detection driven by an ordered ``{tag, pattern}`` table."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

import yaml


class Intent(str, Enum):
    GREETING = "greeting"
    PRICE = "price"
    HOURS = "hours"
    LOCATION = "location"
    POLICY = "policy"
    BOOK = "book"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class IntentRule:
    tag: Intent
    pattern: re.Pattern[str]

    @classmethod
    def build(cls, tag: str | Intent, pattern: str) -> "IntentRule":
        return cls(tag=Intent(tag), pattern=re.compile(pattern, re.IGNORECASE))


# First matching rule wins, so order encodes priority.
DEFAULT_INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule.build("greeting", r"\b(hi|hello|hey|hiya|howdy|good\s*(morning|afternoon|evening))\b"),
    IntentRule.build("price", r"\b(price|prices|pricing|cost|rate|how\s*much|fee|fees)\b"),
    IntentRule.build("price", r"\b(service|services|menu|catalog|list|options)\b"),
    IntentRule.build("hours", r"\b(hours?|open|opening|close|closing|time|schedule)\b"),
    IntentRule.build("location", r"\b(where|address|located|location|directions|map)\b"),
    IntentRule.build("policy", r"\b(cancel|cancellation|policy|policies|reschedule|late|deposit)\b"),
    IntentRule.build("book", r"\b(book|booking|appointment|reserve|schedule)\b"),
)


def detect_intent(text: str, rules: Sequence[IntentRule] = DEFAULT_INTENT_RULES) -> Intent:
    for rule in rules:
        if rule.pattern.search(text or ""):
            return rule.tag
    return Intent.NONE


def load_intent_rules(path: Path) -> tuple[IntentRule, ...]:
    """Load an intent table from YAML.

    Expected shape::

        intents:
          - tag: hours
            pattern: '\\b(hours?|open)\\b'

    Raises:
        ValueError: the file has no ``intents`` list or an entry is invalid.
    """
    with path.open("r", encoding="utf-8") as fh:
        raw: Any = yaml.safe_load(fh) or {}
    entries = raw.get("intents") if isinstance(raw, dict) else None
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"{path}: expected a non-empty 'intents' list")
    rules = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict) or "tag" not in entry or "pattern" not in entry:
            raise ValueError(f"{path}: intent #{position} needs 'tag' and 'pattern'")
        try:
            rules.append(IntentRule.build(entry["tag"], str(entry["pattern"])))
        except (ValueError, re.error) as exc:
            raise ValueError(f"{path}: intent #{position} is invalid: {exc}") from exc
    return tuple(rules)


__all__ = ["Intent", "IntentRule", "DEFAULT_INTENT_RULES", "detect_intent", "load_intent_rules"]
