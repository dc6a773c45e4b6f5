"""Two-pass retrieval: strict parameters first, then one widened retry.

Short questions ("Saturday hours?") embed far from the longer passages that
answer them. When the strict pass finds nothing, the query is expanded with
domain keywords from a small rule table and searched again with a larger
``top_k`` and a lower threshold.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from spa_chat.core.config import Settings
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import RETRIEVAL_PASSES
from spa_chat.models.entities import KnowledgeMatch
from spa_chat.rag.retriever import VectorRetriever

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExpansionRule:
    name: str
    pattern: re.Pattern[str]
    suffix: str

    def applies(self, query: str) -> bool:
        return bool(self.pattern.search(query))


DEFAULT_EXPANSIONS: tuple[ExpansionRule, ...] = (
    ExpansionRule(
        name="hours",
        pattern=re.compile(r"\b(hours?|open(?:ings?)?|closing|saturdays?|weekends?)\b", re.IGNORECASE),
        suffix="business hours schedule opening times",
    ),
    ExpansionRule(
        name="location",
        pattern=re.compile(r"\b(address|where.*located|location|directions?)\b", re.IGNORECASE),
        suffix="address location where located",
    ),
)


@dataclass(frozen=True, slots=True)
class RetrievalParams:
    top_k: int
    threshold: float

    def widened(self, min_top_k: int, threshold_ceiling: float) -> "RetrievalParams":
        return RetrievalParams(
            top_k=max(min_top_k, self.top_k),
            threshold=min(threshold_ceiling, self.threshold),
        )


@dataclass(slots=True)
class RetrievalOutcome:
    matches: list[KnowledgeMatch]
    query: str
    params: RetrievalParams
    pass_name: str
    expansion: str | None = None
    attempts: list[str] = field(default_factory=list)


def expand_query(query: str, rules: Sequence[ExpansionRule] = DEFAULT_EXPANSIONS) -> tuple[str, str | None]:
    """Append the suffix of the first matching rule; unchanged if none match."""
    for rule in rules:
        if rule.applies(query):
            return f"{query}. {rule.suffix}", rule.name
    return query, None


class RetrievalStrategy:
    def __init__(
        self,
        retriever: VectorRetriever,
        widen_top_k: int = 8,
        widen_threshold_ceiling: float = 0.5,
        rules: Sequence[ExpansionRule] = DEFAULT_EXPANSIONS,
    ) -> None:
        self.retriever = retriever
        self.widen_top_k = widen_top_k
        self.widen_threshold_ceiling = widen_threshold_ceiling
        self.rules = tuple(rules)

    @classmethod
    def from_settings(cls, retriever: VectorRetriever, settings: Settings) -> "RetrievalStrategy":
        return cls(
            retriever,
            widen_top_k=settings.widen_top_k,
            widen_threshold_ceiling=settings.widen_threshold_ceiling,
        )

    def run(self, query: str, params: RetrievalParams) -> RetrievalOutcome:
        matches = self.retriever.retrieve(query, top_k=params.top_k, threshold=params.threshold)
        RETRIEVAL_PASSES.labels(pass_name="strict", outcome="hit" if matches else "empty").inc()
        if matches:
            return RetrievalOutcome(matches=matches, query=query, params=params, pass_name="strict", attempts=["strict"])

        expanded, rule_name = expand_query(query, self.rules)
        widened = params.widened(self.widen_top_k, self.widen_threshold_ceiling)
        matches = self.retriever.retrieve(expanded, top_k=widened.top_k, threshold=widened.threshold)
        RETRIEVAL_PASSES.labels(pass_name="widened", outcome="hit" if matches else "empty").inc()
        logger.debug(
            "Widened retrieval returned %s matches",
            len(matches),
            extra={"ctx_expansion": rule_name, "ctx_top_k": widened.top_k, "ctx_threshold": widened.threshold},
        )
        return RetrievalOutcome(
            matches=matches,
            query=expanded,
            params=widened,
            pass_name="widened",
            expansion=rule_name,
            attempts=["strict", "widened"],
        )


__all__ = [
    "ExpansionRule",
    "DEFAULT_EXPANSIONS",
    "RetrievalParams",
    "RetrievalOutcome",
    "RetrievalStrategy",
    "expand_query",
]
