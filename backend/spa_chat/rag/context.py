"""Context block assembly for the grounded prompt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from spa_chat.models.entities import BusinessConfig, KnowledgeMatch

BUSINESS_BLOCK_LABEL = "【BIZ】"


@dataclass(frozen=True, slots=True)
class CitationRef:
    idx: int
    title: str
    similarity: float


@dataclass(slots=True)
class AssembledContext:
    context: str = ""
    citations: list[CitationRef] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.context


def assemble(matches: Sequence[KnowledgeMatch]) -> AssembledContext:
    """Number each match as a ``【n】 (title)`` block with a parallel citation list."""
    if not matches:
        return AssembledContext()
    blocks = [f"【{idx}】 ({match.title})\n{match.text}" for idx, match in enumerate(matches, start=1)]
    citations = [
        CitationRef(idx=idx, title=match.title, similarity=match.similarity)
        for idx, match in enumerate(matches, start=1)
    ]
    return AssembledContext(context="\n\n".join(blocks), citations=citations)


def business_fallback(config: BusinessConfig | None) -> str:
    """Address and hours summary used when retrieval finds nothing."""
    if config is None:
        return ""
    body = f"Business Info:\nAddress: {config.address or ''}\nHours: {config.hours.summary()}".strip()
    return f"{BUSINESS_BLOCK_LABEL}\n{body}"


__all__ = ["AssembledContext", "CitationRef", "assemble", "business_fallback", "BUSINESS_BLOCK_LABEL"]
