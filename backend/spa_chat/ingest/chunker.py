"""Markdown knowledge-base chunking."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from spa_chat.utils.text import slugify

_HEADING_RE = re.compile(r"^##+\s+(.*)")


@dataclass(slots=True)
class Section:
    slug: str
    title: str | None
    text: str


@dataclass(slots=True)
class ChunkDraft:
    slug: str
    title: str | None
    text: str


def split_sections(markdown: str, root_slug: str) -> list[Section]:
    """Split on ``##``-or-deeper headings; the heading line stays with its section.

    Text before the first such heading is filed under *root_slug*.
    """
    sections: list[Section] = []
    slug, title = root_slug, None
    buffer: list[str] = []
    for line in markdown.split("\n"):
        match = _HEADING_RE.match(line)
        if match:
            if buffer:
                sections.append(Section(slug=slug, title=title, text="\n".join(buffer).strip()))
            title = match.group(1).strip()
            slug = slugify(title) or root_slug
            buffer = []
        buffer.append(line)
    if buffer:
        sections.append(Section(slug=slug, title=title, text="\n".join(buffer).strip()))
    return [section for section in sections if section.text]


def chunk_text(text: str, max_chars: int = 800) -> list[str]:
    """Greedy pieces of at most *max_chars*, each ending at whitespace or end of text.

    A run of more than *max_chars* non-whitespace characters is hard-split.
    """
    return [piece.strip() for piece in _chunk_pattern(max_chars).findall(text) if piece.strip()]


def chunk_markdown(markdown: str, root_slug: str, max_chars: int = 800) -> list[ChunkDraft]:
    """Sections split into chunks; later chunks of a section get ``-02``, ``-03``... slugs."""
    drafts: list[ChunkDraft] = []
    for section in split_sections(markdown, root_slug):
        for position, piece in enumerate(chunk_text(section.text, max_chars)):
            slug = section.slug if position == 0 else f"{section.slug}-{position + 1:02d}"
            drafts.append(ChunkDraft(slug=slug, title=section.title, text=piece))
    return drafts


@lru_cache(maxsize=8)
def _chunk_pattern(max_chars: int) -> re.Pattern[str]:
    return re.compile(r"[\s\S]{1,%d}(?=\s|\Z)|\S{%d}" % (max_chars, max_chars))


__all__ = ["Section", "ChunkDraft", "split_sections", "chunk_text", "chunk_markdown"]
