"""Text processing helpers."""

from __future__ import annotations

import re
from typing import Any

WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_SPACE_RE = re.compile(r"[^a-z0-9\s]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize(text: str) -> str:
    """Collapse whitespace and strip."""
    return WHITESPACE_RE.sub(" ", text).strip()


def simplify(text: str) -> str:
    """Lowercase, replace punctuation with spaces, collapse whitespace.

    ``"Hot-Stone Therapy!"`` becomes ``"hot stone therapy"``.
    """
    return normalize(_NON_ALNUM_SPACE_RE.sub(" ", (text or "").lower()))


def flatten_content(content: Any) -> str:
    """Text of a chat message content: a plain string or a list of content parts."""
    if isinstance(content, str):
        return content
    if not content:
        return ""
    return "\n".join(
        (part.get("text") or "") if isinstance(part, dict) else str(part) for part in content
    ).strip()


def slugify(text: str) -> str:
    """``"Hours & Location"`` becomes ``"hours-location"``."""
    return _NON_ALNUM_RE.sub("-", text.lower()).strip("-")


__all__ = ["normalize", "simplify", "slugify", "flatten_content"]
