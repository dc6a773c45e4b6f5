"""ID helpers."""

from __future__ import annotations

import uuid


def new_conversation_id() -> str:
    """Opaque conversation token in canonical UUID4 form."""
    return str(uuid.uuid4())


__all__ = ["new_conversation_id"]
