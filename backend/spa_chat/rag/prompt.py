"""Grounded system prompt construction."""

from __future__ import annotations

NO_CONTEXT_MARKER = "(no domain context found)"


def grounding_clause(business_label: str = "the spa") -> str:
    return (
        "Answer using ONLY the context below. If the answer is not in the context, "
        f"say you don't know and recommend contacting {business_label}.\n"
        "Keep answers concise and accurate."
    )


def build_grounded_system(system: str, context: str, business_label: str = "the spa") -> str:
    """Caller instruction, grounding clause, then the context block or the absence marker."""
    return f"{system}\n\n{grounding_clause(business_label)}\n\nCONTEXT:\n{context or NO_CONTEXT_MARKER}\n"


__all__ = ["NO_CONTEXT_MARKER", "grounding_clause", "build_grounded_system"]
