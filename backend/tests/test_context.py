"""Tests for context assembly and the grounded prompt."""

from spa_chat.models.entities import BusinessConfig, KnowledgeMatch
from spa_chat.rag.context import assemble, business_fallback
from spa_chat.rag.prompt import NO_CONTEXT_MARKER, build_grounded_system


def test_assemble_numbers_blocks_and_citations() -> None:
    matches = [
        KnowledgeMatch(title="Gift Cards", text="Any amount.", similarity=0.91),
        KnowledgeMatch(title="Parking", text="Street parking.", similarity=0.8),
    ]
    assembled = assemble(matches)
    assert assembled.context == "【1】 (Gift Cards)\nAny amount.\n\n【2】 (Parking)\nStreet parking."
    assert [(ref.idx, ref.title) for ref in assembled.citations] == [(1, "Gift Cards"), (2, "Parking")]
    assert assemble(matches) == assembled


def test_assemble_empty() -> None:
    assembled = assemble([])
    assert assembled.is_empty
    assert assembled.citations == []


def test_business_fallback_block() -> None:
    config = BusinessConfig.from_mapping(
        {"name": "Serenity Spa", "address": "123 Wellness Blvd", "hours": {"mon_fri": "09:00–19:00", "sat": "10:00–18:00"}}
    )
    block = business_fallback(config)
    assert block == (
        "【BIZ】\nBusiness Info:\nAddress: 123 Wellness Blvd\n"
        "Hours: Mon–Fri 09:00–19:00, Sat 10:00–18:00, Sun Closed"
    )
    assert business_fallback(None) == ""


def test_grounded_system_uses_absence_marker() -> None:
    system = build_grounded_system("Be nice.", "", business_label="Serenity Spa")
    assert system.startswith("Be nice.\n\n")
    assert "recommend contacting Serenity Spa" in system
    assert system.endswith(f"CONTEXT:\n{NO_CONTEXT_MARKER}\n")
