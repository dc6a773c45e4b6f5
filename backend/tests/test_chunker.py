"""Tests for markdown chunking."""

from spa_chat.ingest.chunker import chunk_markdown, chunk_text, split_sections


def test_split_sections_by_heading(sample_markdown: str) -> None:
    sections = split_sections(sample_markdown, "serenity-spa-knowledge-base")
    assert [section.slug for section in sections] == ["serenity-spa-knowledge-base", "gift-cards", "parking"]
    assert sections[0].title is None
    assert sections[1].title == "Gift Cards"
    assert sections[1].text.startswith("## Gift Cards")


def test_chunk_text_respects_limit_and_whitespace() -> None:
    text = " ".join(f"word{i}" for i in range(300))
    pieces = chunk_text(text, max_chars=100)
    assert len(pieces) > 1
    assert all(len(piece) <= 100 for piece in pieces)
    assert " ".join(pieces).split() == text.split()


def test_long_sections_get_numbered_slugs() -> None:
    body = " ".join("relaxation" for _ in range(200))
    drafts = chunk_markdown(f"## Hours & Location\n\n{body}", "root", max_chars=800)
    slugs = [draft.slug for draft in drafts]
    assert slugs[0] == "hours-location"
    assert slugs[1:3] == ["hours-location-02", "hours-location-03"]
    assert all(draft.title == "Hours & Location" for draft in drafts)


def test_overlong_runs_are_hard_split_without_loss() -> None:
    url = "https://example.com/" + "a" * 900
    text = f"Book online at {url} today"
    pieces = chunk_text(text, max_chars=800)
    assert all(len(piece) <= 800 for piece in pieces)
    assert "".join(pieces).replace(" ", "") == text.replace(" ", "")

    drafts = chunk_markdown(f"## Links\n\n{text}", "root", max_chars=800)
    assert url in "".join(draft.text for draft in drafts)
