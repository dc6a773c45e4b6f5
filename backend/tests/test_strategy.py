"""Tests for two-pass retrieval."""

from spa_chat.models.entities import KnowledgeMatch
from spa_chat.rag.strategy import RetrievalParams, RetrievalStrategy, expand_query


class _ScriptedRetriever:
    def __init__(self, *results):
        self.results = list(results)
        self.calls: list[tuple[str, int, float]] = []

    def retrieve(self, query, top_k, threshold):
        self.calls.append((query, top_k, threshold))
        return self.results.pop(0) if self.results else []


def test_strict_hit_skips_second_pass() -> None:
    hit = [KnowledgeMatch(title="Hours", text="Open daily", similarity=0.9)]
    retriever = _ScriptedRetriever(hit)
    outcome = RetrievalStrategy(retriever).run("when are you open", RetrievalParams(top_k=5, threshold=0.72))
    assert outcome.pass_name == "strict"
    assert outcome.matches == hit
    assert len(retriever.calls) == 1


def test_empty_first_pass_widens_regardless_of_caller_values() -> None:
    retriever = _ScriptedRetriever([], [])
    outcome = RetrievalStrategy(retriever).run("What are your Saturday hours?", RetrievalParams(top_k=2, threshold=0.95))
    query, top_k, threshold = retriever.calls[1]
    assert top_k >= 8
    assert threshold <= 0.5
    assert query.endswith(". business hours schedule opening times")
    assert outcome.expansion == "hours"
    assert outcome.attempts == ["strict", "widened"]


def test_widening_keeps_larger_caller_values() -> None:
    params = RetrievalParams(top_k=12, threshold=0.3).widened(8, 0.5)
    assert params == RetrievalParams(top_k=12, threshold=0.3)


def test_expand_query_location_and_passthrough() -> None:
    assert expand_query("What is your address?") == (
        "What is your address?. address location where located",
        "location",
    )
    assert expand_query("Do you sell gift cards?") == ("Do you sell gift cards?", None)


def test_plural_hours_words_expand() -> None:
    assert expand_query("Any openings on Saturdays?")[1] == "hours"
    assert expand_query("Any availability on weekends?")[1] == "hours"
