"""Tests for embedding clients."""

import requests

from spa_chat.rag.embeddings import HashedEmbeddingClient, OpenAIEmbeddingClient


class _Response:
    def __init__(self, status_code: int, body: object) -> None:
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> object:
        return self._body


class _Session:
    def __init__(self, response: _Response | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.posted: list[dict] = []

    def post(self, url: str, **kwargs):
        self.posted.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def test_hashed_embeddings_are_normalized() -> None:
    model = HashedEmbeddingClient(dim=64)
    vectors = model.embed_many(["hello", "world"])
    assert vectors is not None and len(vectors) == 2
    assert all(len(vec) == 64 for vec in vectors)
    assert abs(sum(value * value for value in vectors[0]) - 1.0) < 1e-6


def test_hashed_embedding_of_empty_text_is_none() -> None:
    assert HashedEmbeddingClient(dim=16).embed("") is None


def test_openai_embedding_truncates_input() -> None:
    session = _Session(_Response(200, {"data": [{"index": 0, "embedding": [0.1, 0.2]}]}))
    client = OpenAIEmbeddingClient(api_key="k", max_chars=10, session=session)
    assert client.embed("x" * 50) == [0.1, 0.2]
    sent = session.posted[0]["json"]
    assert sent["model"] == "text-embedding-3-small"
    assert sent["input"] == "x" * 10


def test_openai_embedding_failures_yield_none() -> None:
    assert OpenAIEmbeddingClient(api_key=None).embed("hello") is None
    failing = OpenAIEmbeddingClient(api_key="k", session=_Session(_Response(500, {"error": "boom"})))
    assert failing.embed("hello") is None
    broken = OpenAIEmbeddingClient(api_key="k", session=_Session(error=requests.ConnectionError("refused")))
    assert broken.embed("hello") is None
