"""Embedding clients.

Both backends share one contract: ``embed`` returns a vector or ``None`` and
never raises for provider or transport failures. Callers treat ``None`` as
"no vector available" and skip similarity search.
"""

from __future__ import annotations

import hashlib
import math
import re
from typing import Any, Protocol, Sequence

import requests

from spa_chat.core.config import Settings
from spa_chat.core.errors import UpstreamFailure
from spa_chat.core.logging import get_logger
from spa_chat.core.metrics import UPSTREAM_FAILURES

logger = get_logger(__name__)

_TOKEN_RE = re.compile(r"\w+")


class EmbeddingClient(Protocol):
    model: str

    def embed(self, text: str) -> list[float] | None: ...

    def embed_many(self, texts: Sequence[str]) -> list[list[float]] | None: ...


class OpenAIEmbeddingClient:
    """Calls an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        max_chars: int = 8000,
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/embeddings"
        self.max_chars = max_chars
        self.timeout = timeout
        self.session = session or requests.Session()

    def embed(self, text: str) -> list[float] | None:
        if not text or not self.api_key:
            return None
        vectors = self._request([text[: self.max_chars]])
        return vectors[0] if vectors else None

    def embed_many(self, texts: Sequence[str]) -> list[list[float]] | None:
        if not texts or not self.api_key:
            return None
        vectors = self._request([text[: self.max_chars] for text in texts])
        if vectors is None or len(vectors) != len(texts):
            return None
        return vectors

    def _request(self, inputs: list[str]) -> list[list[float]] | None:
        payload: Any = inputs[0] if len(inputs) == 1 else inputs
        try:
            resp = self.session.post(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"model": self.model, "input": payload},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            _record_failure(UpstreamFailure("embed", exc))
            return None
        if not resp.ok:
            _record_failure(UpstreamFailure("embed", f"status {resp.status_code}: {resp.text[:500]}"))
            return None
        try:
            data = resp.json()["data"]
            ordered = sorted(data, key=lambda item: item.get("index", 0))
            return [list(map(float, item["embedding"])) for item in ordered]
        except (ValueError, KeyError, TypeError) as exc:
            _record_failure(UpstreamFailure("embed", f"malformed response: {exc}"))
            return None


class HashedEmbeddingClient:
    """Deterministic hashed bag-of-words embeddings for offline use and tests."""

    def __init__(self, model: str = "hashed", dim: int = 384, max_chars: int = 8000) -> None:
        self.model = model
        self.dim = dim
        self.max_chars = max_chars

    def embed(self, text: str) -> list[float] | None:
        if not text:
            return None
        return self._encode(text[: self.max_chars])

    def embed_many(self, texts: Sequence[str]) -> list[list[float]] | None:
        if not texts:
            return None
        return [self._encode(text[: self.max_chars]) for text in texts]

    def _encode(self, text: str) -> list[float]:
        vector = [0.0] * self.dim
        for token in _tokenize(text):
            vector[_hash_token(token, self.dim)] += 1.0
        _normalize(vector)
        return vector


def build_embedding_client(settings: Settings) -> EmbeddingClient:
    if settings.embedding_backend == "hashed":
        return HashedEmbeddingClient(
            model=settings.embedding_model,
            dim=settings.embedding_dim,
            max_chars=settings.embed_max_chars,
        )
    return OpenAIEmbeddingClient(
        api_key=settings.openai_api_key,
        model=settings.embedding_model,
        base_url=settings.openai_base_url,
        max_chars=settings.embed_max_chars,
        timeout=settings.request_timeout,
    )


def _record_failure(failure: UpstreamFailure) -> None:
    logger.warning("%s", failure, extra={"ctx_operation": failure.operation})
    UPSTREAM_FAILURES.labels(operation=failure.operation).inc()


def _tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


def _hash_token(token: str, dim: int) -> int:
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big") % dim


def _normalize(vector: list[float]) -> None:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return
    inv = 1.0 / norm
    for idx, value in enumerate(vector):
        vector[idx] = value * inv


__all__ = [
    "EmbeddingClient",
    "OpenAIEmbeddingClient",
    "HashedEmbeddingClient",
    "build_embedding_client",
]
