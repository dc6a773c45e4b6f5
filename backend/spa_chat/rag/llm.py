"""Chat completion client for an OpenAI-compatible API."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import requests

from spa_chat.core.config import Settings
from spa_chat.core.errors import ProviderError
from spa_chat.core.logging import get_logger
from spa_chat.models.dto import Reply
from spa_chat.utils.text import flatten_content

logger = get_logger(__name__)


class CompletionClient(Protocol):
    def complete(self, messages: Sequence[dict[str, Any]]) -> Reply: ...


class OpenAICompletionClient:
    """Single-shot ``/chat/completions`` call; no retries.

    Raises:
        ProviderError: the provider answered with a non-2xx status. Its status
            and decoded body are kept for pass-through.
        requests.RequestException: transport failure (timeout, refused).
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.timeout = timeout
        self.session = session or requests.Session()

    def complete(self, messages: Sequence[dict[str, Any]]) -> Reply:
        resp = self.session.post(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"model": self.model, "temperature": self.temperature, "messages": list(messages)},
            timeout=self.timeout,
        )
        body = _decode(resp)
        if not resp.ok:
            logger.warning("Completion provider returned %s", resp.status_code, extra={"ctx_status": resp.status_code})
            raise ProviderError(resp.status_code, body)
        return _extract_reply(body)


def build_completion_client(settings: Settings) -> CompletionClient:
    return OpenAICompletionClient(
        api_key=settings.openai_api_key,
        model=settings.completion_model,
        temperature=settings.completion_temperature,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
    )


def _decode(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _extract_reply(body: Any) -> Reply:
    try:
        message = body["choices"][0]["message"]
    except (KeyError, IndexError, TypeError):
        return Reply(role="assistant", content="")
    return Reply(role=message.get("role") or "assistant", content=flatten_content(message.get("content")))


__all__ = ["CompletionClient", "OpenAICompletionClient", "build_completion_client"]
