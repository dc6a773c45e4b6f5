"""Tests for the completion client."""

import pytest
import requests

from spa_chat.core.errors import ProviderError
from spa_chat.rag.llm import OpenAICompletionClient


class _Response:
    def __init__(self, status_code: int, body: object = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else str(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> object:
        if self._body is None:
            raise ValueError("not json")
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


MESSAGES = [{"role": "system", "content": "Be brief."}, {"role": "user", "content": "hi"}]


def _reply(content: object) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_payload_carries_model_and_temperature() -> None:
    session = _Session(_Response(200, _reply("Hello!")))
    client = OpenAICompletionClient(api_key="k", base_url="https://llm.example/v1/", session=session)
    reply = client.complete(MESSAGES)
    assert reply.content == "Hello!"
    sent = session.posted[0]
    assert sent["url"] == "https://llm.example/v1/chat/completions"
    assert sent["headers"]["Authorization"] == "Bearer k"
    assert sent["json"] == {"model": "gpt-4o-mini", "temperature": 0.3, "messages": MESSAGES}


def test_non_success_raises_provider_error_with_body() -> None:
    body = {"error": {"message": "Rate limit reached"}}
    client = OpenAICompletionClient(api_key="k", session=_Session(_Response(429, body)))
    with pytest.raises(ProviderError) as excinfo:
        client.complete(MESSAGES)
    assert excinfo.value.status_code == 429
    assert excinfo.value.to_payload() == body


def test_non_json_error_body_is_wrapped() -> None:
    client = OpenAICompletionClient(api_key="k", session=_Session(_Response(502, text="Bad Gateway")))
    with pytest.raises(ProviderError) as excinfo:
        client.complete(MESSAGES)
    assert excinfo.value.status_code == 502
    assert excinfo.value.to_payload() == {"error": "Upstream provider error", "detail": "Bad Gateway"}


def test_content_parts_are_flattened() -> None:
    parts = [{"type": "text", "text": "We open at 9."}, {"type": "text", "text": "See you soon."}]
    client = OpenAICompletionClient(api_key="k", session=_Session(_Response(200, _reply(parts))))
    assert client.complete(MESSAGES).content == "We open at 9.\nSee you soon."


def test_missing_choices_gives_empty_reply() -> None:
    client = OpenAICompletionClient(api_key="k", session=_Session(_Response(200, {"id": "x"})))
    reply = client.complete(MESSAGES)
    assert reply.role == "assistant"
    assert reply.content == ""


def test_transport_errors_propagate() -> None:
    client = OpenAICompletionClient(api_key="k", session=_Session(error=requests.Timeout("slow")))
    with pytest.raises(requests.RequestException):
        client.complete(MESSAGES)
