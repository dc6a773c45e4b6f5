"""Error taxonomy surfaced by the chat service."""

from __future__ import annotations

from typing import Any


class ChatError(Exception):
    """Base class for errors rendered to HTTP callers as ``{error, detail?}``."""

    status_code: int = 500
    error: str = "Server error"

    def __init__(self, error: str | None = None, detail: str | None = None) -> None:
        self.error = error or self.error
        self.detail = detail
        super().__init__(self.error if detail is None else f"{self.error}: {detail}")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


class BadRequest(ChatError):
    """Malformed request input."""

    status_code = 400
    error = "Bad request"


class Misconfigured(ChatError):
    """A required credential or setting is missing."""

    status_code = 500
    error = "Service misconfigured"


class ServerError(ChatError):
    """Uncaught exception reported generically."""

    status_code = 500
    error = "Server error"


class NotFound(ChatError):
    status_code = 404
    error = "Not found"


class ProviderError(ChatError):
    """Completion provider returned a non-success status.

    The provider's status and body are passed through to the caller verbatim.
    """

    error = "Upstream provider error"

    def __init__(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(detail=f"status {status_code}")

    def to_payload(self) -> Any:
        if isinstance(self.body, (dict, list)):
            return self.body
        return {"error": self.error, "detail": str(self.body)}


class UpstreamFailure(Exception):
    """Record of an absorbed failure in a non-critical upstream call.

    Never propagated to HTTP callers; built so the failure can be logged with
    its operation name and original cause.
    """

    def __init__(self, operation: str, cause: BaseException | str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")


__all__ = [
    "ChatError",
    "BadRequest",
    "Misconfigured",
    "ServerError",
    "NotFound",
    "ProviderError",
    "UpstreamFailure",
]
