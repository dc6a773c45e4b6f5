"""Fire-and-forget booking relay to a spreadsheet-backed form endpoint."""

from __future__ import annotations

from dataclasses import dataclass

import orjson
import requests

from spa_chat.core.errors import Misconfigured
from spa_chat.core.logging import get_logger
from spa_chat.models.entities import Booking

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RelayOutcome:
    ok: bool
    status: int | None = None
    detail: str | None = None


class BookingRelay:
    """POSTs flat booking JSON as ``text/plain`` (no CORS preflight on the relay side).

    Success is a 2xx status or a JSON body carrying ``{"ok": true}``. There is
    no retry and no delivery confirmation beyond that.
    """

    def __init__(self, url: str | None, timeout: float = 30.0, session: requests.Session | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit(self, booking: Booking) -> RelayOutcome:
        if not self.url:
            raise Misconfigured("Missing booking relay URL")
        try:
            resp = self.session.post(
                self.url,
                data=orjson.dumps(booking.to_relay_payload()),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            logger.error("Booking relay request failed: %s", exc, extra={"ctx_source": booking.source})
            return RelayOutcome(ok=False, detail=str(exc))

        ok = 200 <= resp.status_code < 300 or _body_says_ok(resp.text)
        if not ok:
            logger.warning(
                "Booking relay returned non-success response",
                extra={"ctx_status": resp.status_code, "ctx_body": resp.text[:500]},
            )
        return RelayOutcome(ok=ok, status=resp.status_code, detail=None if ok else resp.text[:500])


def _body_says_ok(text: str) -> bool:
    try:
        body = orjson.loads(text)
    except orjson.JSONDecodeError:
        return False
    return isinstance(body, dict) and body.get("ok") is True


__all__ = ["BookingRelay", "RelayOutcome"]
