"""Time helpers."""

from __future__ import annotations

import time


def now_ms() -> int:
    """Return current timestamp in milliseconds."""
    return int(time.time() * 1000)


def minutes_ago_ms(minutes: float) -> int:
    """Timestamp in milliseconds *minutes* before now."""
    return now_ms() - int(minutes * 60 * 1000)


__all__ = ["now_ms", "minutes_ago_ms"]
