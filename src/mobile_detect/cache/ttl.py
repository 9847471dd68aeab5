from __future__ import annotations

import math
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mobile_detect.cache.protocol import TTL


def ttl_seconds(ttl: TTL) -> float | None:
    """Convert a TTL to seconds. ``None`` means the record never expires."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    if isinstance(ttl, bool) or not isinstance(ttl, int | float):
        raise TypeError(f"TTL must be seconds, a timedelta or None, got {type(ttl).__name__}")
    seconds = float(ttl)
    if not math.isfinite(seconds):
        raise ValueError(f"TTL must be a finite number of seconds, got {ttl!r}")
    return seconds


def expiry_for(ttl: TTL, now: float) -> tuple[bool, float | None]:
    """Return ``(storable, expires_at)`` for a record written at ``now``.

    A zero or negative TTL is not storable.
    """
    seconds = ttl_seconds(ttl)
    if seconds is None:
        return True, None
    if seconds <= 0:
        return False, None
    return True, now + seconds


def is_expired(expires_at: float | None, now: float) -> bool:
    return expires_at is not None and now >= expires_at
