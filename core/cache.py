# =============================================================================
# core/cache.py  -  Time-boxed Result Cache
# =============================================================================
#
# A small key/value store with per-entry time-to-live.  The pipeline uses it
# to memoize weather series and oracle recommendations so that repeated
# requests for the same attraction, window and preferences do not hit the
# network.
#
# Stale entries are treated as misses and evicted on read; they are never
# served.  The clock is injectable so expiry can be tested without sleeping.
# =============================================================================

from datetime import date
import hashlib
import time
from typing import Any, Callable, Optional

from core.models import VisitPreferences


class TTLCache:
    """In-process get/set store with a time-to-live per entry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            # Nothing to remember; also drop any older value for the key.
            self._entries.pop(key, None)
            return
        self._entries[key] = (self._clock() + ttl, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def preferences_digest(preferences: VisitPreferences) -> str:
    """Short stable hash of the preferences; interest order does not matter."""
    canonical = "|".join([
        preferences.budget_range,
        str(preferences.group_size),
        ",".join(sorted(preferences.interests)),
        str(preferences.avoid_crowds),
    ])
    return hashlib.sha1(canonical.encode()).hexdigest()[:12]


def recommendation_key(attraction_id: str, start: date, days: int,
                       preferences: VisitPreferences) -> str:
    return (
        f"recommendations:{attraction_id}:{start.isoformat()}:{days}:"
        f"{preferences_digest(preferences)}"
    )


def weather_key(attraction_id: str, start: date, days: int) -> str:
    return f"weather:{attraction_id}:{start.isoformat()}:{days}"
