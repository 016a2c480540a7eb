"""In-memory key-addressed cache with per-entry expiry."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_TTL_S = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    """One stored value and its validity window, in clock seconds."""

    value: Any
    stored_at: float
    expires_at: float


@dataclass(frozen=True)
class CacheStats:
    """Entry counts at a point in time."""

    total: int
    active: int
    expired: int


class TTLCache:
    """Time-to-live store with lazy expiry on read.

    Expiry is always re-checked on ``get``/``has``; ``cleanup`` only bounds
    memory and never decides what a read returns. An entry is expired once
    ``elapsed >= ttl``.
    """

    def __init__(
        self,
        *,
        default_ttl_s: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl_s <= 0:
            raise ValueError("default_ttl_s must be positive")
        self.default_ttl_s = float(default_ttl_s)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def set(self, key: str, value: Any, ttl_s: float | None = None) -> None:
        ttl = self.default_ttl_s if ttl_s is None else float(ttl_s)
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl_s!r}")
        now = self._clock()
        self._entries[key] = CacheEntry(value=value, stored_at=now, expires_at=now + ttl)

    def get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        return None if entry is None else entry.value

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def cleanup(self) -> int:
        """Evict expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> CacheStats:
        now = self._clock()
        total = len(self._entries)
        expired = sum(1 for entry in self._entries.values() if now >= entry.expires_at)
        return CacheStats(total=total, active=total - expired, expired=expired)
