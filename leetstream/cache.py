"""Short-lived freshness cache for resolved stream lists."""

from __future__ import annotations

import time
from typing import Callable, Generic, Hashable, Optional, Protocol, TypeVar

_V = TypeVar("_V")


class ResultCache(Protocol[_V]):
    def get(self, key: Hashable) -> Optional[_V]:
        ...

    def set(self, key: Hashable, value: _V) -> None:
        ...


class TTLCache(Generic[_V]):
    """In-memory cache whose entries expire ``ttl_seconds`` after they were written.

    Size is unbounded; expired entries are evicted when read.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, _V]] = {}

    def get(self, key: Hashable) -> Optional[_V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: _V) -> None:
        self._entries[key] = (self._clock(), value)

    def __len__(self) -> int:
        return len(self._entries)


class NullCache(Generic[_V]):
    """Cache that never stores anything."""

    def get(self, key: Hashable) -> Optional[_V]:
        return None

    def set(self, key: Hashable, value: _V) -> None:
        return None
