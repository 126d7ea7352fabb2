"""Application cache – CacheBackend port and in-memory implementation."""
from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from cart_events.kernel.time import Clock, SystemClock

__all__ = ["CacheBackend", "InMemoryCacheBackend"]


@runtime_checkable
class CacheBackend(Protocol):
    async def get(self, key: str) -> Any: ...
    async def set(self, key: str, value: Any, ttl: float | None = None) -> None: ...
    async def remove(self, key: str) -> None: ...
    async def remove_by_pattern(self, pattern: str) -> int: ...  # returns number of removed keys
    async def exists(self, key: str) -> bool: ...
    async def clear_all(self) -> None: ...


@dataclass
class _Entry:
    value: Any
    expires_at: float | None


class InMemoryCacheBackend:
    """Dict-backed CacheBackend with TTL expiry read from an injected clock.

    Expired entries are dropped lazily, on the next access.  Patterns are
    shell-style globs (``products:*``) matched case-insensitively.
    """

    def __init__(self, clock: Clock | None = None, default_ttl: float | None = None) -> None:
        self._clock = clock or SystemClock()
        self._default_ttl = default_ttl
        self._data: dict[str, _Entry] = {}

    def _live(self, key: str) -> _Entry | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self._clock.timestamp() >= entry.expires_at:
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> Any:
        entry = self._live(key)
        return None if entry is None else entry.value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        expires_at = None if ttl is None else self._clock.timestamp() + ttl
        self._data[key] = _Entry(value, expires_at)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def remove_by_pattern(self, pattern: str) -> int:
        pattern = pattern.lower()
        keys = [k for k in self._data if fnmatch.fnmatchcase(k.lower(), pattern)]
        for key in keys:
            del self._data[key]
        return len(keys)

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def clear_all(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
