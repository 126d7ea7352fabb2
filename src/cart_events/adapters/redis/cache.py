"""Redis adapter – RedisCacheBackend."""
from __future__ import annotations

import json
from typing import Any

from cart_events.kernel.errors import CacheBackendError


def _require_redis() -> Any:
    try:
        import redis.asyncio as aioredis
        return aioredis
    except ImportError as exc:
        raise ImportError("Install 'cart-events[redis]' to use the Redis adapter") from exc


def _case_insensitive(pattern: str) -> str:
    """Rewrite a Redis glob so ``MATCH`` ignores letter case.

    Bare letters become ``[xX]`` classes.  Escaped characters and the
    contents of existing ``[...]`` classes are copied unchanged, so they keep
    their case.
    """
    out: list[str] = []
    in_class = escaped = False
    for ch in pattern:
        if escaped:
            escaped = False
            out.append(ch)
        elif ch == "\\":
            escaped = True
            out.append(ch)
        elif in_class:
            in_class = ch != "]"
            out.append(ch)
        elif ch == "[":
            in_class = True
            out.append(ch)
        elif ch.isalpha():
            out.append(f"[{ch.lower()}{ch.upper()}]")
        else:
            out.append(ch)
    return "".join(out)


class RedisCacheBackend:
    """CacheBackend over ``redis.asyncio``.

    Values are stored as JSON text; ``remove_by_pattern`` walks the keyspace
    with ``SCAN MATCH`` and deletes in batches of *scan_count*.  Any client
    error is re-raised as :class:`CacheBackendError`.
    """

    def __init__(self, url: str, scan_count: int = 500, **kwargs: Any) -> None:
        aioredis = _require_redis()
        self._client = aioredis.from_url(url, decode_responses=True, **kwargs)
        self._scan_count = scan_count

    async def get(self, key: str) -> Any:
        try:
            raw = await self._client.get(key)
        except Exception as exc:
            raise CacheBackendError("get", cause=exc) from exc
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ex = None if ttl is None else max(1, int(ttl))
        try:
            await self._client.set(key, json.dumps(value, default=str), ex=ex)
        except Exception as exc:
            raise CacheBackendError("set", cause=exc) from exc

    async def remove(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except Exception as exc:
            raise CacheBackendError("remove", cause=exc) from exc

    async def remove_by_pattern(self, pattern: str) -> int:
        match = _case_insensitive(pattern)
        removed = 0
        batch: list[str] = []
        try:
            async for key in self._client.scan_iter(match=match, count=self._scan_count):
                batch.append(key)
                if len(batch) >= self._scan_count:
                    removed += await self._client.delete(*batch)
                    batch.clear()
            if batch:
                removed += await self._client.delete(*batch)
        except Exception as exc:
            raise CacheBackendError("remove_by_pattern", cause=exc) from exc
        return removed

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(key))
        except Exception as exc:
            raise CacheBackendError("exists", cause=exc) from exc

    async def clear_all(self) -> None:
        try:
            await self._client.flushdb()
        except Exception as exc:
            raise CacheBackendError("clear_all", cause=exc) from exc

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["RedisCacheBackend"]
