"""Unit tests for the cache backend, key builders and invalidation consumer."""

from __future__ import annotations

import asyncio
from decimal import Decimal

from structlog.testing import capture_logs

from cart_events.application.cache import (
    CacheBackend,
    CacheInvalidationConsumer,
    CacheInvalidationService,
    CacheKeys,
    InMemoryCacheBackend,
)
from cart_events.domain import CartCleared, ItemAddedToCart, ProductPriceChanged
from cart_events.kernel.ddd import DomainEvent
from cart_events.testing.fakes import FailingCacheBackend, FakeClock, RecordingCacheBackend


class TestCacheKeys:
    def test_key_shapes(self) -> None:
        assert CacheKeys.ALL_PRODUCTS == "products:all"
        assert CacheKeys.product(42) == "products:id:42"
        assert CacheKeys.products_by_category("electronics") == "products:category:ELECTRONICS"
        assert CacheKeys.cart("u1") == "carts:user:u1"
        assert CacheKeys.PRODUCTS_PATTERN == "products:*"
        assert CacheKeys.CARTS_PATTERN == "carts:*"


class TestInMemoryCacheBackend:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryCacheBackend(), CacheBackend)

    def test_set_get_remove(self) -> None:
        async def run() -> None:
            cache = InMemoryCacheBackend()
            await cache.set("k", {"v": 1})
            assert await cache.get("k") == {"v": 1}
            assert await cache.exists("k")
            await cache.remove("k")
            assert await cache.get("k") is None
            await cache.remove("k")  # removing twice is fine
        asyncio.run(run())

    def test_ttl_expiry_follows_clock(self) -> None:
        clock = FakeClock()

        async def run() -> None:
            cache = InMemoryCacheBackend(clock=clock)
            await cache.set("k", "v", ttl=60)
            clock.advance(seconds=59)
            assert await cache.get("k") == "v"
            clock.advance(seconds=1)
            assert await cache.get("k") is None
            assert not await cache.exists("k")
        asyncio.run(run())

    def test_default_ttl(self) -> None:
        clock = FakeClock()

        async def run() -> None:
            cache = InMemoryCacheBackend(clock=clock, default_ttl=10)
            await cache.set("k", "v")
            clock.advance(seconds=11)
            assert await cache.get("k") is None
        asyncio.run(run())

    def test_remove_by_pattern_is_case_insensitive_glob(self) -> None:
        async def run() -> tuple[int, list[str]]:
            cache = InMemoryCacheBackend()
            for key in ("products:all", "Products:id:1", "carts:user:u1"):
                await cache.set(key, 1)
            removed = await cache.remove_by_pattern("PRODUCTS:*")
            remaining = [k for k in ("products:all", "Products:id:1", "carts:user:u1") if await cache.exists(k)]
            return removed, remaining

        assert asyncio.run(run()) == (2, ["carts:user:u1"])

    def test_clear_all(self) -> None:
        async def run() -> int:
            cache = InMemoryCacheBackend()
            await cache.set("a", 1)
            await cache.set("b", 2)
            await cache.clear_all()
            return len(cache)

        assert asyncio.run(run()) == 0


def _item_added(user_id: str = "u1") -> ItemAddedToCart:
    return ItemAddedToCart(user_id, 42, "Laptop", 2, Decimal("10"), Decimal("20"))


class TestCacheInvalidationConsumer:
    def test_cart_event_evicts_cart_key_and_pattern(self) -> None:
        async def run() -> RecordingCacheBackend:
            cache = RecordingCacheBackend()
            await cache.set(CacheKeys.cart("u1"), {"items": []})
            await cache.set(CacheKeys.cart("u2"), {"items": []})
            await cache.set(CacheKeys.ALL_PRODUCTS, [])
            await CacheInvalidationConsumer(CacheInvalidationService(cache)).handle(_item_added())
            return cache

        cache = asyncio.run(run())
        assert cache.removed_keys == ["carts:user:u1"]
        assert cache.removed_patterns == ["carts:*"]
        assert asyncio.run(cache.exists(CacheKeys.ALL_PRODUCTS))
        assert not asyncio.run(cache.exists(CacheKeys.cart("u2")))

    def test_product_event_evicts_id_listing_and_pattern(self) -> None:
        event = ProductPriceChanged(7, "Mouse", Decimal("10"), Decimal("12"), Decimal("20"))

        async def run() -> RecordingCacheBackend:
            cache = RecordingCacheBackend()
            await cache.set(CacheKeys.products_by_category("acc"), [1])
            await CacheInvalidationConsumer(CacheInvalidationService(cache)).handle(event)
            return cache

        cache = asyncio.run(run())
        assert cache.removed_keys == ["products:id:7", "products:all"]
        assert cache.removed_patterns == ["products:*"]
        assert not asyncio.run(cache.exists("products:category:ACC"))

    def test_backend_failure_is_logged_and_swallowed(self) -> None:
        backend = FailingCacheBackend()

        async def run() -> None:
            consumer = CacheInvalidationConsumer(CacheInvalidationService(backend))
            await consumer.handle(CartCleared("u1", 1, Decimal("5")))

        with capture_logs() as logs:
            asyncio.run(run())
        assert backend.attempts == ["remove", "remove_by_pattern"]
        events = {log["event"] for log in logs}
        assert {"cache.remove_failed", "cache.remove_pattern_failed"} <= events

    def test_unrelated_event_is_ignored(self) -> None:
        async def run() -> RecordingCacheBackend:
            cache = RecordingCacheBackend()
            await CacheInvalidationConsumer(CacheInvalidationService(cache)).handle(DomainEvent())
            return cache

        cache = asyncio.run(run())
        assert cache.removed_keys == []
        assert cache.removed_patterns == []

    def test_invalidate_all(self) -> None:
        async def run() -> int:
            cache = InMemoryCacheBackend()
            await cache.set("x", 1)
            await CacheInvalidationService(cache).invalidate_all()
            return len(cache)

        assert asyncio.run(run()) == 0

    def test_invalidate_all_swallows_backend_errors(self) -> None:
        with capture_logs() as logs:
            asyncio.run(CacheInvalidationService(FailingCacheBackend()).invalidate_all())
        assert logs[0]["event"] == "cache.clear_failed"
