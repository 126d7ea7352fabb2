"""Application cache – event-driven cache invalidation.

Cache eviction is best effort: a failing backend is logged and never turns a
successful write into a failed one.
"""
from __future__ import annotations

from cart_events.application.cache.backend import CacheBackend
from cart_events.application.cache.keys import CacheKeys
from cart_events.application.events.consumer import EventConsumer
from cart_events.domain.carts import CART_EVENTS
from cart_events.domain.products import PRODUCT_EVENTS
from cart_events.kernel.ddd.domain_event import DomainEvent
from cart_events.observability.logging import get_logger

__all__ = ["CacheInvalidationConsumer", "CacheInvalidationService"]

_log = get_logger(__name__)


class CacheInvalidationService:
    """Evicts the product and cart read caches."""

    def __init__(self, backend: CacheBackend) -> None:
        self._backend = backend

    async def invalidate_products(self, product_id: int | None = None) -> None:
        if product_id is not None:
            await self._remove(CacheKeys.product(product_id))
        await self._remove(CacheKeys.ALL_PRODUCTS)
        # category and search listings cannot be targeted by id
        await self._remove_pattern(CacheKeys.PRODUCTS_PATTERN)

    async def invalidate_carts(self, user_id: str | None = None) -> None:
        if user_id is not None:
            await self._remove(CacheKeys.cart(user_id))
        await self._remove_pattern(CacheKeys.CARTS_PATTERN)

    async def invalidate_all(self) -> None:
        try:
            await self._backend.clear_all()
        except Exception as exc:
            _log.warning("cache.clear_failed", error=str(exc))
            return
        _log.info("cache.cleared")

    async def _remove(self, key: str) -> None:
        try:
            await self._backend.remove(key)
        except Exception as exc:
            _log.warning("cache.remove_failed", key=key, error=str(exc))
            return
        _log.debug("cache.removed", key=key)

    async def _remove_pattern(self, pattern: str) -> None:
        try:
            removed = await self._backend.remove_by_pattern(pattern)
        except Exception as exc:
            _log.warning("cache.remove_pattern_failed", pattern=pattern, error=str(exc))
            return
        _log.debug("cache.removed_pattern", pattern=pattern, removed=removed)


class CacheInvalidationConsumer(EventConsumer[DomainEvent]):
    """Maps product and cart events onto cache evictions."""

    def __init__(self, service: CacheInvalidationService) -> None:
        self._service = service

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, PRODUCT_EVENTS):
            await self._service.invalidate_products(event.product_id)  # type: ignore[attr-defined]
        elif isinstance(event, CART_EVENTS):
            await self._service.invalidate_carts(event.user_id)  # type: ignore[attr-defined]
        else:
            _log.debug("cache.no_invalidation_rule", event_type=event.event_type)
