"""Application cache – backend port, key builders and event-driven invalidation."""

from cart_events.application.cache.backend import CacheBackend, InMemoryCacheBackend
from cart_events.application.cache.invalidation import (
    CacheInvalidationConsumer,
    CacheInvalidationService,
)
from cart_events.application.cache.keys import CacheKeys

__all__ = [
    "CacheBackend",
    "CacheInvalidationConsumer",
    "CacheInvalidationService",
    "CacheKeys",
    "InMemoryCacheBackend",
]
