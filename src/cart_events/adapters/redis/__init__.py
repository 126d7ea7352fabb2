"""Redis adapter – distributed cache backend."""
from cart_events.adapters.redis.cache import RedisCacheBackend

__all__ = ["RedisCacheBackend"]
