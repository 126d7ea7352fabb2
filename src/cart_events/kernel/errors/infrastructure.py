"""Infrastructure errors – I/O failures, codecs, cache backends."""

from __future__ import annotations

from typing import Any

from cart_events.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize an event payload."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


class CacheBackendError(InfrastructureError):
    """The cache backend rejected or failed an operation."""

    default_code = "cache_backend_error"

    def __init__(
        self,
        operation: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Cache operation '{operation}' failed", **kwargs)
        self.operation = operation


__all__ = ["CacheBackendError", "InfrastructureError", "SerializationError"]
