"""Kernel – framework-agnostic building blocks."""

from cart_events.kernel.errors import (
    BaseError,
    CacheBackendError,
    ConflictError,
    DomainError,
    InfrastructureError,
    InvariantViolationError,
    NotFoundError,
    SerializationError,
    ValidationError,
)

__all__ = [
    "BaseError",
    "CacheBackendError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "InvariantViolationError",
    "NotFoundError",
    "SerializationError",
    "ValidationError",
]
