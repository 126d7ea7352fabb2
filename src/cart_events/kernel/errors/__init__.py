"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── InvariantViolationError
    │   ├── ValidationError
    │   ├── NotFoundError
    │   └── ConflictError
    │       └── OptimisticConcurrencyError  (application.event_sourcing.store)
    └── InfrastructureError  (infrastructure.py)
        ├── SerializationError
        └── CacheBackendError
"""

from cart_events.kernel.errors.base import BaseError
from cart_events.kernel.errors.domain import (
    ConflictError,
    DomainError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from cart_events.kernel.errors.infrastructure import (
    CacheBackendError,
    InfrastructureError,
    SerializationError,
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
