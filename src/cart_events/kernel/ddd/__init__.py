"""DDD building blocks – public re-export surface."""

from cart_events.kernel.ddd.aggregate import AggregateRoot
from cart_events.kernel.ddd.domain_event import DomainEvent, DomainEventEnvelope
from cart_events.kernel.ddd.entity import Entity
from cart_events.kernel.ddd.repository import InMemoryRepository, Repository

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "DomainEventEnvelope",
    "Entity",
    "InMemoryRepository",
    "Repository",
]
