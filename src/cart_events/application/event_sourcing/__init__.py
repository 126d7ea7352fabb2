"""Application – Event Sourcing (audit event log)."""

from cart_events.application.event_sourcing.audit_query import AuditEntry, AuditQueryService, AuditReport
from cart_events.application.event_sourcing.serialization import EventSerializer, JsonEventSerializer
from cart_events.application.event_sourcing.store import (
    EventStore,
    InMemoryEventStore,
    OptimisticConcurrencyError,
)
from cart_events.application.event_sourcing.stored_event import EventData, StoredEvent

__all__ = [
    "AuditEntry",
    "AuditQueryService",
    "AuditReport",
    "EventData",
    "EventSerializer",
    "EventStore",
    "InMemoryEventStore",
    "JsonEventSerializer",
    "OptimisticConcurrencyError",
    "StoredEvent",
]
