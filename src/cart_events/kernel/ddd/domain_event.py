"""Domain events and their envelopes."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from cart_events.kernel.security.actor import ActorMetadata


@dataclasses.dataclass(frozen=True)
class DomainEvent:
    """Base class for domain events.

    Subclasses declare their payload as dataclass fields.  ``event_id`` and
    ``occurred_on`` are keyword-only so subclasses may declare required
    positional fields.

    Example::

        @dataclasses.dataclass(frozen=True)
        class ProductDeleted(DomainEvent):
            product_id: int
            name: str
    """

    event_id: str = dataclasses.field(
        default_factory=lambda: str(uuid4()), kw_only=True
    )
    occurred_on: datetime = dataclasses.field(
        default_factory=lambda: datetime.now(UTC), kw_only=True
    )

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def payload(self) -> dict[str, Any]:
        """Return the fact-specific fields (everything but identity and time)."""
        return {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if f.name not in ("event_id", "occurred_on")
        }


@dataclasses.dataclass(frozen=True)
class DomainEventEnvelope:
    """Wraps a ``DomainEvent`` with routing & audit metadata."""

    event: DomainEvent
    aggregate_id: str
    aggregate_type: str
    sequence: int
    actor: ActorMetadata = dataclasses.field(default_factory=ActorMetadata.system)
    correlation_id: str | None = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def event_type(self) -> str:
        return self.event.event_type

    @property
    def event_id(self) -> str:
        return self.event.event_id

    def audit_metadata(self) -> dict[str, Any]:
        """Metadata for the audit record written from this envelope.

        Links the record back to its source event and carries the correlation
        id when one is known.
        """
        data: dict[str, Any] = {
            "source_event_id": self.event_id,
            "source_event_type": self.event_type,
            **self.metadata,
        }
        if self.correlation_id is not None:
            data["correlation_id"] = self.correlation_id
        return data


__all__ = ["DomainEvent", "DomainEventEnvelope"]
