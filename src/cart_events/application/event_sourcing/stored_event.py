"""Application event sourcing – EventData (append candidate) and StoredEvent."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any
from uuid import uuid4

from cart_events.kernel.security.actor import ActorMetadata


@dataclasses.dataclass(frozen=True)
class EventData:
    """An event about to be appended.

    The store assigns ``aggregate_id``, ``version`` and ``recorded_at`` when
    it turns the candidate into a :class:`StoredEvent`.
    """

    event_type: str
    aggregate_type: str
    payload: bytes
    event_id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    occurred_on: datetime = dataclasses.field(
        default_factory=lambda: datetime.now(UTC)
    )
    actor: ActorMetadata = dataclasses.field(default_factory=ActorMetadata.system)
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_stored(
        self,
        aggregate_id: str,
        version: int,
        recorded_at: datetime,
    ) -> StoredEvent:
        return StoredEvent(
            aggregate_id=aggregate_id,
            version=version,
            event_id=self.event_id,
            event_type=self.event_type,
            aggregate_type=self.aggregate_type,
            payload=self.payload,
            occurred_on=self.occurred_on,
            recorded_at=recorded_at,
            actor=self.actor,
            metadata=self.metadata,
        )


@dataclasses.dataclass(frozen=True)
class StoredEvent:
    """An audit record as persisted in the event store.

    ``payload`` is the serialised audit payload (JSON bytes).  ``metadata``
    carries infrastructure-level concerns (correlation id, source event, …)
    and is exposed as a read-only mapping.
    """

    aggregate_id: str
    """Identifies the aggregate stream (e.g. ``"cart-u1"``)."""

    version: int
    """1-based, contiguous sequence number within the stream."""

    event_id: str
    event_type: str
    aggregate_type: str
    payload: bytes
    occurred_on: datetime
    """When the underlying domain fact happened."""

    recorded_at: datetime
    """When the store appended the record."""

    actor: ActorMetadata = dataclasses.field(default_factory=ActorMetadata.system)
    metadata: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


__all__ = ["EventData", "StoredEvent"]
