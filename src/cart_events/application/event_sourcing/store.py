"""Application event sourcing – EventStore port and InMemoryEventStore."""

from __future__ import annotations

import abc
import asyncio
from collections.abc import Sequence

from cart_events.application.event_sourcing.stored_event import EventData, StoredEvent
from cart_events.kernel.errors import ConflictError
from cart_events.kernel.time import Clock, SystemClock
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)


class OptimisticConcurrencyError(ConflictError):
    """Raised when the expected stream version does not match the current one."""

    default_code = "concurrency_conflict"

    def __init__(self, aggregate_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Concurrency conflict on stream '{aggregate_id}': "
            f"expected version {expected}, found {actual}",
            detail={"aggregate_id": aggregate_id, "expected": expected, "actual": actual},
        )
        self.aggregate_id = aggregate_id
        self.expected = expected
        self.actual = actual


class EventStore(abc.ABC):
    """Port – append-only, per-aggregate audit event log.

    ``expected_version`` implements **optimistic concurrency control**:

    - Pass ``0`` when the stream must not exist yet (produces versions 1..N).
    - Pass the current version (the number of events in the stream) to
      append to an existing stream.
    - Any mismatch raises :class:`OptimisticConcurrencyError` and nothing
      from the batch is persisted.
    """

    @abc.abstractmethod
    async def append(
        self,
        aggregate_id: str,
        events: Sequence[EventData],
        expected_version: int,
    ) -> list[StoredEvent]:
        """Append *events* to *aggregate_id* atomically; return the stored records."""

    @abc.abstractmethod
    async def read(
        self,
        aggregate_id: str,
        from_version: int = 0,
    ) -> list[StoredEvent]:
        """Return the events of *aggregate_id* with ``version >= from_version``."""

    @abc.abstractmethod
    async def read_all(self) -> list[StoredEvent]:
        """Return every stored event in global append order."""

    @abc.abstractmethod
    async def stream_version(self, aggregate_id: str) -> int:
        """Return the current version of *aggregate_id* (``0`` when unknown)."""

    @staticmethod
    def _check_append(
        aggregate_id: str,
        events: Sequence[EventData],
        expected_version: int,
    ) -> None:
        if not aggregate_id:
            raise ValueError("aggregate_id must not be empty")
        if not events:
            raise ValueError("at least one event is required")
        if expected_version < 0:
            raise ValueError("expected_version must not be negative")


class InMemoryEventStore(EventStore):
    """In-memory :class:`EventStore`.

    Appends to the same stream are serialised by a per-stream
    :class:`asyncio.Lock`; unrelated streams never wait on each other.  The
    version check and the write happen without a suspension point, so a
    cancelled append either lands completely or not at all.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or SystemClock()
        # aggregate_id → ordered list of StoredEvent
        self._streams: dict[str, list[StoredEvent]] = {}
        self._log: list[StoredEvent] = []
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, aggregate_id: str) -> asyncio.Lock:
        return self._locks.setdefault(aggregate_id, asyncio.Lock())

    async def append(
        self,
        aggregate_id: str,
        events: Sequence[EventData],
        expected_version: int,
    ) -> list[StoredEvent]:
        self._check_append(aggregate_id, events, expected_version)
        async with self._lock_for(aggregate_id):
            actual_version = len(self._streams.get(aggregate_id, []))
            if actual_version != expected_version:
                _log.warning(
                    "event_store.conflict",
                    aggregate_id=aggregate_id,
                    expected_version=expected_version,
                    actual_version=actual_version,
                )
                raise OptimisticConcurrencyError(aggregate_id, expected_version, actual_version)

            recorded_at = self._clock.now()
            stored = [
                event.to_stored(aggregate_id, expected_version + i + 1, recorded_at)
                for i, event in enumerate(events)
            ]
            self._streams.setdefault(aggregate_id, []).extend(stored)
            self._log.extend(stored)
        return stored

    async def read(
        self,
        aggregate_id: str,
        from_version: int = 0,
    ) -> list[StoredEvent]:
        stream = self._streams.get(aggregate_id, [])
        return [e for e in stream if e.version >= from_version]

    async def read_all(self) -> list[StoredEvent]:
        return list(self._log)

    async def stream_version(self, aggregate_id: str) -> int:
        return len(self._streams.get(aggregate_id, []))

    def aggregate_ids(self) -> list[str]:
        """Return the ids of every stream, in creation order."""
        return list(self._streams)


__all__ = ["EventStore", "InMemoryEventStore", "OptimisticConcurrencyError"]
