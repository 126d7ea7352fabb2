"""Application event sourcing – read-side queries over the audit log."""

from __future__ import annotations

import dataclasses
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any

from cart_events.application.event_sourcing.serialization import EventSerializer, JsonEventSerializer
from cart_events.application.event_sourcing.store import EventStore
from cart_events.application.event_sourcing.stored_event import StoredEvent
from cart_events.kernel.errors import SerializationError
from cart_events.kernel.time import Clock, SystemClock
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class AuditEntry:
    """A stored event together with its decoded payload."""
    event: StoredEvent
    data: dict[str, Any]


@dataclasses.dataclass(frozen=True)
class AuditReport:
    """Aggregated audit activity for a time window."""
    since: datetime
    until: datetime
    total_events: int
    events_by_type: dict[str, int]
    events_by_user: dict[str, int]
    events_by_day: dict[date, int]


def _within(event: StoredEvent, since: datetime | None, until: datetime | None) -> bool:
    if since is not None and event.occurred_on < since:
        return False
    if until is not None and event.occurred_on > until:
        return False
    return True


class AuditQueryService:
    """Answers audit questions from :meth:`EventStore.read_all` / :meth:`EventStore.read`.

    Type and user filters are case-insensitive substring matches so
    ``"cart"`` finds every cart audit record.
    """

    def __init__(
        self,
        store: EventStore,
        serializer: EventSerializer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._serializer = serializer or JsonEventSerializer()
        self._clock: Clock = clock or SystemClock()

    async def all_events(self, skip: int = 0, take: int = 100) -> list[StoredEvent]:
        """Newest first, paged."""
        events = await self._store.read_all()
        events.sort(key=lambda e: e.occurred_on, reverse=True)
        return events[skip : skip + take]

    async def events_by_type(
        self,
        event_type: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[StoredEvent]:
        needle = event_type.lower()
        events = [
            e for e in await self._store.read_all()
            if needle in e.event_type.lower() and _within(e, since, until)
        ]
        return sorted(events, key=lambda e: e.occurred_on, reverse=True)

    async def events_by_user(
        self,
        user_id: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[StoredEvent]:
        needle = user_id.lower()
        events = [
            e for e in await self._store.read_all()
            if needle in e.actor.user_id.lower() and _within(e, since, until)
        ]
        return sorted(events, key=lambda e: e.occurred_on, reverse=True)

    async def events_by_aggregate(self, aggregate_id: str) -> list[StoredEvent]:
        """Stream order (by version)."""
        return await self._store.read(aggregate_id)

    async def recent_events(self, hours: int = 24) -> list[StoredEvent]:
        cutoff = self._clock.now() - timedelta(hours=hours)
        events = [e for e in await self._store.read_all() if e.occurred_on >= cutoff]
        return sorted(events, key=lambda e: e.occurred_on, reverse=True)

    async def history(self, aggregate_id: str) -> list[AuditEntry]:
        """Decode the stream of *aggregate_id*; undecodable records are skipped."""
        entries: list[AuditEntry] = []
        for event in await self._store.read(aggregate_id):
            try:
                data = self._serializer.decode(event.payload)
            except SerializationError as exc:
                _log.warning(
                    "audit_query.decode_failed",
                    aggregate_id=aggregate_id,
                    version=event.version,
                    event_type=event.event_type,
                    error=exc.message,
                )
                continue
            entries.append(AuditEntry(event=event, data=data))
        return entries

    async def report(self, since: datetime, until: datetime) -> AuditReport:
        events = [e for e in await self._store.read_all() if _within(e, since, until)]
        return AuditReport(
            since=since,
            until=until,
            total_events=len(events),
            events_by_type=dict(Counter(e.event_type for e in events)),
            events_by_user=dict(Counter(e.actor.user_id for e in events)),
            events_by_day=dict(Counter(e.occurred_on.date() for e in events)),
        )


__all__ = ["AuditEntry", "AuditQueryService", "AuditReport"]
