"""SQLAlchemy adapter – SQLAlchemyEventStore."""
from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    insert,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cart_events.application.event_sourcing.store import EventStore, OptimisticConcurrencyError
from cart_events.application.event_sourcing.stored_event import EventData, StoredEvent
from cart_events.kernel.security.actor import ActorMetadata
from cart_events.kernel.time import Clock, SystemClock
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)

metadata = MetaData()

events_table = Table(
    "audit_events",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("aggregate_id", String(256), nullable=False, index=True),
    Column("version", Integer, nullable=False),
    Column("event_id", String(64), nullable=False),
    Column("event_type", String(256), nullable=False),
    Column("aggregate_type", String(128), nullable=False),
    Column("payload", LargeBinary, nullable=False),
    Column("actor_json", Text, nullable=False, default="{}"),
    Column("metadata_json", Text, nullable=False, default="{}"),
    Column("occurred_on", DateTime(timezone=True), nullable=False),
    Column("recorded_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("aggregate_id", "version", name="uq_audit_events_aggregate_version"),
)


def _aware(value: datetime) -> datetime:
    # SQLite drops the offset on the way back
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class SQLAlchemyEventStore(EventStore):
    """Append-only SQLAlchemy event store with optimistic concurrency.

    All streams share the ``audit_events`` table.  The
    ``(aggregate_id, version)`` pair is declared ``UNIQUE`` so the database
    rejects a concurrent writer that slipped past the version check; that
    rejection surfaces as :class:`OptimisticConcurrencyError` as well.
    ``read_all`` orders by the autoincrement ``seq`` column.

    Each ``append`` runs in its own transaction on a fresh session.  Call
    :meth:`create_table` once before using the store.

    Parameters
    ----------
    session_factory:
        Zero-argument callable returning an :class:`AsyncSession`
        (an ``async_sessionmaker`` or :class:`SqlAlchemySessionFactory`).
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock: Clock = clock or SystemClock()
        self._locks: dict[str, asyncio.Lock] = {}

    @staticmethod
    async def create_table(engine: AsyncEngine) -> None:
        """Create the ``audit_events`` table if it does not exist."""
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def append(
        self,
        aggregate_id: str,
        events: Sequence[EventData],
        expected_version: int,
    ) -> list[StoredEvent]:
        self._check_append(aggregate_id, events, expected_version)
        lock = self._locks.setdefault(aggregate_id, asyncio.Lock())
        async with lock:
            recorded_at = self._clock.now()
            stored = [
                event.to_stored(aggregate_id, expected_version + i + 1, recorded_at)
                for i, event in enumerate(events)
            ]
            try:
                async with self._session_factory() as session, session.begin():
                    actual = await self._version(session, aggregate_id)
                    if actual != expected_version:
                        raise OptimisticConcurrencyError(aggregate_id, expected_version, actual)
                    await session.execute(insert(events_table), [self._row(e) for e in stored])
            except IntegrityError as exc:
                actual = await self.stream_version(aggregate_id)
                raise OptimisticConcurrencyError(aggregate_id, expected_version, actual) from exc
            except OptimisticConcurrencyError as exc:
                _log.warning(
                    "event_store.conflict",
                    aggregate_id=aggregate_id,
                    expected_version=exc.expected,
                    actual_version=exc.actual,
                )
                raise
        return stored

    async def read(self, aggregate_id: str, from_version: int = 0) -> list[StoredEvent]:
        stmt = (
            select(events_table)
            .where(events_table.c.aggregate_id == aggregate_id)
            .where(events_table.c.version >= from_version)
            .order_by(events_table.c.version)
        )
        return await self._fetch(stmt)

    async def read_all(self) -> list[StoredEvent]:
        return await self._fetch(select(events_table).order_by(events_table.c.seq))

    async def stream_version(self, aggregate_id: str) -> int:
        async with self._session_factory() as session:
            return await self._version(session, aggregate_id)

    @staticmethod
    async def _version(session: AsyncSession, aggregate_id: str) -> int:
        stmt = select(func.coalesce(func.max(events_table.c.version), 0)).where(
            events_table.c.aggregate_id == aggregate_id
        )
        return int((await session.execute(stmt)).scalar_one())

    async def _fetch(self, stmt: Any) -> list[StoredEvent]:
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).fetchall()
        events: list[StoredEvent] = []
        for row in rows:
            try:
                events.append(self._event(row))
            except (ValueError, TypeError, AttributeError) as exc:
                _log.warning(
                    "event_store.row_dropped",
                    aggregate_id=row.aggregate_id,
                    version=row.version,
                    error=str(exc),
                )
        return events

    @staticmethod
    def _row(event: StoredEvent) -> dict[str, Any]:
        return {
            "aggregate_id": event.aggregate_id,
            "version": event.version,
            "event_id": event.event_id,
            "event_type": event.event_type,
            "aggregate_type": event.aggregate_type,
            "payload": event.payload,
            "actor_json": json.dumps(event.actor.to_dict()),
            "metadata_json": json.dumps(dict(event.metadata), default=str),
            "occurred_on": event.occurred_on,
            "recorded_at": event.recorded_at,
        }

    @staticmethod
    def _event(row: Any) -> StoredEvent:
        return StoredEvent(
            aggregate_id=row.aggregate_id,
            version=row.version,
            event_id=row.event_id,
            event_type=row.event_type,
            aggregate_type=row.aggregate_type,
            payload=bytes(row.payload),
            occurred_on=_aware(row.occurred_on),
            recorded_at=_aware(row.recorded_at),
            actor=ActorMetadata.from_dict(json.loads(row.actor_json or "{}")),
            metadata=json.loads(row.metadata_json) if row.metadata_json else {},
        )


__all__ = ["SQLAlchemyEventStore", "events_table"]
