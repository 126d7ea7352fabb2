"""Application audit – AuditBridgeConsumer.

Turns every dispatched domain event into one audit record in the event
store.  The bridge is registered for the whole catalogue and never raises:
a failed audit write is logged and the business operation carries on.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict

from cart_events.application.audit.context import (
    AuditContext,
    AuditContextProvider,
    RequestAuditContextProvider,
)
from cart_events.application.audit.translations import AuditTranslation, translate
from cart_events.application.event_sourcing.serialization import (
    EventSerializer,
    JsonEventSerializer,
)
from cart_events.application.event_sourcing.store import (
    EventStore,
    OptimisticConcurrencyError,
)
from cart_events.application.event_sourcing.stored_event import EventData, StoredEvent
from cart_events.application.events.consumer import EventConsumer
from cart_events.kernel.ddd.domain_event import DomainEvent, DomainEventEnvelope
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)


class AuditBridgeConsumer(EventConsumer[DomainEvent]):
    """Appends an audit record for each domain event it is handed.

    Parameters
    ----------
    store:
        Destination event store.
    context_provider:
        Supplies the acting user and correlation id; defaults to the
        request context with a system-actor fallback.
    serializer:
        Payload codec (JSON by default).
    max_attempts:
        How many times to reload the stream version and retry after an
        :class:`OptimisticConcurrencyError` before giving up.
    memory:
        How many recently audited ``event_id`` values to remember so that a
        redelivered event is not recorded twice.
    """

    def __init__(
        self,
        store: EventStore,
        context_provider: AuditContextProvider | None = None,
        serializer: EventSerializer | None = None,
        max_attempts: int = 3,
        memory: int = 10_000,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._store = store
        self._context = context_provider or RequestAuditContextProvider()
        self._serializer = serializer or JsonEventSerializer()
        self._max_attempts = max_attempts
        self._memory = memory
        self._recorded: OrderedDict[str, None] = OrderedDict()
        self._in_flight: set[str] = set()
        self._locks: dict[str, asyncio.Lock] = {}

    async def handle(self, event: DomainEvent) -> None:
        try:
            await self.record(event)
        except Exception as exc:
            _log.error(
                "audit.record_failed",
                event_type=event.event_type,
                event_id=event.event_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    async def record(self, event: DomainEvent) -> StoredEvent | None:
        """Translate and append *event*; raises on failure.

        Returns ``None`` when the event was already audited or is being
        audited by a concurrent delivery.
        """
        if event.event_id in self._recorded or event.event_id in self._in_flight:
            _log.debug("audit.duplicate_ignored", event_id=event.event_id)
            return None

        self._in_flight.add(event.event_id)
        try:
            translation = translate(event, self._serializer)
            if translation.is_generic:
                _log.debug(
                    "audit.translation_gap",
                    event_type=event.event_type,
                    aggregate_id=translation.aggregate_id,
                )
            stored = await self._append(event, translation, self._context.current())
            self._remember(event.event_id)
        finally:
            self._in_flight.discard(event.event_id)
        return stored

    def _lock_for(self, aggregate_id: str) -> asyncio.Lock:
        return self._locks.setdefault(aggregate_id, asyncio.Lock())

    async def _append(
        self,
        event: DomainEvent,
        translation: AuditTranslation,
        context: AuditContext,
    ) -> StoredEvent:
        aggregate_id = translation.aggregate_id
        payload = self._serializer.encode(translation.payload)
        # Version read and append for one stream run back to back; conflicts
        # left to retry come from writers outside this bridge.
        async with self._lock_for(aggregate_id):
            for attempt in range(1, self._max_attempts + 1):
                expected = await self._store.stream_version(aggregate_id)
                envelope = DomainEventEnvelope(
                    event=event,
                    aggregate_id=aggregate_id,
                    aggregate_type=translation.aggregate_type,
                    sequence=expected + 1,
                    actor=context.actor,
                    correlation_id=context.correlation_id,
                    metadata=dict(context.extra),
                )
                data = EventData(
                    event_type=translation.event_type,
                    aggregate_type=envelope.aggregate_type,
                    payload=payload,
                    occurred_on=event.occurred_on,
                    actor=envelope.actor,
                    metadata=envelope.audit_metadata(),
                )
                try:
                    stored = await self._store.append(aggregate_id, [data], expected)
                except OptimisticConcurrencyError as exc:
                    if attempt == self._max_attempts:
                        raise
                    _log.info(
                        "audit.append_retry",
                        aggregate_id=aggregate_id,
                        attempt=attempt,
                        expected=exc.expected,
                        actual=exc.actual,
                    )
                    continue
                _log.debug(
                    "audit.recorded",
                    aggregate_id=aggregate_id,
                    version=stored[0].version,
                    audit_type=data.event_type,
                )
                return stored[0]
        raise AssertionError("unreachable")  # pragma: no cover

    def _remember(self, event_id: str) -> None:
        self._recorded[event_id] = None
        if len(self._recorded) > self._memory:
            self._recorded.popitem(last=False)


__all__ = ["AuditBridgeConsumer"]
