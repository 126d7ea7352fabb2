"""Application events – EventDispatcher (in-process fan-out)."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Iterable
from typing import Any

from cart_events.application.events.consumer import ConsumerFn, EventConsumer
from cart_events.kernel.ddd.domain_event import DomainEvent
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class ConsumerFailure:
    """One consumer invocation that raised or timed out."""
    event_type: str
    event_id: str
    consumer: str
    error: str


@dataclasses.dataclass
class DispatchReport:
    """Outcome of a dispatch call; callers are free to ignore it."""
    delivered: int = 0
    failures: list[ConsumerFailure] = dataclasses.field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def merge(self, other: DispatchReport) -> None:
        self.delivered += other.delivered
        self.failures.extend(other.failures)


@dataclasses.dataclass(frozen=True)
class _Registration:
    name: str
    call: ConsumerFn


def _registration(consumer: EventConsumer[Any] | ConsumerFn) -> _Registration:
    if isinstance(consumer, EventConsumer):
        return _Registration(consumer.name, consumer.handle)
    name = getattr(consumer, "__qualname__", None) or repr(consumer)
    return _Registration(name, consumer)


class EventDispatcher:
    """Delivers each event to every consumer registered for its concrete type.

    Consumers run sequentially in registration order, in the caller's task.
    Every invocation is isolated: an exception (or a timeout when
    *consumer_timeout* is set) is logged and recorded in the returned
    :class:`DispatchReport`, and the remaining consumers still run.  Task
    cancellation is never swallowed.

    Example::

        dispatcher = EventDispatcher(consumer_timeout=2.0)
        dispatcher.register(ItemAddedToCart, audit_bridge)
        dispatcher.register(ItemAddedToCart, cache_invalidation)
        await dispatcher.dispatch_all(cart.pending_events())
    """

    def __init__(self, consumer_timeout: float | None = None) -> None:
        if consumer_timeout is not None and consumer_timeout <= 0:
            raise ValueError("consumer_timeout must be positive")
        self._timeout = consumer_timeout
        self._consumers: dict[type[DomainEvent], list[_Registration]] = {}

    def register(
        self,
        event_type: type[DomainEvent],
        consumer: EventConsumer[Any] | ConsumerFn,
    ) -> None:
        self._consumers.setdefault(event_type, []).append(_registration(consumer))

    def register_many(
        self,
        event_types: Iterable[type[DomainEvent]],
        consumer: EventConsumer[Any] | ConsumerFn,
    ) -> None:
        for event_type in event_types:
            self.register(event_type, consumer)

    def consumers_for(self, event_type: type[DomainEvent]) -> list[str]:
        """Names of the consumers registered for *event_type*, in call order."""
        return [r.name for r in self._consumers.get(event_type, [])]

    def registered_types(self) -> list[type[DomainEvent]]:
        return list(self._consumers)

    async def dispatch(self, event: DomainEvent) -> DispatchReport:
        report = DispatchReport()
        registrations = self._consumers.get(type(event), [])
        if not registrations:
            _log.debug("dispatch.no_consumers", event_type=event.event_type, event_id=event.event_id)
            return report

        for registration in registrations:
            try:
                await self._invoke(registration, event)
            except Exception as exc:  # noqa: BLE001 – isolate consumers
                failure = ConsumerFailure(
                    event_type=event.event_type,
                    event_id=event.event_id,
                    consumer=registration.name,
                    error=repr(exc),
                )
                report.failures.append(failure)
                _log.error(
                    "dispatch.consumer_failed",
                    event_type=failure.event_type,
                    event_id=failure.event_id,
                    consumer=failure.consumer,
                    error=failure.error,
                )
            else:
                report.delivered += 1

        _log.debug(
            "dispatch.completed",
            event_type=event.event_type,
            event_id=event.event_id,
            delivered=report.delivered,
            failed=report.failed,
        )
        return report

    async def dispatch_all(self, events: Iterable[DomainEvent]) -> DispatchReport:
        report = DispatchReport()
        for event in events:
            report.merge(await self.dispatch(event))
        return report

    async def _invoke(self, registration: _Registration, event: DomainEvent) -> None:
        if self._timeout is None:
            await registration.call(event)
        else:
            await asyncio.wait_for(registration.call(event), timeout=self._timeout)


__all__ = ["ConsumerFailure", "DispatchReport", "EventDispatcher"]
