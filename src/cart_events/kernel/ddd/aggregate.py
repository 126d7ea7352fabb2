"""AggregateRoot – owns its buffer of uncommitted domain events."""

from __future__ import annotations

from collections.abc import Hashable

from cart_events.kernel.ddd.domain_event import DomainEvent
from cart_events.kernel.ddd.entity import Entity


class AggregateRoot(Entity):
    """Aggregate root – stages domain events raised by its business methods.

    The buffer is FIFO: insertion order is dispatch order.  It holds exactly
    the events staged since the last :meth:`clear_events`.  A buffer belongs
    to one in-memory instance and is not safe to share across tasks.
    """

    _events: list[DomainEvent]

    def __init__(self, id: Hashable) -> None:  # noqa: A002
        super().__init__(id)
        self._events = []

    def stage_event(self, event: DomainEvent) -> None:
        """Append *event* to the buffer of uncommitted events."""
        self._events.append(event)

    def pending_events(self) -> list[DomainEvent]:
        """Return a copy of the staged events, in staging order."""
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()

    def pull_events(self) -> list[DomainEvent]:
        """Return and clear the staged events."""
        events = self.pending_events()
        self._events.clear()
        return events

    @property
    def has_pending_events(self) -> bool:
        return bool(self._events)


__all__ = ["AggregateRoot"]
