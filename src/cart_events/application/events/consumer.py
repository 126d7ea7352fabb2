"""Application events – EventConsumer port."""

from __future__ import annotations

import abc
from typing import Any, Awaitable, Callable, Generic, TypeVar

from cart_events.kernel.ddd.domain_event import DomainEvent

E = TypeVar("E", bound=DomainEvent)

#: A plain async function may be registered in place of an ``EventConsumer``.
ConsumerFn = Callable[[Any], Awaitable[None]]


class EventConsumer(abc.ABC, Generic[E]):
    """Reacts to dispatched domain events.

    Delivery is at-least-once, so ``handle`` must tolerate seeing the same
    ``event_id`` twice.
    """

    @abc.abstractmethod
    async def handle(self, event: E) -> None: ...

    @property
    def name(self) -> str:
        return type(self).__name__


__all__ = ["ConsumerFn", "EventConsumer"]
