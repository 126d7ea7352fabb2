"""Repository port – async persistence for aggregate roots."""

from __future__ import annotations

import abc
import copy
from collections.abc import Hashable
from typing import Generic, TypeVar

from cart_events.kernel.ddd.aggregate import AggregateRoot
from cart_events.kernel.errors import NotFoundError

TAggregate = TypeVar("TAggregate", bound=AggregateRoot)


class Repository(abc.ABC, Generic[TAggregate]):
    """Port: repository for aggregate roots.

    The product and cart repositories of the HTTP application implement this
    port; the event pipeline only needs ``save`` to run before dispatch.
    """

    @abc.abstractmethod
    async def get(self, id: Hashable) -> TAggregate | None: ...

    async def get_or_raise(self, id: Hashable) -> TAggregate:
        aggregate = await self.get(id)
        if aggregate is None:
            raise NotFoundError(self.resource_name, id)
        return aggregate

    @abc.abstractmethod
    async def save(self, aggregate: TAggregate) -> None: ...

    @abc.abstractmethod
    async def delete(self, id: Hashable) -> None: ...

    @property
    def resource_name(self) -> str:
        return "Aggregate"


class InMemoryRepository(Repository[TAggregate]):
    """Dict-backed repository for tests and local development.

    Stored aggregates are copies, so a failed operation on a loaded instance
    never leaks into the store until ``save`` is called.
    """

    def __init__(self, resource_name: str = "Aggregate") -> None:
        self._items: dict[Hashable, TAggregate] = {}
        self._resource_name = resource_name

    @property
    def resource_name(self) -> str:
        return self._resource_name

    async def get(self, id: Hashable) -> TAggregate | None:  # noqa: A002
        stored = self._items.get(id)
        if stored is None:
            return None
        return copy.deepcopy(stored)

    async def save(self, aggregate: TAggregate) -> None:
        snapshot = copy.deepcopy(aggregate)
        snapshot.clear_events()
        self._items[aggregate.id] = snapshot

    async def delete(self, id: Hashable) -> None:  # noqa: A002
        self._items.pop(id, None)

    def all(self) -> list[TAggregate]:
        return [copy.deepcopy(a) for a in self._items.values()]


__all__ = ["InMemoryRepository", "Repository"]
