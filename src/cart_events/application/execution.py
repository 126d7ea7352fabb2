"""Application execution – run a write, persist, then publish its events.

The order is fixed: business operation, ``repository.save``, dispatch of the
staged events, buffer clear.  Consumers therefore only ever see events whose
state change has been persisted.
"""
from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from cart_events.application.events.dispatcher import DispatchReport, EventDispatcher
from cart_events.kernel.ddd.aggregate import AggregateRoot
from cart_events.kernel.ddd.repository import Repository
from cart_events.kernel.errors import ConflictError
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)

TAggregate = TypeVar("TAggregate", bound=AggregateRoot)

#: Business operation: mutates the aggregate (staging events); may be async.
Operation = Callable[[TAggregate], Any]


class WriteOperationExecutor(Generic[TAggregate]):
    """Executes write operations against aggregates and publishes their events.

    If the operation or the save raises, the staged events are discarded
    undispatched and the error propagates unchanged.
    """

    def __init__(self, dispatcher: EventDispatcher) -> None:
        self._dispatcher = dispatcher

    async def execute(
        self,
        entity: TAggregate,
        operation: Operation[TAggregate],
        repository: Repository[TAggregate],
    ) -> Any:
        """Run *operation* on *entity*, save it and dispatch its events.

        Returns whatever *operation* returned.
        """
        try:
            result = operation(entity)
            if inspect.isawaitable(result):
                result = await result
            await repository.save(entity)
        except BaseException:
            entity.clear_events()
            raise

        events = entity.pending_events()
        try:
            report = await self._dispatcher.dispatch_all(events)
        finally:
            entity.clear_events()
        self._log_report(entity, report)
        return result

    async def execute_with_retry(
        self,
        load: Callable[[], Awaitable[TAggregate]],
        operation: Operation[TAggregate],
        repository: Repository[TAggregate],
        attempts: int = 3,
    ) -> Any:
        """Reload-mutate-save loop for writes that may lose an optimistic race.

        *load* must return a fresh aggregate each call; a
        :class:`ConflictError` (including :class:`OptimisticConcurrencyError`)
        from the save triggers a retry until *attempts* is exhausted.
        """
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        for attempt in range(1, attempts + 1):
            entity = await load()
            try:
                return await self.execute(entity, operation, repository)
            except ConflictError as exc:
                if attempt == attempts:
                    raise
                _log.info(
                    "execution.retry",
                    aggregate_id=str(entity.id),
                    attempt=attempt,
                    error=type(exc).__name__,
                )
        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def _log_report(entity: AggregateRoot, report: DispatchReport) -> None:
        if report.failures:
            _log.warning(
                "execution.consumers_failed",
                aggregate_id=str(entity.id),
                delivered=report.delivered,
                failed=report.failed,
            )


__all__ = ["Operation", "WriteOperationExecutor"]
