"""Composition root – builds the event pipeline from :class:`PipelineSettings`.

The consumer registration table is built here, once, and never changes at
runtime.  For every catalogue event the invocation order is: audit bridge,
cache invalidation, then cart activity (for the events it tracks).
"""
from __future__ import annotations

import dataclasses
from typing import Any

from cart_events.application.audit import AuditBridgeConsumer, AuditContextProvider
from cart_events.application.cache import (
    CacheBackend,
    CacheInvalidationConsumer,
    CacheInvalidationService,
    InMemoryCacheBackend,
)
from cart_events.application.event_sourcing import (
    AuditQueryService,
    EventStore,
    InMemoryEventStore,
    JsonEventSerializer,
)
from cart_events.application.events import CartActivityConsumer, EventDispatcher
from cart_events.application.events.activity import ACTIVITY_EVENTS
from cart_events.application.execution import WriteOperationExecutor
from cart_events.config import PipelineSettings
from cart_events.domain.carts import CART_EVENTS
from cart_events.domain.products import PRODUCT_EVENTS
from cart_events.kernel.ddd.domain_event import DomainEvent
from cart_events.kernel.time import Clock, SystemClock
from cart_events.observability.logging import configure_logging, get_logger

_log = get_logger(__name__)

#: Every event type the pipeline knows how to route.
CATALOGUE: tuple[type[DomainEvent], ...] = PRODUCT_EVENTS + CART_EVENTS


@dataclasses.dataclass
class Pipeline:
    """Wired components, ready to use after :meth:`start`."""

    settings: PipelineSettings
    store: EventStore
    dispatcher: EventDispatcher
    executor: WriteOperationExecutor[Any]
    audit_queries: AuditQueryService
    activity: CartActivityConsumer
    audit_bridge: AuditBridgeConsumer | None = None
    cache: CacheBackend | None = None
    cache_invalidation: CacheInvalidationService | None = None
    _resources: list[Any] = dataclasses.field(default_factory=list, repr=False)
    _engine: Any = dataclasses.field(default=None, repr=False)

    async def start(self) -> None:
        """Create the durable event table when the SQL store is in use."""
        if self._engine is not None:
            from cart_events.adapters.sqlalchemy import SQLAlchemyEventStore

            await SQLAlchemyEventStore.create_table(self._engine)
        _log.info(
            "pipeline.started",
            event_store=self.settings.event_store_backend,
            cache=self.settings.cache_backend if self.cache is not None else None,
            audit=self.audit_bridge is not None,
        )

    async def close(self) -> None:
        for resource in reversed(self._resources):
            await resource()
        self._resources.clear()


def _build_store(settings: PipelineSettings, clock: Clock, resources: list[Any]) -> tuple[EventStore, Any]:
    if settings.event_store_backend == "sqlalchemy":
        from cart_events.adapters.sqlalchemy import SQLAlchemyEventStore, SqlAlchemySessionFactory

        factory = SqlAlchemySessionFactory(settings.database_url)
        resources.append(factory.dispose)
        return SQLAlchemyEventStore(factory, clock=clock), factory.engine
    return InMemoryEventStore(clock=clock), None


def _build_cache(settings: PipelineSettings, clock: Clock, resources: list[Any]) -> CacheBackend:
    if settings.cache_backend == "redis":
        from cart_events.adapters.redis import RedisCacheBackend

        backend = RedisCacheBackend(settings.redis_url)
        resources.append(backend.close)
        return backend
    return InMemoryCacheBackend(clock=clock, default_ttl=settings.cache_default_ttl_seconds)


def build_pipeline(
    settings: PipelineSettings | None = None,
    *,
    clock: Clock | None = None,
    store: EventStore | None = None,
    cache: CacheBackend | None = None,
    context_provider: AuditContextProvider | None = None,
    configure_logs: bool = False,
) -> Pipeline:
    """Wire store, dispatcher, consumers and executor.

    Explicit *store* / *cache* arguments win over the backends named in
    *settings*.
    """
    settings = settings or PipelineSettings()
    clock = clock or SystemClock()
    if configure_logs:
        configure_logging(settings.log_level, json=settings.log_json)

    resources: list[Any] = []
    engine = None
    if store is None:
        store, engine = _build_store(settings, clock, resources)

    serializer = JsonEventSerializer()
    dispatcher = EventDispatcher(consumer_timeout=settings.consumer_timeout_seconds)

    bridge: AuditBridgeConsumer | None = None
    if settings.audit_enabled:
        bridge = AuditBridgeConsumer(
            store,
            context_provider=context_provider,
            serializer=serializer,
            max_attempts=settings.audit_append_attempts,
        )
        dispatcher.register_many(CATALOGUE, bridge)

    invalidation: CacheInvalidationService | None = None
    if settings.cache_enabled:
        if cache is None:
            cache = _build_cache(settings, clock, resources)
        invalidation = CacheInvalidationService(cache)
        dispatcher.register_many(CATALOGUE, CacheInvalidationConsumer(invalidation))
    else:
        cache = None

    activity = CartActivityConsumer()
    dispatcher.register_many(ACTIVITY_EVENTS, activity)

    pipeline = Pipeline(
        settings=settings,
        store=store,
        dispatcher=dispatcher,
        executor=WriteOperationExecutor(dispatcher),
        audit_queries=AuditQueryService(store, serializer, clock=clock),
        activity=activity,
        audit_bridge=bridge,
        cache=cache,
        cache_invalidation=invalidation,
        _resources=resources,
        _engine=engine,
    )
    _log.debug(
        "pipeline.built",
        registered_types=len(dispatcher.registered_types()),
    )
    return pipeline


__all__ = ["CATALOGUE", "Pipeline", "build_pipeline"]
