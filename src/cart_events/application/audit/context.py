"""Application audit – who is acting, for the audit record."""
from __future__ import annotations

import dataclasses
from typing import Any, Protocol

from cart_events.kernel.security.actor import ActorMetadata
from cart_events.observability.correlation import CorrelationContext


@dataclasses.dataclass(frozen=True)
class AuditContext:
    actor: ActorMetadata = dataclasses.field(default_factory=ActorMetadata.system)
    correlation_id: str | None = None
    extra: dict[str, Any] = dataclasses.field(default_factory=dict)


class AuditContextProvider(Protocol):
    def current(self) -> AuditContext: ...


class RequestAuditContextProvider:
    """Reads the ambient :class:`RequestContext`; system actor outside requests."""

    def current(self) -> AuditContext:
        ctx = CorrelationContext.get()
        if ctx is None:
            return AuditContext()
        return AuditContext(actor=ctx.actor, correlation_id=ctx.correlation_id)


class StaticAuditContextProvider:
    """Always reports the same actor (jobs, tests, seeding scripts)."""

    def __init__(self, actor: ActorMetadata, correlation_id: str | None = None) -> None:
        self._context = AuditContext(actor=actor, correlation_id=correlation_id)

    def current(self) -> AuditContext:
        return self._context


__all__ = [
    "AuditContext",
    "AuditContextProvider",
    "RequestAuditContextProvider",
    "StaticAuditContextProvider",
]
