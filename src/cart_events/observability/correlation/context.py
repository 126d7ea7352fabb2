"""Observability – RequestContext, CorrelationContext."""
from __future__ import annotations

import dataclasses
from contextvars import ContextVar
from uuid import uuid4

from cart_events.kernel.security.actor import ActorMetadata


@dataclasses.dataclass(frozen=True)
class RequestContext:
    """Ambient context for a single write operation."""
    correlation_id: str
    actor: ActorMetadata = dataclasses.field(default_factory=ActorMetadata.system)

    @classmethod
    def new(cls, actor: ActorMetadata | None = None) -> "RequestContext":
        return cls(correlation_id=str(uuid4()), actor=actor or ActorMetadata.system())


_CTX_VAR: ContextVar[RequestContext | None] = ContextVar("_cart_events_request_ctx", default=None)


class CorrelationContext:
    """Ambient request context stored in a ``ContextVar``."""

    @staticmethod
    def set(ctx: RequestContext) -> None:
        _CTX_VAR.set(ctx)

    @staticmethod
    def get() -> RequestContext | None:
        return _CTX_VAR.get()

    @staticmethod
    def clear() -> None:
        _CTX_VAR.set(None)

    @staticmethod
    def set_from_headers(
        headers: dict[str, str],
        remote_addr: str | None = None,
    ) -> RequestContext:
        """Build the request context from HTTP headers and store it.

        Correlation id: ``X-Correlation-ID`` → ``X-Request-ID`` → generated.
        Client IP: first hop of ``X-Forwarded-For`` → ``X-Real-IP`` →
        *remote_addr* → ``"unknown"``.  The acting user comes from
        ``X-User-ID`` / ``X-User-Name`` (set by the auth gateway); requests
        without them are anonymous.

        Header names are matched case-insensitively.
        """
        norm: dict[str, str] = {k.lower(): v for k, v in headers.items()}

        correlation_id = (
            norm.get("x-correlation-id")
            or norm.get("x-request-id")
            or str(uuid4())
        )

        forwarded = norm.get("x-forwarded-for", "")
        ip_address = (
            forwarded.split(",")[0].strip()
            or norm.get("x-real-ip")
            or remote_addr
            or "unknown"
        )
        user_agent = norm.get("user-agent", "")

        user_id = norm.get("x-user-id")
        if user_id:
            actor = ActorMetadata(
                user_id=user_id,
                user_name=norm.get("x-user-name") or user_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        else:
            actor = ActorMetadata.anonymous(ip_address=ip_address, user_agent=user_agent)

        ctx = RequestContext(correlation_id=correlation_id, actor=actor)
        _CTX_VAR.set(ctx)
        return ctx


__all__ = ["CorrelationContext", "RequestContext"]
