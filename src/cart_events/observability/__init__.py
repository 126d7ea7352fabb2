"""Observability – request correlation and structured logging."""

from cart_events.observability.correlation import CorrelationContext, RequestContext
from cart_events.observability.logging import configure_logging, get_logger

__all__ = [
    "CorrelationContext",
    "RequestContext",
    "configure_logging",
    "get_logger",
]
