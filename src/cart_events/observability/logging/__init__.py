"""Observability – structured logging helpers."""
from cart_events.observability.logging.factory import configure_logging
from cart_events.observability.logging.processors import CorrelationProcessor, get_logger

__all__ = ["CorrelationProcessor", "configure_logging", "get_logger"]
