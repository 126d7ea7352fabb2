"""Kernel security – acting-user metadata recorded on audit events."""
from cart_events.kernel.security.actor import ActorMetadata

__all__ = ["ActorMetadata"]
