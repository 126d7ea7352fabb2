"""
cart_events – domain-event dispatch and event-sourced audit pipeline for the
shopping-cart backend.

Import path convention::

    from cart_events.kernel.ddd import DomainEvent, Entity
    from cart_events.application.events import EventDispatcher
    from cart_events.application.event_sourcing import InMemoryEventStore
    from cart_events.bootstrap import build_pipeline
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
