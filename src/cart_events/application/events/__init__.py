"""Application events – consumer port, fan-out dispatcher, side-effect consumers."""

from cart_events.application.events.activity import CartActivityConsumer
from cart_events.application.events.consumer import ConsumerFn, EventConsumer
from cart_events.application.events.dispatcher import (
    ConsumerFailure,
    DispatchReport,
    EventDispatcher,
)

__all__ = [
    "CartActivityConsumer",
    "ConsumerFailure",
    "ConsumerFn",
    "DispatchReport",
    "EventConsumer",
    "EventDispatcher",
]
