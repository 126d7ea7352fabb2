"""Application events – cart activity side-effect consumer."""

from __future__ import annotations

from collections import OrderedDict

from cart_events.application.events.consumer import EventConsumer
from cart_events.domain.carts import (
    CartAbandoned,
    CartCleared,
    CartCreated,
    InsufficientStockRequested,
    ItemAddedToCart,
)
from cart_events.kernel.ddd.domain_event import DomainEvent
from cart_events.observability.logging import get_logger

_log = get_logger(__name__)

#: Events this consumer reacts to; register it for exactly these types.
ACTIVITY_EVENTS: tuple[type[DomainEvent], ...] = (
    CartCreated,
    ItemAddedToCart,
    CartAbandoned,
    InsufficientStockRequested,
    CartCleared,
)


class CartActivityConsumer(EventConsumer[DomainEvent]):
    """Records shopper activity (engagement, abandonment, unmet demand).

    Idempotent by ``event_id``: a redelivered event is ignored.  The set of
    remembered ids is bounded to *memory* entries.
    """

    def __init__(self, memory: int = 10_000) -> None:
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._memory = memory
        self.unmet_demand: dict[int, int] = {}
        self.abandoned_carts: list[str] = []

    async def handle(self, event: DomainEvent) -> None:
        if event.event_id in self._seen:
            _log.debug("activity.duplicate_ignored", event_id=event.event_id)
            return
        self._remember(event.event_id)

        match event:
            case CartCreated(user_id=user_id):
                _log.info("activity.cart_created", user_id=user_id)
            case ItemAddedToCart():
                _log.info(
                    "activity.item_added",
                    user_id=event.user_id,
                    product_id=event.product_id,
                    quantity=event.quantity,
                    subtotal=str(event.subtotal),
                )
            case CartAbandoned():
                self.abandoned_carts.append(event.user_id)
                _log.warning(
                    "activity.cart_abandoned",
                    user_id=event.user_id,
                    item_count=event.item_count,
                    cart_total=str(event.cart_total),
                    last_activity=event.last_activity.isoformat(),
                )
            case InsufficientStockRequested():
                missing = event.requested_quantity - event.available_stock
                self.unmet_demand[event.product_id] = (
                    self.unmet_demand.get(event.product_id, 0) + missing
                )
                _log.warning(
                    "activity.insufficient_stock",
                    user_id=event.user_id,
                    product_id=event.product_id,
                    requested=event.requested_quantity,
                    available=event.available_stock,
                )
            case CartCleared():
                _log.info(
                    "activity.cart_cleared",
                    user_id=event.user_id,
                    removed_items=event.removed_items,
                    lost_total=str(event.lost_total),
                )
            case _:
                _log.debug("activity.ignored", event_type=event.event_type)

    def _remember(self, event_id: str) -> None:
        self._seen[event_id] = None
        while len(self._seen) > self._memory:
            self._seen.popitem(last=False)


__all__ = ["ACTIVITY_EVENTS", "CartActivityConsumer"]
