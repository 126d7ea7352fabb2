"""Application audit – domain event → audit record translation table.

Mapped events get a typed payload of their own; everything else falls back
to the generic ``DomainOperationAudit`` shape, which keeps the whole original
event as serialised JSON so nothing goes unaudited when new event types
appear.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from cart_events.application.event_sourcing.serialization import EventSerializer
from cart_events.domain.carts import (
    CART_EVENTS,
    CartCleared,
    CartCreated,
    CartItemQuantityUpdated,
    ItemAddedToCart,
    ItemRemovedFromCart,
)
from cart_events.domain.products import (
    PRODUCT_EVENTS,
    ProductCreated,
    ProductDeleted,
    ProductPriceChanged,
    ProductStockChanged,
    ProductUpdated,
)
from cart_events.kernel.ddd.domain_event import DomainEvent

GENERIC_AUDIT_TYPE = "DomainOperationAudit"

_PRODUCT = "Product"
_CART = "Cart"


@dataclasses.dataclass(frozen=True)
class AuditTranslation:
    aggregate_id: str
    aggregate_type: str
    event_type: str
    payload: dict[str, Any]

    @property
    def is_generic(self) -> bool:
        return self.event_type == GENERIC_AUDIT_TYPE


def aggregate_id_for(event: DomainEvent) -> str:
    """Stream key for *event*: ``product-{id}``, ``cart-{user}`` or ``domain-event-{id}``."""
    if isinstance(event, PRODUCT_EVENTS):
        return f"product-{event.product_id}"  # type: ignore[attr-defined]
    if isinstance(event, CART_EVENTS):
        return f"cart-{event.user_id}"  # type: ignore[attr-defined]
    return f"domain-event-{event.event_id}"


def entity_of(event: DomainEvent) -> tuple[str, str]:
    """Best-effort ``(entity kind, entity id)`` for the generic audit shape."""
    match event:
        case CartCreated(user_id=user_id):
            return _CART, user_id
        case ItemAddedToCart() | ItemRemovedFromCart() | CartItemQuantityUpdated():
            return _CART, f"{event.user_id}:{event.product_id}"
        case _ if isinstance(event, PRODUCT_EVENTS):
            return _PRODUCT, str(event.product_id)  # type: ignore[attr-defined]
        case _ if isinstance(event, CART_EVENTS):
            return _CART, event.user_id  # type: ignore[attr-defined]
        case _:
            kind = event.event_type.removesuffix("Event") or event.event_type
            return kind, event.event_id


def _changes(event: ProductUpdated) -> dict[str, dict[str, Any]]:
    pairs = {
        "name": (event.previous_name, event.new_name),
        "price": (event.previous_price, event.new_price),
        "stock": (event.previous_stock, event.new_stock),
        "category": (event.previous_category, event.new_category),
    }
    return {
        field: {"previous": old, "new": new}
        for field, (old, new) in pairs.items()
        if old != new
    }


def _typed(event: DomainEvent) -> tuple[str, str, dict[str, Any]] | None:
    match event:
        case ProductCreated():
            return _PRODUCT, "ProductCreatedAudit", {
                "product_id": event.product_id,
                "name": event.name,
                "description": event.description,
                "price": event.price,
                "stock": event.stock,
                "category": event.category,
            }
        case ProductUpdated():
            return _PRODUCT, "ProductUpdatedAudit", {
                "product_id": event.product_id,
                "changes": _changes(event),
            }
        case ProductDeleted():
            return _PRODUCT, "ProductDeletedAudit", {
                "product_id": event.product_id,
                "name": event.name,
                "category": event.category,
                "reason": "deleted",
            }
        case ProductStockChanged():
            return _PRODUCT, "ProductStockChangedAudit", {
                "product_id": event.product_id,
                "previous_stock": event.previous_stock,
                "new_stock": event.new_stock,
                "delta": event.new_stock - event.previous_stock,
                "reason": event.reason,
            }
        case ProductPriceChanged():
            return _PRODUCT, "ProductPriceChangedAudit", {
                "product_id": event.product_id,
                "previous_price": event.previous_price,
                "new_price": event.new_price,
                "change_percentage": event.change_percentage,
            }
        case CartCreated():
            return _CART, "CartCreatedAudit", {
                "cart_id": event.user_id,
                "user_id": event.user_id,
            }
        case ItemAddedToCart():
            return _CART, "ItemAddedToCartAudit", {
                "cart_id": event.user_id,
                "user_id": event.user_id,
                "product_id": event.product_id,
                "product_name": event.product_name,
                "unit_price": event.unit_price,
                "quantity": event.quantity,
                "subtotal": event.subtotal,
                "previous_quantity": 0,
                "is_new_item": True,
            }
        case ItemRemovedFromCart():
            return _CART, "ItemRemovedFromCartAudit", {
                "cart_id": event.user_id,
                "user_id": event.user_id,
                "product_id": event.product_id,
                "product_name": event.product_name,
                "quantity": event.quantity,
                "lost_subtotal": event.lost_subtotal,
                "reason": "removed by user",
            }
        case CartItemQuantityUpdated():
            return _CART, "CartItemQuantityUpdatedAudit", {
                "cart_id": event.user_id,
                "user_id": event.user_id,
                "product_id": event.product_id,
                "product_name": event.product_name,
                "previous_quantity": event.previous_quantity,
                "new_quantity": event.new_quantity,
                "previous_subtotal": event.previous_subtotal,
                "new_subtotal": event.new_subtotal,
            }
        case CartCleared():
            return _CART, "CartClearedAudit", {
                "cart_id": event.user_id,
                "user_id": event.user_id,
                "removed_items": event.removed_items,
                "lost_total": event.lost_total,
            }
        case _:
            return None


def translate(event: DomainEvent, serializer: EventSerializer) -> AuditTranslation:
    """Translate *event* into the audit record shape that will be stored."""
    aggregate_id = aggregate_id_for(event)
    typed = _typed(event)
    if typed is not None:
        aggregate_type, event_type, payload = typed
        return AuditTranslation(aggregate_id, aggregate_type, event_type, payload)

    kind, entity_id = entity_of(event)
    return AuditTranslation(
        aggregate_id=aggregate_id,
        aggregate_type=kind,
        event_type=GENERIC_AUDIT_TYPE,
        payload={
            "original_event_type": event.event_type,
            "entity_kind": kind,
            "entity_id": entity_id,
            "serialized_event": serializer.encode_event(event).decode(),
        },
    )


__all__ = [
    "GENERIC_AUDIT_TYPE",
    "AuditTranslation",
    "aggregate_id_for",
    "entity_of",
    "translate",
]
