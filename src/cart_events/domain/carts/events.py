"""Domain events raised by the Cart aggregate."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from decimal import Decimal

from cart_events.kernel.ddd.domain_event import DomainEvent


@dataclasses.dataclass(frozen=True)
class CartCreated(DomainEvent):
    user_id: str


@dataclasses.dataclass(frozen=True)
class ItemAddedToCart(DomainEvent):
    user_id: str
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclasses.dataclass(frozen=True)
class CartItemQuantityUpdated(DomainEvent):
    user_id: str
    product_id: int
    product_name: str
    previous_quantity: int
    new_quantity: int
    previous_subtotal: Decimal
    new_subtotal: Decimal


@dataclasses.dataclass(frozen=True)
class ItemRemovedFromCart(DomainEvent):
    user_id: str
    product_id: int
    product_name: str
    quantity: int
    lost_subtotal: Decimal


@dataclasses.dataclass(frozen=True)
class CartCleared(DomainEvent):
    user_id: str
    removed_items: int
    lost_total: Decimal


@dataclasses.dataclass(frozen=True)
class CartTotalUpdated(DomainEvent):
    user_id: str
    previous_total: Decimal
    new_total: Decimal
    item_count: int


@dataclasses.dataclass(frozen=True)
class CartAbandoned(DomainEvent):
    user_id: str
    item_count: int
    cart_total: Decimal
    last_activity: datetime
    idle_for: timedelta


@dataclasses.dataclass(frozen=True)
class InsufficientStockRequested(DomainEvent):
    user_id: str
    product_id: int
    product_name: str
    requested_quantity: int
    available_stock: int


#: Every event type the Cart aggregate can raise.
CART_EVENTS: tuple[type[DomainEvent], ...] = (
    CartCreated,
    ItemAddedToCart,
    CartItemQuantityUpdated,
    ItemRemovedFromCart,
    CartCleared,
    CartTotalUpdated,
    CartAbandoned,
    InsufficientStockRequested,
)

__all__ = [
    "CART_EVENTS",
    "CartAbandoned",
    "CartCleared",
    "CartCreated",
    "CartItemQuantityUpdated",
    "CartTotalUpdated",
    "InsufficientStockRequested",
    "ItemAddedToCart",
    "ItemRemovedFromCart",
]
