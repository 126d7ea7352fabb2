"""Domain – Cart aggregate."""
from cart_events.domain.carts.cart import Cart, CartItem
from cart_events.domain.carts.events import (
    CART_EVENTS,
    CartAbandoned,
    CartCleared,
    CartCreated,
    CartItemQuantityUpdated,
    CartTotalUpdated,
    InsufficientStockRequested,
    ItemAddedToCart,
    ItemRemovedFromCart,
)

__all__ = [
    "CART_EVENTS",
    "Cart",
    "CartAbandoned",
    "CartCleared",
    "CartCreated",
    "CartItem",
    "CartItemQuantityUpdated",
    "CartTotalUpdated",
    "InsufficientStockRequested",
    "ItemAddedToCart",
    "ItemRemovedFromCart",
]
