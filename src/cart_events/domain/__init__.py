"""Domain – product and cart aggregates and the events they raise."""

from cart_events.domain.carts import (
    Cart,
    CartAbandoned,
    CartCleared,
    CartCreated,
    CartItem,
    CartItemQuantityUpdated,
    CartTotalUpdated,
    InsufficientStockRequested,
    ItemAddedToCart,
    ItemRemovedFromCart,
)
from cart_events.domain.products import (
    Product,
    ProductCreated,
    ProductDeleted,
    ProductOutOfStock,
    ProductPriceChanged,
    ProductStockChanged,
    ProductUpdated,
)

__all__ = [
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
    "Product",
    "ProductCreated",
    "ProductDeleted",
    "ProductOutOfStock",
    "ProductPriceChanged",
    "ProductStockChanged",
    "ProductUpdated",
]
