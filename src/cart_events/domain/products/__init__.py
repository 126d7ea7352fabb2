"""Domain – Product aggregate."""
from cart_events.domain.products.events import (
    PRODUCT_EVENTS,
    ProductCreated,
    ProductDeleted,
    ProductOutOfStock,
    ProductPriceChanged,
    ProductStockChanged,
    ProductUpdated,
)
from cart_events.domain.products.product import Product

__all__ = [
    "PRODUCT_EVENTS",
    "Product",
    "ProductCreated",
    "ProductDeleted",
    "ProductOutOfStock",
    "ProductPriceChanged",
    "ProductStockChanged",
    "ProductUpdated",
]
