"""Domain events raised by the Product aggregate."""

from __future__ import annotations

import dataclasses
from decimal import Decimal

from cart_events.kernel.ddd.domain_event import DomainEvent


@dataclasses.dataclass(frozen=True)
class ProductCreated(DomainEvent):
    product_id: int
    name: str
    description: str
    price: Decimal
    stock: int
    category: str


@dataclasses.dataclass(frozen=True)
class ProductUpdated(DomainEvent):
    product_id: int
    previous_name: str
    new_name: str
    previous_price: Decimal
    new_price: Decimal
    previous_stock: int
    new_stock: int
    previous_category: str
    new_category: str


@dataclasses.dataclass(frozen=True)
class ProductDeleted(DomainEvent):
    product_id: int
    name: str
    category: str


@dataclasses.dataclass(frozen=True)
class ProductStockChanged(DomainEvent):
    product_id: int
    product_name: str
    previous_stock: int
    new_stock: int
    reason: str


@dataclasses.dataclass(frozen=True)
class ProductOutOfStock(DomainEvent):
    product_id: int
    product_name: str
    category: str


@dataclasses.dataclass(frozen=True)
class ProductPriceChanged(DomainEvent):
    product_id: int
    product_name: str
    previous_price: Decimal
    new_price: Decimal
    change_percentage: Decimal


#: Every event type the Product aggregate can raise.
PRODUCT_EVENTS: tuple[type[DomainEvent], ...] = (
    ProductCreated,
    ProductUpdated,
    ProductDeleted,
    ProductStockChanged,
    ProductOutOfStock,
    ProductPriceChanged,
)

__all__ = [
    "PRODUCT_EVENTS",
    "ProductCreated",
    "ProductDeleted",
    "ProductOutOfStock",
    "ProductPriceChanged",
    "ProductStockChanged",
    "ProductUpdated",
]
