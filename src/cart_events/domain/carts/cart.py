"""Cart aggregate – one cart per user."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from decimal import Decimal

from cart_events.domain.carts.events import (
    CartAbandoned,
    CartCleared,
    CartCreated,
    CartItemQuantityUpdated,
    CartTotalUpdated,
    InsufficientStockRequested,
    ItemAddedToCart,
    ItemRemovedFromCart,
)
from cart_events.domain.products.product import Product
from cart_events.kernel.ddd.aggregate import AggregateRoot
from cart_events.kernel.errors import (
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from cart_events.kernel.time import utc_now


@dataclasses.dataclass
class CartItem:
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


def _positive_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise ValidationError(
            "Quantity must be greater than 0",
            errors=[{"field": "quantity", "error": "must be greater than 0"}],
        )


class Cart(AggregateRoot):
    """Shopping cart keyed by ``user_id``.

    Every mutating method stages the matching domain events; totals are
    re-announced with :class:`CartTotalUpdated` after item changes.
    """

    def __init__(self, user_id: str, created_at: datetime | None = None) -> None:
        super().__init__(user_id)
        self._items: dict[int, CartItem] = {}
        self.created_at = created_at or utc_now()
        self.updated_at = self.created_at

    @property
    def user_id(self) -> str:
        return self._id  # type: ignore[return-value]

    @property
    def items(self) -> list[CartItem]:
        return list(self._items.values())

    @property
    def total(self) -> Decimal:
        return sum((i.subtotal for i in self._items.values()), Decimal("0"))

    @property
    def item_count(self) -> int:
        return len(self._items)

    @classmethod
    def create(cls, user_id: str, created_at: datetime | None = None) -> Cart:
        """Factory: open a cart for *user_id* and stage :class:`CartCreated`."""
        if not user_id or not user_id.strip():
            raise ValidationError(
                "User id is required",
                errors=[{"field": "user_id", "error": "must not be empty"}],
            )
        cart = cls(user_id, created_at)
        cart.stage_event(CartCreated(user_id=user_id))
        return cart

    def item(self, product_id: int) -> CartItem | None:
        return self._items.get(product_id)

    def add_item(self, product: Product, quantity: int) -> None:
        _positive_quantity(quantity)
        existing = self._items.get(product.product_id)
        wanted = quantity + (existing.quantity if existing else 0)
        if not product.has_stock(wanted):
            self.stage_event(
                InsufficientStockRequested(
                    user_id=self.user_id,
                    product_id=product.product_id,
                    product_name=product.name,
                    requested_quantity=wanted,
                    available_stock=product.stock,
                )
            )
            raise InvariantViolationError(
                f"Insufficient stock for product {product.name}",
                detail={"product_id": product.product_id, "available": product.stock},
            )

        previous_total = self.total
        if existing is not None:
            previous_quantity, previous_subtotal = existing.quantity, existing.subtotal
            existing.quantity = wanted
            self.stage_event(
                CartItemQuantityUpdated(
                    user_id=self.user_id,
                    product_id=product.product_id,
                    product_name=existing.product_name,
                    previous_quantity=previous_quantity,
                    new_quantity=wanted,
                    previous_subtotal=previous_subtotal,
                    new_subtotal=existing.subtotal,
                )
            )
        else:
            item = CartItem(product.product_id, product.name, product.price, quantity)
            self._items[product.product_id] = item
            self.stage_event(
                ItemAddedToCart(
                    user_id=self.user_id,
                    product_id=product.product_id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=product.price,
                    subtotal=item.subtotal,
                )
            )
        self._touch(previous_total)

    def update_quantity(self, product_id: int, new_quantity: int) -> None:
        """Set the quantity of a line; zero or less removes it."""
        item = self._items.get(product_id)
        if item is None:
            raise NotFoundError("Cart item", product_id)
        if new_quantity <= 0:
            self.remove_item(product_id)
            return
        if new_quantity == item.quantity:
            return
        previous_total = self.total
        previous_quantity, previous_subtotal = item.quantity, item.subtotal
        item.quantity = new_quantity
        self.stage_event(
            CartItemQuantityUpdated(
                user_id=self.user_id,
                product_id=product_id,
                product_name=item.product_name,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                previous_subtotal=previous_subtotal,
                new_subtotal=item.subtotal,
            )
        )
        self._touch(previous_total)

    def remove_item(self, product_id: int) -> None:
        item = self._items.get(product_id)
        if item is None:
            return
        previous_total = self.total
        del self._items[product_id]
        self.stage_event(
            ItemRemovedFromCart(
                user_id=self.user_id,
                product_id=product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                lost_subtotal=item.subtotal,
            )
        )
        self._touch(previous_total)

    def clear(self) -> None:
        if not self._items:
            return
        removed, lost = self.item_count, self.total
        self._items.clear()
        self.updated_at = utc_now()
        self.stage_event(
            CartCleared(user_id=self.user_id, removed_items=removed, lost_total=lost)
        )

    def check_abandoned(self, idle_limit: timedelta, now: datetime | None = None) -> bool:
        """Stage :class:`CartAbandoned` when a non-empty cart sat idle too long."""
        now = now or utc_now()
        idle_for = now - self.updated_at
        if idle_for <= idle_limit or not self._items:
            return False
        self.stage_event(
            CartAbandoned(
                user_id=self.user_id,
                item_count=self.item_count,
                cart_total=self.total,
                last_activity=self.updated_at,
                idle_for=idle_for,
            )
        )
        return True

    def _touch(self, previous_total: Decimal) -> None:
        self.updated_at = utc_now()
        self.stage_event(
            CartTotalUpdated(
                user_id=self.user_id,
                previous_total=previous_total,
                new_total=self.total,
                item_count=self.item_count,
            )
        )


__all__ = ["Cart", "CartItem"]
