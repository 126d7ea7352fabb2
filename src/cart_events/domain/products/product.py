"""Product aggregate."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from cart_events.domain.products.events import (
    ProductCreated,
    ProductDeleted,
    ProductOutOfStock,
    ProductPriceChanged,
    ProductStockChanged,
    ProductUpdated,
)
from cart_events.kernel.ddd.aggregate import AggregateRoot
from cart_events.kernel.errors import InvariantViolationError, ValidationError

_CENT = Decimal("0.01")


def _check(name: str, price: Decimal, stock: int, category: str) -> None:
    errors: list[dict[str, str]] = []
    if not name or not name.strip():
        errors.append({"field": "name", "error": "must not be empty"})
    if price <= 0:
        errors.append({"field": "price", "error": "must be greater than 0"})
    if stock < 0:
        errors.append({"field": "stock", "error": "must not be negative"})
    if not category or not category.strip():
        errors.append({"field": "category", "error": "must not be empty"})
    if errors:
        raise ValidationError("Invalid product data", errors=errors)


class Product(AggregateRoot):
    """A catalogue product with price and stock."""

    def __init__(
        self,
        product_id: int,
        name: str,
        description: str,
        price: Decimal,
        stock: int,
        category: str,
    ) -> None:
        super().__init__(product_id)
        self.name = name
        self.description = description
        self.price = price
        self.stock = stock
        self.category = category
        self.deleted = False

    @property
    def product_id(self) -> int:
        return self._id  # type: ignore[return-value]

    @classmethod
    def create(
        cls,
        product_id: int,
        name: str,
        description: str,
        price: Decimal,
        stock: int,
        category: str,
    ) -> Product:
        """Factory: build a new product and stage :class:`ProductCreated`."""
        _check(name, price, stock, category)
        product = cls(product_id, name, description, price, stock, category)
        product.stage_event(
            ProductCreated(
                product_id=product_id,
                name=name,
                description=description,
                price=price,
                stock=stock,
                category=category,
            )
        )
        return product

    def has_stock(self, quantity: int) -> bool:
        return self.stock >= quantity

    def update(
        self,
        *,
        name: str | None = None,
        description: str | None = None,
        price: Decimal | None = None,
        stock: int | None = None,
        category: str | None = None,
    ) -> None:
        """Apply a partial update.

        Stages ``ProductUpdated`` plus the finer-grained price/stock events
        for whatever actually changed.
        """
        new_name = self.name if name is None else name
        new_price = self.price if price is None else price
        new_stock = self.stock if stock is None else stock
        new_category = self.category if category is None else category
        _check(new_name, new_price, new_stock, new_category)

        previous = (self.name, self.price, self.stock, self.category)
        if description is not None:
            self.description = description
        self.name, self.category = new_name, new_category

        self.stage_event(
            ProductUpdated(
                product_id=self.product_id,
                previous_name=previous[0],
                new_name=new_name,
                previous_price=previous[1],
                new_price=new_price,
                previous_stock=previous[2],
                new_stock=new_stock,
                previous_category=previous[3],
                new_category=new_category,
            )
        )
        if new_price != previous[1]:
            self.change_price(new_price)
        if new_stock != previous[2]:
            self.change_stock(new_stock, reason="product update")

    def change_price(self, new_price: Decimal) -> None:
        if new_price <= 0:
            raise ValidationError(
                "Invalid product price",
                errors=[{"field": "price", "error": "must be greater than 0"}],
            )
        previous = self.price
        if new_price == previous:
            return
        self.price = new_price
        pct = ((new_price - previous) / previous * 100).quantize(_CENT, ROUND_HALF_UP)
        self.stage_event(
            ProductPriceChanged(
                product_id=self.product_id,
                product_name=self.name,
                previous_price=previous,
                new_price=new_price,
                change_percentage=pct,
            )
        )

    def change_stock(self, new_stock: int, reason: str) -> None:
        if new_stock < 0:
            raise InvariantViolationError(
                f"Stock for product {self.product_id} cannot go below zero",
                detail={"product_id": self.product_id, "requested": new_stock},
            )
        previous = self.stock
        if new_stock == previous:
            return
        self.stock = new_stock
        self.stage_event(
            ProductStockChanged(
                product_id=self.product_id,
                product_name=self.name,
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
            )
        )
        if new_stock == 0:
            self.stage_event(
                ProductOutOfStock(
                    product_id=self.product_id,
                    product_name=self.name,
                    category=self.category,
                )
            )

    def reduce_stock(self, quantity: int, reason: str = "sale") -> None:
        if quantity <= 0:
            raise ValidationError(
                "Quantity must be greater than 0",
                errors=[{"field": "quantity", "error": "must be greater than 0"}],
            )
        self.change_stock(self.stock - quantity, reason)

    def delete(self) -> None:
        """Mark the product deleted and stage :class:`ProductDeleted`."""
        self.deleted = True
        self.stage_event(
            ProductDeleted(
                product_id=self.product_id,
                name=self.name,
                category=self.category,
            )
        )


__all__ = ["Product"]
