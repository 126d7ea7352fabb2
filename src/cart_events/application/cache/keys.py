"""Application cache – CacheKeys builder."""
from __future__ import annotations

__all__ = ["CacheKeys"]

_PRODUCTS = "products"
_CARTS = "carts"


class CacheKeys:
    """Factory for the key strings shared by readers and the invalidation consumer."""

    ALL_PRODUCTS = f"{_PRODUCTS}:all"
    PRODUCTS_PATTERN = f"{_PRODUCTS}:*"
    CARTS_PATTERN = f"{_CARTS}:*"

    @staticmethod
    def product(product_id: int | str) -> str:
        return f"{_PRODUCTS}:id:{product_id}"

    @staticmethod
    def products_by_category(category: str) -> str:
        return f"{_PRODUCTS}:category:{category.upper()}"

    @staticmethod
    def cart(user_id: str) -> str:
        return f"{_CARTS}:user:{user_id}"
