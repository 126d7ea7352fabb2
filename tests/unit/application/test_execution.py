"""Unit tests for WriteOperationExecutor."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from cart_events.application.events import EventDispatcher
from cart_events.application.execution import WriteOperationExecutor
from cart_events.domain import Cart, CartCreated, InsufficientStockRequested, ItemAddedToCart, Product
from cart_events.kernel.ddd import InMemoryRepository
from cart_events.kernel.errors import ConflictError, InvariantViolationError
from cart_events.testing.fakes import FailingConsumer, RecordingConsumer


class ExplodingRepository(InMemoryRepository[Cart]):
    async def save(self, aggregate: Cart) -> None:
        raise RuntimeError("disk full")


class FlakyRepository(InMemoryRepository[Cart]):
    def __init__(self, conflicts: int) -> None:
        super().__init__("Cart")
        self.conflicts = conflicts

    async def save(self, aggregate: Cart) -> None:
        if self.conflicts:
            self.conflicts -= 1
            raise ConflictError("stale cart")
        await super().save(aggregate)


def _product(stock: int = 10) -> Product:
    product = Product.create(42, "Laptop", "", Decimal("500.00"), stock, "electronics")
    product.clear_events()
    return product


def _wired() -> tuple[WriteOperationExecutor[Cart], RecordingConsumer]:
    recorder = RecordingConsumer()
    dispatcher = EventDispatcher()
    dispatcher.register_many([CartCreated, ItemAddedToCart, InsufficientStockRequested], recorder)
    return WriteOperationExecutor(dispatcher), recorder


class TestExecute:
    def test_saves_dispatches_and_clears(self) -> None:
        executor, recorder = _wired()
        repo: InMemoryRepository[Cart] = InMemoryRepository("Cart")
        cart = Cart.create("u1")

        asyncio.run(executor.execute(cart, lambda c: c.add_item(_product(), 2), repo))

        assert [e.event_type for e in recorder.events] == ["CartCreated", "ItemAddedToCart"]
        assert cart.pending_events() == []
        saved = asyncio.run(repo.get("u1"))
        assert saved is not None and saved.item(42) is not None

    def test_returns_operation_result_and_accepts_coroutines(self) -> None:
        executor, _ = _wired()

        async def operation(cart: Cart) -> str:
            cart.add_item(_product(), 1)
            return "done"

        result = asyncio.run(executor.execute(Cart.create("u1"), operation, InMemoryRepository()))
        assert result == "done"

    def test_failed_operation_discards_events(self) -> None:
        executor, recorder = _wired()
        cart = Cart.create("u1")

        with pytest.raises(InvariantViolationError):
            asyncio.run(executor.execute(cart, lambda c: c.add_item(_product(stock=1), 5), InMemoryRepository()))

        assert recorder.events == []
        assert cart.pending_events() == []

    def test_failed_save_discards_events(self) -> None:
        executor, recorder = _wired()
        cart = Cart.create("u1")

        with pytest.raises(RuntimeError, match="disk full"):
            asyncio.run(executor.execute(cart, lambda c: c.add_item(_product(), 1), ExplodingRepository()))

        assert recorder.events == []
        assert cart.pending_events() == []

    def test_consumer_failure_does_not_fail_the_write(self) -> None:
        dispatcher = EventDispatcher()
        dispatcher.register(CartCreated, FailingConsumer())
        executor: WriteOperationExecutor[Cart] = WriteOperationExecutor(dispatcher)
        repo: InMemoryRepository[Cart] = InMemoryRepository()
        cart = Cart.create("u1")

        asyncio.run(executor.execute(cart, lambda c: None, repo))

        assert asyncio.run(repo.get("u1")) is not None
        assert cart.pending_events() == []


class TestExecuteWithRetry:
    def test_reloads_and_retries_on_conflict(self) -> None:
        executor, recorder = _wired()
        repo = FlakyRepository(conflicts=2)
        loads = 0

        async def load() -> Cart:
            nonlocal loads
            loads += 1
            return Cart("u1")

        asyncio.run(executor.execute_with_retry(load, lambda c: c.add_item(_product(), 1), repo, attempts=3))

        assert loads == 3
        assert len(recorder.events) == 1

    def test_gives_up_after_attempts(self) -> None:
        executor, recorder = _wired()

        async def load() -> Cart:
            return Cart("u1")

        with pytest.raises(ConflictError):
            asyncio.run(
                executor.execute_with_retry(load, lambda c: c.add_item(_product(), 1), FlakyRepository(5), attempts=2)
            )
        assert recorder.events == []

    def test_rejects_zero_attempts(self) -> None:
        executor, _ = _wired()

        async def load() -> Cart:
            return Cart("u1")

        with pytest.raises(ValueError):
            asyncio.run(executor.execute_with_retry(load, lambda c: None, InMemoryRepository(), attempts=0))
