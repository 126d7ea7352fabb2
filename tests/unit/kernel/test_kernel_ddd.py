"""Unit tests for kernel DDD building blocks."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import UTC, datetime

import pytest

from cart_events.kernel.ddd import (
    AggregateRoot,
    DomainEvent,
    DomainEventEnvelope,
    Entity,
    InMemoryRepository,
)
from cart_events.kernel.errors import NotFoundError


@dataclasses.dataclass(frozen=True)
class ThingHappened(DomainEvent):
    thing_id: str
    amount: int = 0


class Thing(AggregateRoot):
    def __init__(self, id: str) -> None:  # noqa: A002
        super().__init__(id)
        self.count = 0

    def bump(self) -> None:
        self.count += 1
        self.stage_event(ThingHappened(thing_id=str(self.id), amount=self.count))


class TestDomainEvent:
    def test_generates_unique_ids(self) -> None:
        a, b = ThingHappened("t"), ThingHappened("t")
        assert a.event_id != b.event_id

    def test_occurred_on_is_utc(self) -> None:
        assert ThingHappened("t").occurred_on.tzinfo is not None

    def test_event_type_is_class_name(self) -> None:
        assert ThingHappened("t").event_type == "ThingHappened"

    def test_payload_excludes_identity(self) -> None:
        assert ThingHappened("t", amount=3).payload() == {"thing_id": "t", "amount": 3}

    def test_explicit_identity(self) -> None:
        ts = datetime(2026, 1, 1, tzinfo=UTC)
        ev = ThingHappened("t", event_id="fixed", occurred_on=ts)
        assert (ev.event_id, ev.occurred_on) == ("fixed", ts)

    def test_is_frozen(self) -> None:
        ev = ThingHappened("t")
        with pytest.raises(dataclasses.FrozenInstanceError):
            ev.thing_id = "x"  # type: ignore[misc]

    def test_envelope_proxies_event(self) -> None:
        ev = ThingHappened("t")
        env = DomainEventEnvelope(ev, aggregate_id="t", aggregate_type="Thing", sequence=1)
        assert env.event_type == "ThingHappened"
        assert env.event_id == ev.event_id
        assert env.actor.user_id == "system"

    def test_envelope_audit_metadata(self) -> None:
        ev = ThingHappened("t")
        env = DomainEventEnvelope(
            ev, aggregate_id="t", aggregate_type="Thing", sequence=3,
            correlation_id="c-1", metadata={"tenant": "eu"},
        )
        assert env.audit_metadata() == {
            "source_event_id": ev.event_id,
            "source_event_type": "ThingHappened",
            "tenant": "eu",
            "correlation_id": "c-1",
        }
        bare = DomainEventEnvelope(ev, aggregate_id="t", aggregate_type="Thing", sequence=1)
        assert "correlation_id" not in bare.audit_metadata()


class TestEntity:
    def test_identity_equality(self) -> None:
        assert Entity("a") == Entity("a")
        assert Entity("a") != Entity("b")
        assert hash(Entity("a")) == hash(Entity("a"))


class TestAggregateBuffer:
    def test_stage_preserves_order(self) -> None:
        thing = Thing("t1")
        thing.bump()
        thing.bump()
        assert [e.amount for e in thing.pending_events()] == [1, 2]

    def test_pending_events_is_a_copy(self) -> None:
        thing = Thing("t1")
        thing.bump()
        thing.pending_events().clear()
        assert len(thing.pending_events()) == 1

    def test_clear_events_empties_buffer(self) -> None:
        thing = Thing("t1")
        thing.bump()
        thing.clear_events()
        assert thing.pending_events() == []
        assert not thing.has_pending_events

    def test_buffer_holds_events_since_last_clear(self) -> None:
        thing = Thing("t1")
        thing.bump()
        thing.clear_events()
        thing.bump()
        assert [e.amount for e in thing.pending_events()] == [2]

    def test_pull_events_returns_and_clears(self) -> None:
        thing = Thing("t1")
        thing.bump()
        pulled = thing.pull_events()
        assert len(pulled) == 1
        assert thing.pending_events() == []


class TestInMemoryRepository:
    def test_save_and_get_returns_copy_without_events(self) -> None:
        async def run() -> None:
            repo: InMemoryRepository[Thing] = InMemoryRepository("Thing")
            thing = Thing("t1")
            thing.bump()
            await repo.save(thing)
            loaded = await repo.get("t1")
            assert loaded is not None
            assert loaded is not thing
            assert loaded.count == 1
            assert loaded.pending_events() == []
            # saving did not clear the caller's buffer
            assert thing.has_pending_events
        asyncio.run(run())

    def test_get_or_raise(self) -> None:
        async def run() -> None:
            repo: InMemoryRepository[Thing] = InMemoryRepository("Thing")
            with pytest.raises(NotFoundError) as exc_info:
                await repo.get_or_raise("missing")
            assert exc_info.value.resource == "Thing"
        asyncio.run(run())

    def test_delete_and_all(self) -> None:
        async def run() -> None:
            repo: InMemoryRepository[Thing] = InMemoryRepository()
            await repo.save(Thing("a"))
            await repo.save(Thing("b"))
            await repo.delete("a")
            assert [t.id for t in repo.all()] == ["b"]
        asyncio.run(run())
