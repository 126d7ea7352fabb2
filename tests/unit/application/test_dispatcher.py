"""Unit tests for the in-process event dispatcher."""

from __future__ import annotations

import asyncio
import dataclasses

import pytest
from structlog.testing import capture_logs

from cart_events.application.events import DispatchReport, EventDispatcher
from cart_events.kernel.ddd import DomainEvent
from cart_events.testing.fakes import FailingConsumer, RecordingConsumer, SlowConsumer


@dataclasses.dataclass(frozen=True)
class Pinged(DomainEvent):
    n: int = 0


@dataclasses.dataclass(frozen=True)
class Ponged(DomainEvent):
    n: int = 0


class TestRegistration:
    def test_consumers_for_keeps_registration_order(self) -> None:
        dispatcher = EventDispatcher()
        dispatcher.register(Pinged, RecordingConsumer("first"))
        dispatcher.register(Pinged, RecordingConsumer("second"))
        assert dispatcher.consumers_for(Pinged) == ["first", "second"]
        assert dispatcher.consumers_for(Ponged) == []

    def test_register_many(self) -> None:
        dispatcher = EventDispatcher()
        dispatcher.register_many([Pinged, Ponged], RecordingConsumer("r"))
        assert set(dispatcher.registered_types()) == {Pinged, Ponged}

    def test_plain_coroutine_function_is_named_by_qualname(self) -> None:
        async def on_ping(event: DomainEvent) -> None:
            return None

        dispatcher = EventDispatcher()
        dispatcher.register(Pinged, on_ping)
        assert dispatcher.consumers_for(Pinged)[0].endswith("on_ping")

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError):
            EventDispatcher(consumer_timeout=0)


class TestDispatch:
    def test_routes_by_concrete_type(self) -> None:
        pings, pongs = RecordingConsumer("pings"), RecordingConsumer("pongs")
        dispatcher = EventDispatcher()
        dispatcher.register(Pinged, pings)
        dispatcher.register(Ponged, pongs)
        asyncio.run(dispatcher.dispatch(Pinged(1)))
        assert len(pings.events) == 1
        assert pongs.events == []

    def test_consumers_run_sequentially_in_order(self) -> None:
        journal: list[tuple[str, str]] = []
        dispatcher = EventDispatcher()
        for label in ("a", "b", "c"):
            dispatcher.register(Pinged, RecordingConsumer(label, journal))
        event = Pinged()
        asyncio.run(dispatcher.dispatch(event))
        assert journal == [("a", event.event_id), ("b", event.event_id), ("c", event.event_id)]

    def test_no_consumers_is_a_logged_noop(self) -> None:
        with capture_logs() as logs:
            report = asyncio.run(EventDispatcher().dispatch(Pinged()))
        assert report == DispatchReport()
        assert logs[0]["event"] == "dispatch.no_consumers"
        assert logs[0]["log_level"] == "debug"

    def test_dispatch_all_preserves_event_order(self) -> None:
        recorder = RecordingConsumer()
        dispatcher = EventDispatcher()
        dispatcher.register_many([Pinged, Ponged], recorder)
        events = [Pinged(1), Ponged(2), Pinged(3)]
        report = asyncio.run(dispatcher.dispatch_all(events))
        assert recorder.events == events
        assert report.delivered == 3
        assert report.ok


class TestConsumerIsolation:
    def test_failure_does_not_stop_later_consumers(self) -> None:
        before, after = RecordingConsumer("before"), RecordingConsumer("after")
        failing = FailingConsumer()
        dispatcher = EventDispatcher()
        dispatcher.register(Pinged, before)
        dispatcher.register(Pinged, failing)
        dispatcher.register(Pinged, after)

        event = Pinged()
        with capture_logs() as logs:
            report = asyncio.run(dispatcher.dispatch(event))

        assert len(before.events) == 1
        assert len(after.events) == 1
        assert report.delivered == 2
        assert report.failed == 1
        [failure] = report.failures
        assert failure.consumer == "FailingConsumer"
        assert failure.event_id == event.event_id
        errors = [log for log in logs if log["event"] == "dispatch.consumer_failed"]
        assert errors[0]["log_level"] == "error"
        assert errors[0]["event_type"] == "Pinged"
        assert errors[0]["consumer"] == "FailingConsumer"

    def test_failure_on_one_event_does_not_block_the_next(self) -> None:
        recorder = RecordingConsumer()
        failing = FailingConsumer()
        dispatcher = EventDispatcher()
        dispatcher.register(Pinged, failing)
        dispatcher.register(Ponged, recorder)
        report = asyncio.run(dispatcher.dispatch_all([Pinged(), Ponged()]))
        assert len(recorder.events) == 1
        assert (report.delivered, report.failed) == (1, 1)

    def test_timeout_counts_as_failure(self) -> None:
        slow, fast = SlowConsumer(delay=1.0), RecordingConsumer()
        dispatcher = EventDispatcher(consumer_timeout=0.01)
        dispatcher.register(Pinged, slow)
        dispatcher.register(Pinged, fast)
        report = asyncio.run(dispatcher.dispatch(Pinged()))
        assert slow.completed == []
        assert len(fast.events) == 1
        assert report.failed == 1
        assert "TimeoutError" in report.failures[0].error

    def test_cancellation_propagates(self) -> None:
        async def run() -> None:
            dispatcher = EventDispatcher()
            dispatcher.register(Pinged, SlowConsumer(delay=10))
            task = asyncio.create_task(dispatcher.dispatch(Pinged()))
            await asyncio.sleep(0.01)
            task.cancel()
            await task

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(run())
