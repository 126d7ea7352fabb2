"""Testing fakes – in-memory doubles for pipeline ports."""
from cart_events.testing.fakes.cache import FailingCacheBackend, RecordingCacheBackend
from cart_events.testing.fakes.clock import FakeClock
from cart_events.testing.fakes.consumers import FailingConsumer, RecordingConsumer, SlowConsumer
from cart_events.testing.fakes.store import RacingEventStore, YieldingEventStore
from cart_events.kernel.time import FrozenClock

__all__ = [
    "FailingCacheBackend",
    "FailingConsumer",
    "FakeClock",
    "FrozenClock",
    "RacingEventStore",
    "RecordingCacheBackend",
    "RecordingConsumer",
    "SlowConsumer",
    "YieldingEventStore",
]
