"""Testing fakes – in-memory doubles for the broker and outbox ports."""
from internal_events.kernel.time import FrozenClock
from internal_events.testing.fakes.broker import FakeStreamBroker, PendingEntry
from internal_events.testing.fakes.clock import FakeClock
from internal_events.testing.fakes.outbox import InMemoryOutboxStore

__all__ = [
    "FakeClock",
    "FakeStreamBroker",
    "FrozenClock",
    "InMemoryOutboxStore",
    "PendingEntry",
]
