"""Unit tests for InternalEventsEmitter."""
from __future__ import annotations

import asyncio

import pytest

from internal_events.application.events import InternalEventsEmitter
from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.errors import EventsDisabledError
from internal_events.kernel.time import FrozenClock
from internal_events.testing.fakes import InMemoryOutboxStore


class TestInternalEventsEmitter:
    def test_emit_writes_unpublished_row(
        self, enabled_settings: InternalEventsSettings, outbox_store: InMemoryOutboxStore, fake_clock: FrozenClock
    ) -> None:
        emitter = InternalEventsEmitter(enabled_settings)
        event = asyncio.run(emitter.emit(outbox_store, "USER_CREATED", {"userId": 42}))
        assert event.event_type == "USER_CREATED"
        assert event.payload == {"userId": 42}
        assert event.created_at == fake_clock.now()
        assert event.published_at is None
        assert [e.id for e in outbox_store.unpublished()] == [event.id]

    def test_emit_without_payload_stores_empty_dict(
        self, enabled_settings: InternalEventsSettings, outbox_store: InMemoryOutboxStore
    ) -> None:
        event = asyncio.run(InternalEventsEmitter(enabled_settings).emit(outbox_store, "PING"))
        assert event.payload == {}

    def test_emit_disabled_raises_and_writes_nothing(self, outbox_store: InMemoryOutboxStore) -> None:
        emitter = InternalEventsEmitter(InternalEventsSettings(enable=False))
        assert emitter.enabled is False
        with pytest.raises(EventsDisabledError):
            asyncio.run(emitter.emit(outbox_store, "USER_CREATED", {"userId": 42}))
        assert outbox_store.all_events() == []

    def test_emit_empty_type_rejected(
        self, enabled_settings: InternalEventsSettings, outbox_store: InMemoryOutboxStore
    ) -> None:
        with pytest.raises(ValueError):
            asyncio.run(InternalEventsEmitter(enabled_settings).emit(outbox_store, ""))

    def test_each_emit_gets_fresh_id(
        self, enabled_settings: InternalEventsSettings, outbox_store: InMemoryOutboxStore
    ) -> None:
        emitter = InternalEventsEmitter(enabled_settings)

        async def run() -> set[str]:
            events = [await emitter.emit(outbox_store, "E", {"i": i}) for i in range(3)]
            return {e.id for e in events}

        assert len(asyncio.run(run())) == 3
