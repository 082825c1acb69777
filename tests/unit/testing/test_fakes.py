"""Unit tests for the in-memory testing doubles."""
from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from internal_events.kernel.errors import ConnectionError, StreamGroupMissingError
from internal_events.kernel.time import FrozenClock
from internal_events.testing.fakes import FakeClock, FakeStreamBroker, InMemoryOutboxStore


class TestFakeClock:
    def test_pinned(self) -> None:
        assert FakeClock().now() == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class TestInMemoryOutboxStore:
    def test_fetch_returns_copies(self) -> None:
        async def run() -> None:
            store = InMemoryOutboxStore()
            await store.add("E", {"a": 1})
            [row] = await store.fetch_unpublished()
            row.published_at = datetime(2026, 1, 1, tzinfo=UTC)
            assert len(store.unpublished()) == 1

        asyncio.run(run())

    def test_session_counts_opens(self) -> None:
        async def run() -> None:
            store = InMemoryOutboxStore()
            async with store.session() as s:
                assert s is store
            assert store.sessions_opened == 1

        asyncio.run(run())


class TestFakeStreamBroker:
    def test_entry_ids_increase(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> list[str]:
            return [await fake_broker.xadd("s", {"n": str(i)}) for i in range(3)]

        ids = asyncio.run(run())
        assert ids == sorted(ids, key=lambda i: tuple(int(p) for p in i.split("-")))
        assert len(set(ids)) == 3

    def test_group_starts_at_tail(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            await fake_broker.xadd("s", {"old": "1"})
            assert await fake_broker.ensure_group("s", "g") is True
            assert await fake_broker.ensure_group("s", "g") is False
            assert await fake_broker.read_group("s", "g", "c", count=10, block_ms=0) == []
            await fake_broker.xadd("s", {"new": "1"})
            [(_, fields)] = await fake_broker.read_group("s", "g", "c", count=10, block_ms=0)
            assert fields == {"new": "1"}

        asyncio.run(run())

    def test_groups_are_independent(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            await fake_broker.ensure_group("s", "billing")
            await fake_broker.ensure_group("s", "crm")
            await fake_broker.xadd("s", {"n": "1"})
            assert len(await fake_broker.read_group("s", "billing", "b1", count=10, block_ms=0)) == 1
            assert len(await fake_broker.read_group("s", "crm", "c1", count=10, block_ms=0)) == 1
            assert await fake_broker.read_group("s", "billing", "b2", count=10, block_ms=0) == []

        asyncio.run(run())

    def test_missing_group_raises(self, fake_broker: FakeStreamBroker) -> None:
        with pytest.raises(StreamGroupMissingError):
            asyncio.run(fake_broker.read_group("s", "g", "c", count=1, block_ms=0))

    def test_autoclaim_respects_idle_time(self, fake_broker: FakeStreamBroker, fake_clock: FrozenClock) -> None:
        async def run() -> None:
            await fake_broker.ensure_group("s", "g")
            entry_id = await fake_broker.xadd("s", {"n": "1"})
            await fake_broker.read_group("s", "g", "dead", count=10, block_ms=0)
            assert await fake_broker.autoclaim("s", "g", "alive", min_idle_ms=1000, count=10) == []
            fake_clock.advance(seconds=2)
            [(claimed_id, _)] = await fake_broker.autoclaim("s", "g", "alive", min_idle_ms=1000, count=10)
            assert claimed_id == entry_id
            pending = fake_broker.pending("s", "g")[entry_id]
            assert pending.consumer == "alive"
            assert pending.deliveries == 2

        asyncio.run(run())

    def test_ack_removes_pending(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            await fake_broker.ensure_group("s", "g")
            entry_id = await fake_broker.xadd("s", {"n": "1"})
            await fake_broker.read_group("s", "g", "c", count=10, block_ms=0)
            assert await fake_broker.ack("s", "g", entry_id) == 1
            assert await fake_broker.ack("s", "g", entry_id) == 0
            assert fake_broker.pending("s", "g") == {}

        asyncio.run(run())

    def test_blocking_read_wakes_on_append(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            await fake_broker.ensure_group("s", "g")
            reader = asyncio.create_task(fake_broker.read_group("s", "g", "c", count=10, block_ms=5000))
            await asyncio.sleep(0.01)
            await fake_broker.xadd("s", {"n": "1"})
            entries = await asyncio.wait_for(reader, timeout=1.0)
            assert len(entries) == 1

        asyncio.run(run())

    def test_interrupt_wakes_blocking_read(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            await fake_broker.connect()
            await fake_broker.ensure_group("s", "g")
            reader = asyncio.create_task(fake_broker.read_group("s", "g", "c", count=10, block_ms=5000))
            await asyncio.sleep(0.01)
            fake_broker.interrupt()
            assert await asyncio.wait_for(reader, timeout=1.0) == []
            assert fake_broker.interrupted is True
            await fake_broker.connect()
            assert fake_broker.interrupted is False

        asyncio.run(run())

    def test_set_if_absent_expires(self, fake_broker: FakeStreamBroker, fake_clock: FrozenClock) -> None:
        async def run() -> None:
            assert await fake_broker.set_if_absent("k", 10) is True
            assert await fake_broker.set_if_absent("k", 10) is False
            fake_clock.advance(seconds=10)
            assert await fake_broker.set_if_absent("k", 10) is True

        asyncio.run(run())

    def test_incr_with_ttl(self, fake_broker: FakeStreamBroker, fake_clock: FrozenClock) -> None:
        async def run() -> None:
            assert await fake_broker.incr_with_ttl("r", 60) == 1
            assert await fake_broker.incr_with_ttl("r", 60) == 2
            fake_clock.advance(seconds=61)
            assert await fake_broker.incr_with_ttl("r", 60) == 1

        asyncio.run(run())

    def test_fail_next(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            fake_broker.fail_next("xadd", times=2)
            for _ in range(2):
                with pytest.raises(ConnectionError):
                    await fake_broker.xadd("s", {})
            assert await fake_broker.xadd("s", {})

        asyncio.run(run())

    def test_maxlen_trims_oldest(self, fake_broker: FakeStreamBroker) -> None:
        async def run() -> None:
            for i in range(5):
                await fake_broker.xadd("s", {"n": str(i)}, maxlen=3)
            assert [f["n"] for _, f in fake_broker.entries("s")] == ["2", "3", "4"]

        asyncio.run(run())
