"""Unit tests for PeriodicTask."""
from __future__ import annotations

import asyncio

import pytest

from internal_events.application.events import PeriodicTask


async def _wait_for_ticks(task: PeriodicTask, count: int) -> None:
    for _ in range(200):
        if task.ticks >= count:
            return
        await asyncio.sleep(0.01)


class TestPeriodicTask:
    def test_rejects_non_positive_interval(self) -> None:
        async def noop() -> None:
            return None

        with pytest.raises(ValueError):
            PeriodicTask("t", 0, noop)

    def test_run_once_records_success(self) -> None:
        calls: list[int] = []

        async def tick() -> None:
            calls.append(1)

        task = PeriodicTask("t", 1.0, tick)
        result = asyncio.run(task.run_once())
        assert result.success is True
        assert result.name == "t"
        assert calls == [1]
        assert task.ticks == 1
        assert task.last_result is result

    def test_run_once_captures_error(self) -> None:
        async def tick() -> None:
            raise RuntimeError("boom")

        result = asyncio.run(PeriodicTask("t", 1.0, tick).run_once())
        assert result.success is False
        assert result.error == "boom"

    def test_ticks_never_overlap(self) -> None:
        active = 0
        max_active = 0

        async def tick() -> None:
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.05)
            active -= 1

        async def run() -> None:
            task = PeriodicTask("t", 0.01, tick)
            await task.start()
            await _wait_for_ticks(task, 3)
            await task.stop()
            assert task.ticks >= 3

        asyncio.run(run())
        assert max_active == 1

    def test_failing_tick_keeps_schedule(self) -> None:
        async def tick() -> None:
            raise RuntimeError("database down")

        async def run() -> None:
            task = PeriodicTask("t", 0.01, tick)
            await task.start()
            await _wait_for_ticks(task, 2)
            await task.stop()
            assert task.ticks >= 2
            assert task.last_result is not None
            assert task.last_result.error == "database down"

        asyncio.run(run())

    def test_first_tick_fires_on_start_and_stop_returns(self) -> None:
        async def tick() -> None:
            return None

        async def run() -> None:
            task = PeriodicTask("t", 3600, tick)
            await task.start()
            assert task.is_running is True
            await _wait_for_ticks(task, 1)
            await asyncio.wait_for(task.stop(), timeout=5.0)
            assert task.is_running is False
            assert task.ticks == 1

        asyncio.run(run())

    def test_start_twice_keeps_one_schedule(self) -> None:
        async def tick() -> None:
            return None

        async def run() -> None:
            task = PeriodicTask("t", 3600, tick)
            await task.start()
            await task.start()
            await _wait_for_ticks(task, 1)
            await asyncio.sleep(0.05)
            await task.stop()
            assert task.ticks == 1

        asyncio.run(run())

    def test_restart_after_stop(self) -> None:
        async def tick() -> None:
            return None

        async def run() -> None:
            task = PeriodicTask("t", 3600, tick)
            await task.start()
            await _wait_for_ticks(task, 1)
            await task.stop()
            await task.start()
            await _wait_for_ticks(task, 2)
            await task.stop()
            assert task.ticks == 2

        asyncio.run(run())

    def test_stop_without_start(self) -> None:
        async def tick() -> None:
            return None

        asyncio.run(PeriodicTask("t", 1.0, tick).stop())
