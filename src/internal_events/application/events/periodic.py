"""Application events – PeriodicTask interval runner (APScheduler >= 4.0)."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Awaitable, Callable

from internal_events.kernel.errors import describe_error
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)

__all__ = ["PeriodicTask", "TickResult"]

# ticks queued behind a slow one are dropped once they are this late
MIN_MISFIRE_GRACE_SECONDS = 1.0


def _require_apscheduler() -> Any:
    try:
        import apscheduler  # noqa: PLC0415
        return apscheduler
    except ImportError as exc:
        raise ImportError(
            "APScheduler>=4.0 is required. "
            "Install it with: pip install 'apscheduler>=4.0.0a5'"
        ) from exc


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick (successful or not)."""

    name: str
    started_at: datetime
    duration_ms: float
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class PeriodicTask:
    """Runs an async callable every *interval_seconds* on an APScheduler
    ``AsyncScheduler`` with an ``IntervalTrigger``.

    The first tick fires on :meth:`start`. At most one tick runs at a time
    and missed fire times are coalesced. A failing tick is logged and the
    schedule carries on.
    """

    def __init__(self, name: str, interval_seconds: float, func: Callable[[], Awaitable[object]]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self._func = func
        self._runner: asyncio.Task[None] | None = None
        self._stop_requested = asyncio.Event()
        self.last_result: TickResult | None = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._stop_requested = asyncio.Event()
        ready: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._runner = asyncio.create_task(self._serve(ready), name=self.name)
        try:
            await ready
        except Exception:
            self._runner = None
            raise

    async def stop(self) -> None:
        if self._runner is None:
            return
        runner, self._runner = self._runner, None
        self._stop_requested.set()
        await runner

    async def run_once(self) -> TickResult:
        started_at = datetime.now(UTC)
        t0 = time.monotonic()
        error: str | None = None
        try:
            await self._func()
        except Exception as exc:  # noqa: BLE001
            error = describe_error(exc)
            logger.warning("internal_events.periodic.tick_failed", task=self.name, error=error, exc_info=exc)
        result = TickResult(
            name=self.name,
            started_at=started_at,
            duration_ms=(time.monotonic() - t0) * 1000,
            error=error,
        )
        self.ticks += 1
        self.last_result = result
        return result

    async def _serve(self, ready: asyncio.Future[None]) -> None:
        # the scheduler context is entered and exited in this one task
        try:
            _require_apscheduler()
            from apscheduler import AsyncScheduler, CoalescePolicy  # noqa: PLC0415
            from apscheduler.triggers.interval import IntervalTrigger  # noqa: PLC0415

            async with AsyncScheduler() as scheduler:
                await scheduler.configure_task(self.name, func=self.run_once, max_running_jobs=1)
                await scheduler.add_schedule(
                    self.name,
                    IntervalTrigger(seconds=self.interval_seconds),
                    id=self.name,
                    coalesce=CoalescePolicy.latest,
                    misfire_grace_time=timedelta(seconds=max(self.interval_seconds, MIN_MISFIRE_GRACE_SECONDS)),
                )
                await scheduler.start_in_background()
                ready.set_result(None)
                logger.debug("internal_events.periodic.scheduled", task=self.name, interval_seconds=self.interval_seconds)
                await self._stop_requested.wait()
        except Exception as exc:
            if not ready.done():
                ready.set_exception(exc)
                return
            raise
