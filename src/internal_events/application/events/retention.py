"""Application events – OutboxRetentionSweeper."""
from __future__ import annotations

from datetime import timedelta

from internal_events.application.events.periodic import PeriodicTask
from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.messaging import OutboxStoreFactory
from internal_events.kernel.time import Clock, SystemClock
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)


class OutboxRetentionSweeper:
    """Deletes published outbox rows older than ``outbox_retention_days``.

    Unpublished rows are never touched, whatever their age.
    """

    def __init__(
        self,
        settings: InternalEventsSettings,
        store_factory: OutboxStoreFactory,
        clock: Clock | None = None,
    ) -> None:
        self._enabled = settings.enable
        self._retention = timedelta(days=settings.outbox_retention_days)
        self._interval_seconds = settings.sweep_interval_seconds
        self._store_factory = store_factory
        self._clock = clock or SystemClock()
        self._task: PeriodicTask | None = None

    async def sweep(self) -> int:
        cutoff = self._clock.now() - self._retention
        async with self._store_factory() as store:
            deleted = await store.delete_published_before(cutoff)
        if deleted:
            logger.info("internal_events.retention.swept", deleted=deleted, cutoff=cutoff.isoformat())
        return deleted

    async def start(self) -> None:
        if not self._enabled or self._interval_seconds <= 0:
            return
        if self._task is None:
            self._task = PeriodicTask("internal-events-retention", self._interval_seconds, self.sweep)
        await self._task.start()

    async def stop(self) -> None:
        if self._task is not None:
            await self._task.stop()


__all__ = ["OutboxRetentionSweeper"]
