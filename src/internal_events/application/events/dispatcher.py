"""Application events – OutboxDispatcher (outbox → stream)."""
from __future__ import annotations

from internal_events.application.events.periodic import PeriodicTask
from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.errors import describe_error
from internal_events.kernel.messaging import OutboxStoreFactory, StreamBroker, StreamMessage
from internal_events.kernel.time import Clock, SystemClock
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)


class OutboxDispatcher:
    """Publishes unpublished outbox rows to the stream, oldest first.

    A row is marked published only after its append succeeded. The first
    failed append ends the tick so no later row overtakes it; the failed row
    and everything after it are retried on the next tick.
    """

    def __init__(
        self,
        settings: InternalEventsSettings,
        broker: StreamBroker,
        store_factory: OutboxStoreFactory,
        clock: Clock | None = None,
    ) -> None:
        self._enabled = settings.enable
        self._stream = settings.stream_name
        self._batch_size = settings.dispatch_batch_size
        self._interval_ms = settings.dispatch_interval_ms
        self._maxlen = settings.trim_max_len
        self._broker = broker
        self._store_factory = store_factory
        self._clock = clock or SystemClock()
        self._task: PeriodicTask | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and self._task.is_running

    async def dispatch_pending(self) -> int:
        """Run one tick; return how many rows were published."""
        if self._batch_size <= 0:
            return 0
        published = 0
        async with self._store_factory() as store:
            events = await store.fetch_unpublished(self._batch_size)
            for event in events:
                message = StreamMessage.from_outbox(event)
                try:
                    await self._broker.xadd(self._stream, message.to_fields(), maxlen=self._maxlen)
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "internal_events.dispatch.publish_failed",
                        event_id=event.id,
                        event_type=event.event_type,
                        error=describe_error(exc),
                    )
                    break
                await store.mark_published(event.id, self._clock.now())
                published += 1
        if published:
            logger.debug("internal_events.dispatch.published", count=published, stream=self._stream)
        return published

    async def start(self) -> None:
        if not self._enabled or self._interval_ms <= 0:
            logger.info("internal_events.dispatch.not_started", enabled=self._enabled)
            return
        if self._task is None:
            self._task = PeriodicTask("internal-events-dispatcher", self._interval_ms / 1000, self.dispatch_pending)
        await self._task.start()
        logger.info(
            "internal_events.dispatch.started",
            interval_ms=self._interval_ms,
            batch_size=self._batch_size,
            stream=self._stream,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        await self._task.stop()
        logger.debug("internal_events.dispatch.stopped")


__all__ = ["OutboxDispatcher"]
