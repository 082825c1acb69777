"""Application events – InternalEventsModule composition root."""
from __future__ import annotations

from collections.abc import Iterable
from types import TracebackType

from internal_events.application.events.consumer import InternalEventsConsumer
from internal_events.application.events.dispatcher import OutboxDispatcher
from internal_events.application.events.emitter import InternalEventsEmitter
from internal_events.application.events.registry import HandlerRegistry
from internal_events.application.events.retention import OutboxRetentionSweeper
from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.messaging import InternalEventHandler, OutboxStoreFactory, StreamBroker
from internal_events.kernel.time import Clock, SystemClock
from internal_events.observability.health import HealthRegistry, InternalEventsHealthCheck
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)


class InternalEventsModule:
    """Wires every internal-events component from one settings object.

    With ``enable=False`` the module is inert: :meth:`start` opens no
    connection and starts no background task, and the emitter rejects
    every event.

    Example::

        settings = EnvSettingsLoader().load(InternalEventsSettings)
        db = SqlAlchemySessionFactory(DATABASE_URL)
        async with InternalEventsModule(
            settings, outbox_store_factory(db), handlers=[SendWelcomeEmail()]
        ) as events:
            ...
    """

    def __init__(
        self,
        settings: InternalEventsSettings,
        store_factory: OutboxStoreFactory,
        handlers: Iterable[InternalEventHandler] = (),
        *,
        broker: StreamBroker | None = None,
        clock: Clock | None = None,
        consumer_name: str | None = None,
    ) -> None:
        if broker is None:
            from internal_events.adapters.redis import RedisStreamClient

            broker = RedisStreamClient(settings)
        clock = clock or SystemClock()
        self.settings = settings
        self.broker = broker
        self.registry = HandlerRegistry.from_handlers(handlers)
        self.emitter = InternalEventsEmitter(settings)
        self.dispatcher = OutboxDispatcher(settings, broker, store_factory, clock)
        self.sweeper = OutboxRetentionSweeper(settings, store_factory, clock)
        self.consumer = InternalEventsConsumer(settings, broker, self.registry, clock, consumer_name=consumer_name)
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def is_ready(self) -> bool:
        return self.broker.is_ready()

    def health_registry(self) -> HealthRegistry:
        return HealthRegistry([InternalEventsHealthCheck(self.broker)])

    async def start(self) -> None:
        if not self.settings.enable:
            logger.info("internal_events.module.disabled")
            return
        if self._started:
            return
        await self.broker.connect()
        await self.consumer.start()
        await self.dispatcher.start()
        await self.sweeper.start()
        self._started = True
        logger.info(
            "internal_events.module.started",
            service=self.settings.service_name,
            stream=self.settings.stream_name,
            event_types=self.registry.event_types(),
        )

    async def stop(self) -> None:
        if not self._started:
            return
        # commands retrying through an outage give up instead of holding shutdown
        self.broker.interrupt()
        await self.sweeper.stop()
        await self.dispatcher.stop()
        await self.consumer.stop()
        await self.broker.close()
        self._started = False
        logger.info("internal_events.module.stopped")

    async def __aenter__(self) -> "InternalEventsModule":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()


__all__ = ["InternalEventsModule"]
