"""Application events – emitter, dispatcher, consumer and their wiring."""
from internal_events.application.events.consumer import (
    ConsumerState,
    InternalEventsConsumer,
    ProcessOutcome,
    build_consumer_name,
)
from internal_events.application.events.dispatcher import OutboxDispatcher
from internal_events.application.events.emitter import InternalEventsEmitter
from internal_events.application.events.handler_base import InternalEventHandlerBase
from internal_events.application.events.module import InternalEventsModule
from internal_events.application.events.periodic import PeriodicTask, TickResult
from internal_events.application.events.registry import HandlerRegistry
from internal_events.application.events.retention import OutboxRetentionSweeper

__all__ = [
    "ConsumerState",
    "HandlerRegistry",
    "InternalEventHandlerBase",
    "InternalEventsConsumer",
    "InternalEventsEmitter",
    "InternalEventsModule",
    "OutboxDispatcher",
    "OutboxRetentionSweeper",
    "PeriodicTask",
    "ProcessOutcome",
    "TickResult",
    "build_consumer_name",
]
