"""Application – use-case building blocks (framework-agnostic)."""

from internal_events.application.events import (
    HandlerRegistry,
    InternalEventHandlerBase,
    InternalEventsConsumer,
    InternalEventsEmitter,
    InternalEventsModule,
    OutboxDispatcher,
    OutboxRetentionSweeper,
)

__all__ = [
    "HandlerRegistry",
    "InternalEventHandlerBase",
    "InternalEventsConsumer",
    "InternalEventsEmitter",
    "InternalEventsModule",
    "OutboxDispatcher",
    "OutboxRetentionSweeper",
]
