"""Kernel messaging – events, wire format, outbox and broker ports."""
from internal_events.kernel.messaging.event import (
    EntryId,
    EventType,
    InternalEvent,
    StreamMessage,
    dead_letter_fields,
)
from internal_events.kernel.messaging.handler import InternalEventHandler
from internal_events.kernel.messaging.outbox import OutboxEvent, OutboxStore, OutboxStoreFactory
from internal_events.kernel.messaging.stream import StreamBroker, StreamEntry

__all__ = [
    "EntryId",
    "EventType",
    "InternalEvent",
    "InternalEventHandler",
    "OutboxEvent",
    "OutboxStore",
    "OutboxStoreFactory",
    "StreamBroker",
    "StreamEntry",
    "StreamMessage",
    "dead_letter_fields",
]
