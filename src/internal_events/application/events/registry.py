"""Application events – HandlerRegistry."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from internal_events.kernel.messaging import EventType, InternalEventHandler
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)


class HandlerRegistry:
    """Immutable map from event type to the handlers subscribed to it.

    Built once at startup from an explicit handler list; handlers for one
    event type keep their registration order.

    Example::

        registry = HandlerRegistry.from_handlers([SendWelcomeEmail(), SyncCrm()])
        registry.get_handlers("USER_CREATED")
    """

    def __init__(self, handlers: Mapping[EventType, Iterable[InternalEventHandler]] | None = None) -> None:
        frozen = {event_type: tuple(items) for event_type, items in (handlers or {}).items()}
        self._handlers: Mapping[EventType, tuple[InternalEventHandler, ...]] = MappingProxyType(frozen)

    @classmethod
    def from_handlers(cls, handlers: Iterable[InternalEventHandler]) -> "HandlerRegistry":
        """Scan *handlers* and index each by the event types it declares."""
        index: dict[EventType, list[InternalEventHandler]] = {}
        for handler in handlers:
            event_types = list(handler.event_types())
            if not event_types:
                raise ValueError(f"{type(handler).__name__} declares no event types")
            for event_type in dict.fromkeys(event_types):
                index.setdefault(event_type, []).append(handler)
            logger.debug(
                "internal_events.registry.handler_registered",
                handler=type(handler).__name__,
                event_types=event_types,
            )
        return cls(index)

    def get_handlers(self, event_type: EventType) -> tuple[InternalEventHandler, ...]:
        return self._handlers.get(event_type, ())

    def event_types(self) -> list[EventType]:
        return sorted(self._handlers)

    def __contains__(self, event_type: object) -> bool:
        return event_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


__all__ = ["HandlerRegistry"]
