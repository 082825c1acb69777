"""Application events – InternalEventHandlerBase."""
from __future__ import annotations

import abc
import json
from typing import Any, NoReturn, Sequence

from internal_events.kernel.errors import BaseError
from internal_events.kernel.messaging import InternalEvent
from internal_events.observability.logging import get_logger


class InternalEventHandlerBase(abc.ABC):
    """Optional base for handlers: declares event types and logs the lifecycle.

    Subclasses set ``handled_event_types`` and implement :meth:`handle`,
    typically as::

        async def handle(self, event: InternalEvent) -> None:
            event_id = self.event_id(event)
            self.received(event, event_id)
            try:
                await self._sync(event.payload)
            except Exception as exc:
                self.failed(event, event_id, exc)
            self.processed(event, event_id)
    """

    handled_event_types: Sequence[str] = ()

    def __init__(self, context: str | None = None) -> None:
        self.logger = get_logger(context or type(self).__name__)

    def event_types(self) -> Sequence[str]:
        return tuple(self.handled_event_types)

    @abc.abstractmethod
    async def handle(self, event: InternalEvent) -> None: ...

    def event_id(self, event: InternalEvent) -> str:
        return event.event_id or "unknown"

    def received(self, event: InternalEvent, event_id: str, payload: Any = None, debug: bool = False) -> None:
        if debug:
            self.logger.debug(
                "internal_events.handler.received",
                event_type=event.event_type,
                event_id=event_id,
                payload=self._stringify(payload),
            )
            return
        self.logger.info("internal_events.handler.received", event_type=event.event_type, event_id=event_id)

    def processed(self, event: InternalEvent, event_id: str) -> None:
        self.logger.info("internal_events.handler.processed", event_type=event.event_type, event_id=event_id)

    def failed(self, event: InternalEvent, event_id: str, error: BaseException) -> NoReturn:
        """Log *error* and re-raise it so the consumer's retry policy applies."""
        self.logger.error(
            "internal_events.handler.failed",
            event_type=event.event_type,
            event_id=event_id,
            error=self._format_error(error),
            exc_info=error,
        )
        raise error

    def _format_error(self, error: BaseException) -> str:
        if isinstance(error, BaseError):
            return f"{error.code}: {error.message}"
        return str(error) or type(error).__name__

    def _stringify(self, payload: Any) -> str:
        try:
            return json.dumps(payload, default=str)
        except (TypeError, ValueError) as exc:
            return f'{{error:"{exc}"}}'


__all__ = ["InternalEventHandlerBase"]
