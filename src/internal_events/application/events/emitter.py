"""Application events – InternalEventsEmitter."""
from __future__ import annotations

from typing import Any

from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.errors import EventsDisabledError
from internal_events.kernel.messaging import OutboxEvent, OutboxStore
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)


class InternalEventsEmitter:
    """Writes events to the outbox inside the caller's transaction.

    ``emit`` either returns the durable row or raises; with the feature
    disabled it raises :class:`EventsDisabledError` before touching the
    store, so the caller's transaction can roll back.

    Example::

        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            user = await users.create(uow.session, ...)
            await emitter.emit(SqlAlchemyOutboxStore(uow.session), "USER_CREATED", {"id": user.id})
    """

    def __init__(self, settings: InternalEventsSettings) -> None:
        self._enabled = settings.enable

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def emit(
        self,
        store: OutboxStore,
        event_type: str,
        payload: dict[str, Any] | None = None,
    ) -> OutboxEvent:
        if not self._enabled:
            logger.warning("internal_events.emit.disabled", event_type=event_type)
            raise EventsDisabledError()
        if not event_type:
            raise ValueError("event_type must not be empty")
        event = await store.add(event_type, payload or {})
        logger.debug("internal_events.emit.stored", event_type=event_type, event_id=event.id)
        return event


__all__ = ["InternalEventsEmitter"]
