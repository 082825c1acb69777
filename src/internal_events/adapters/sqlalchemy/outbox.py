"""SQLAlchemy adapter – SqlAlchemyOutboxStore."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, AsyncIterator
from uuid import uuid4

from sqlalchemy import delete, select, update

from internal_events.adapters.sqlalchemy.models import OutboxEventModel
from internal_events.adapters.sqlalchemy.uow import SqlAlchemyUnitOfWork
from internal_events.kernel.messaging import OutboxEvent, OutboxStore, OutboxStoreFactory
from internal_events.kernel.time import Clock, SystemClock


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SqlAlchemyOutboxStore(OutboxStore):
    """Outbox store bound to one ``AsyncSession``.

    :meth:`add` only flushes, so the row commits or rolls back together with
    whatever else the caller wrote in the same session.
    """

    def __init__(
        self,
        session: Any,
        model: type[Any] = OutboxEventModel,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._model = model
        self._clock = clock or SystemClock()

    async def add(self, event_type: str, payload: dict[str, Any] | None = None) -> OutboxEvent:
        row = self._model(
            id=str(uuid4()),
            event_type=event_type,
            payload=payload or {},
            created_at=self._clock.now(),
            published_at=None,
        )
        self._session.add(row)
        await self._session.flush()
        return self._row_to_event(row)

    async def fetch_unpublished(self, limit: int = 100) -> list[OutboxEvent]:
        result = await self._session.execute(
            select(self._model)
            .where(self._model.published_at.is_(None))
            .order_by(self._model.seq)
            .limit(limit)
        )
        return [self._row_to_event(row) for row in result.scalars().all()]

    async def mark_published(self, event_id: str, published_at: datetime) -> None:
        await self._session.execute(
            update(self._model).where(self._model.id == event_id).values(published_at=published_at)
        )

    async def delete_published_before(self, cutoff: datetime) -> int:
        result = await self._session.execute(
            delete(self._model).where(
                self._model.published_at.is_not(None),
                self._model.published_at < cutoff,
            )
        )
        return int(result.rowcount or 0)

    def _row_to_event(self, row: Any) -> OutboxEvent:
        return OutboxEvent(
            id=row.id,
            event_type=row.event_type,
            payload=dict(row.payload or {}),
            created_at=_as_utc(row.created_at),
            published_at=_as_utc(row.published_at),
        )


def outbox_store_factory(
    session_factory: Any,
    model: type[Any] = OutboxEventModel,
    clock: Clock | None = None,
) -> OutboxStoreFactory:
    """Build a factory opening one committed unit of work per use.

    Used by the dispatcher and the retention sweeper, which own their own
    transactions (unlike emitters, which join the caller's session).
    """

    @asynccontextmanager
    async def _scope() -> AsyncIterator[OutboxStore]:
        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            yield SqlAlchemyOutboxStore(uow.session, model=model, clock=clock)

    return _scope


__all__ = ["SqlAlchemyOutboxStore", "outbox_store_factory"]
