"""SQLAlchemy adapter – ORM model for the ``internal_events`` outbox table."""
from __future__ import annotations

import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class OutboxBase(DeclarativeBase):
    """Declarative base owning only the outbox table.

    Applications with their own metadata can map :class:`OutboxEventModel`'s
    columns onto their base and pass that model to the store instead.
    """


class OutboxEventModel(OutboxBase):
    """One pending or published internal event.

    ``seq`` is the insertion order used by the dispatcher; ``id`` is the
    public event id carried on the stream as ``eventId``.
    """

    __tablename__ = "internal_events"

    seq: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    event_type: Mapped[str] = mapped_column(String(255), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )


__all__ = ["OutboxBase", "OutboxEventModel"]
