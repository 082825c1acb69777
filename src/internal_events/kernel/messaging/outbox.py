"""Kernel messaging – outbox pattern ports."""
from __future__ import annotations

import abc
import dataclasses
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime
from typing import Any, Callable, TypeAlias
from uuid import uuid4


@dataclasses.dataclass
class OutboxEvent:
    """Transactional outbox row written alongside business data.

    ``published_at`` stays ``None`` until the dispatcher has confirmed the
    stream append.
    """

    id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    event_type: str = ""
    payload: dict[str, Any] = dataclasses.field(default_factory=dict)
    created_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))
    published_at: datetime | None = None

    @property
    def is_published(self) -> bool:
        return self.published_at is not None


class OutboxStore(abc.ABC):
    """Port: durable storage for outbox events."""

    @abc.abstractmethod
    async def add(self, event_type: str, payload: dict[str, Any] | None = None) -> OutboxEvent:
        """Insert a new unpublished row and return it (with its generated id)."""
        ...

    @abc.abstractmethod
    async def fetch_unpublished(self, limit: int = 100) -> list[OutboxEvent]:
        """Return at most *limit* unpublished rows, oldest first."""
        ...

    @abc.abstractmethod
    async def mark_published(self, event_id: str, published_at: datetime) -> None: ...

    @abc.abstractmethod
    async def delete_published_before(self, cutoff: datetime) -> int:
        """Delete rows published before *cutoff*; return how many were removed."""
        ...


#: Opens a unit of work and yields a store bound to it.
OutboxStoreFactory: TypeAlias = Callable[[], AbstractAsyncContextManager[OutboxStore]]


__all__ = ["OutboxEvent", "OutboxStore", "OutboxStoreFactory"]
