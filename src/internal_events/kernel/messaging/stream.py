"""Kernel messaging – stream broker port."""
from __future__ import annotations

from typing import Protocol, TypeAlias, runtime_checkable

StreamEntry: TypeAlias = tuple[str, dict[str, str]]


@runtime_checkable
class StreamBroker(Protocol):
    """Port: the primitives the dispatcher and consumer need from a
    log-structured broker with consumer groups.

    Implemented by :class:`~internal_events.adapters.redis.RedisStreamClient`
    and by the in-memory :class:`~internal_events.testing.fakes.FakeStreamBroker`.
    """

    async def connect(self) -> None: ...
    async def close(self) -> None: ...

    def interrupt(self) -> None:
        """Stop waiting out broker outages in retries; used on shutdown."""
        ...

    def is_ready(self) -> bool: ...
    async def ping(self) -> bool: ...

    async def xadd(self, stream: str, fields: dict[str, str], *, maxlen: int | None = None) -> str: ...

    async def ensure_group(self, stream: str, group: str) -> bool:
        """Create *group* on *stream* from the tail; ``False`` if it already existed."""
        ...

    async def read_group(
        self,
        stream: str,
        group: str,
        consumer: str,
        *,
        count: int,
        block_ms: int,
    ) -> list[StreamEntry]:
        """Blocking read of new entries; raises ``StreamGroupMissingError``."""
        ...

    async def autoclaim(
        self,
        stream: str,
        group: str,
        consumer: str,
        *,
        min_idle_ms: int,
        count: int,
    ) -> list[StreamEntry]: ...

    async def ack(self, stream: str, group: str, entry_id: str) -> int: ...

    async def set_if_absent(self, key: str, ttl_seconds: int) -> bool: ...
    async def delete(self, key: str) -> None: ...
    async def incr_with_ttl(self, key: str, ttl_seconds: int) -> int: ...


__all__ = ["StreamBroker", "StreamEntry"]
