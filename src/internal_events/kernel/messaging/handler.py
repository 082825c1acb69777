"""Kernel messaging – internal event handler port."""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from internal_events.kernel.messaging.event import InternalEvent


@runtime_checkable
class InternalEventHandler(Protocol):
    """Reacts to one or more event types.

    Example::

        class SendWelcomeEmail:
            def event_types(self) -> Sequence[str]:
                return ["USER_CREATED"]

            async def handle(self, event: InternalEvent) -> None:
                ...
    """

    def event_types(self) -> Sequence[str]: ...

    async def handle(self, event: InternalEvent) -> None: ...


__all__ = ["InternalEventHandler"]
