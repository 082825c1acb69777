"""Application-layer errors – raised to callers of the events API."""

from __future__ import annotations

from typing import Any

from internal_events.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class EventsDisabledError(ApplicationError):
    """An event was emitted while the internal-events feature is switched off.

    Emission never drops an event silently: the caller gets this error and
    its surrounding transaction is expected to roll back.
    """

    default_code = "internal_events_disabled"

    def __init__(self, message: str = "Internal events are disabled.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


__all__ = ["ApplicationError", "EventsDisabledError"]
