"""Infrastructure errors – broker and storage I/O failures."""

from __future__ import annotations

from typing import Any

from internal_events.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class ConnectionError(InfrastructureError):  # noqa: A001
    """Failed to reach an external resource (broker, database)."""

    default_code = "connection_error"

    def __init__(
        self,
        resource: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Could not connect to '{resource}'", **kwargs)
        self.resource = resource


class SerializationError(InfrastructureError):
    """A stream entry or payload could not be encoded / decoded."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


class StreamGroupMissingError(InfrastructureError):
    """The consumer group (or its stream) no longer exists on the broker."""

    default_code = "stream_group_missing"

    def __init__(self, stream: str, group: str, **kwargs: Any) -> None:
        super().__init__(
            f"Consumer group '{group}' is missing on stream '{stream}'", **kwargs
        )
        self.stream = stream
        self.group = group


__all__ = [
    "ConnectionError",
    "InfrastructureError",
    "SerializationError",
    "StreamGroupMissingError",
]
