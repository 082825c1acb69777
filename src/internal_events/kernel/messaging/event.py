"""Kernel messaging – InternalEvent and its stream wire format."""
from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeAlias

from internal_events.kernel.errors import SerializationError

if TYPE_CHECKING:
    from internal_events.kernel.messaging.outbox import OutboxEvent

EventType: TypeAlias = str
EntryId: TypeAlias = str


@dataclasses.dataclass(frozen=True)
class InternalEvent:
    """Decoded event handed to handlers."""

    event_id: str
    event_type: EventType
    payload: dict[str, Any] = dataclasses.field(default_factory=dict)
    occurred_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))


def _parse_occurred_at(raw: str | None) -> datetime:
    if not raw:
        return datetime.now(UTC)
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise SerializationError(f"Invalid occurredAt {raw!r}", cause=exc) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


@dataclasses.dataclass(frozen=True)
class StreamMessage:
    """Flat, string-only field map stored in each stream entry.

    Wire fields: ``eventId``, ``eventType``, ``payload`` (JSON) and
    ``occurredAt`` (ISO-8601).
    """

    event_id: str
    event_type: EventType
    payload: str
    occurred_at: str

    @classmethod
    def from_outbox(cls, event: OutboxEvent) -> "StreamMessage":
        return cls(
            event_id=event.id,
            event_type=event.event_type,
            payload=json.dumps(event.payload or {}, default=str),
            occurred_at=_isoformat(event.created_at),
        )

    @classmethod
    def from_event(cls, event: InternalEvent) -> "StreamMessage":
        return cls(
            event_id=event.event_id,
            event_type=event.event_type,
            payload=json.dumps(event.payload or {}, default=str),
            occurred_at=_isoformat(event.occurred_at),
        )

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "StreamMessage":
        return cls(
            event_id=fields.get("eventId", ""),
            event_type=fields.get("eventType", ""),
            payload=fields.get("payload", ""),
            occurred_at=fields.get("occurredAt", ""),
        )

    def to_fields(self) -> dict[str, str]:
        return {
            "eventId": self.event_id,
            "eventType": self.event_type,
            "payload": self.payload,
            "occurredAt": self.occurred_at,
        }

    def to_event(self) -> InternalEvent:
        """Decode into an :class:`InternalEvent`.

        An empty payload decodes to ``{}`` and a missing ``occurredAt`` to
        the current time; malformed JSON raises :class:`SerializationError`.
        """
        if not self.event_id:
            raise SerializationError("Stream entry has no eventId", payload_type=self.event_type)
        try:
            payload = json.loads(self.payload) if self.payload else {}
        except json.JSONDecodeError as exc:
            raise SerializationError(
                f"Payload of event {self.event_id} is not valid JSON",
                payload_type=self.event_type,
                cause=exc,
            ) from exc
        if not isinstance(payload, dict):
            raise SerializationError(
                f"Payload of event {self.event_id} is not a JSON object",
                payload_type=self.event_type,
            )
        return InternalEvent(
            event_id=self.event_id,
            event_type=self.event_type,
            payload=payload,
            occurred_at=_parse_occurred_at(self.occurred_at),
        )


def dead_letter_fields(message: StreamMessage, error: str) -> dict[str, str]:
    """Fields of a dead-letter entry: the original wire fields plus ``error``."""
    return {**message.to_fields(), "error": error}


__all__ = ["EntryId", "EventType", "InternalEvent", "StreamMessage", "dead_letter_fields"]
