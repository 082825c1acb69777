"""Application events – InternalEventsConsumer.

Reads the shared stream through a consumer group named after the service,
so every service sees every event once while its replicas split the work.
Per entry:

1. claim the event id (``SET NX EX``); already claimed → ack, done
2. run every registered handler in order; none registered → warn, ack
3. all succeeded → ack
4. a handler raised → release the claim, bump the retry counter; below
   ``max_retries`` the entry stays pending and is reclaimed later, otherwise
   it is copied to the dead-letter stream and acked
"""
from __future__ import annotations

import asyncio
import enum
import os
import secrets
import socket
import string

from internal_events.application.events.registry import HandlerRegistry
from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.errors import (
    ConnectionError,
    SerializationError,
    StreamGroupMissingError,
    describe_error,
)
from internal_events.kernel.messaging import InternalEvent, StreamBroker, StreamEntry, StreamMessage, dead_letter_fields
from internal_events.kernel.time import Clock, SystemClock
from internal_events.observability.logging import get_logger

logger = get_logger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class ConsumerState(enum.StrEnum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ProcessOutcome(enum.StrEnum):
    DUPLICATE = "duplicate"
    UNHANDLED = "unhandled"
    SUCCEEDED = "succeeded"
    RETRY_SCHEDULED = "retry_scheduled"
    DEAD_LETTERED = "dead_lettered"


def build_consumer_name(service_name: str) -> str:
    """``<service>-<hostname>-<pid>-<6 random chars>``, unique per process."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{service_name}-{socket.gethostname()}-{os.getpid()}-{suffix}"


def idempotency_key(service_name: str, event_id: str) -> str:
    return f"processed:{service_name}:{event_id}"


def retry_key(service_name: str, entry_id: str) -> str:
    return f"internal-events:retries:{service_name}:{entry_id}"


class InternalEventsConsumer:
    """Consumer-group reader driving handlers with at-least-once delivery.

    Parameters
    ----------
    settings:
        Stream, group, batching, retry and idempotency tunables.
    broker:
        Any :class:`~internal_events.kernel.messaging.StreamBroker`.
    registry:
        Event type → handlers, built once at startup.
    clock:
        Gates the pending-entry claim interval.
    error_pause_seconds:
        Pause after a failed loop iteration.
    """

    def __init__(
        self,
        settings: InternalEventsSettings,
        broker: StreamBroker,
        registry: HandlerRegistry,
        clock: Clock | None = None,
        *,
        consumer_name: str | None = None,
        error_pause_seconds: float = 1.0,
    ) -> None:
        self._settings = settings
        self._broker = broker
        self._registry = registry
        self._clock = clock or SystemClock()
        self._stream = settings.stream_name
        self._group = settings.service_name
        self.consumer_name = consumer_name or build_consumer_name(settings.service_name)
        self._error_pause = error_pause_seconds
        self._last_claim_at: float | None = None
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self.state = ConsumerState.STOPPED

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if not self._settings.enable:
            logger.warning("internal_events.consumer.disabled")
            return
        if self._task is not None:
            return
        self.state = ConsumerState.STARTING
        try:
            await self._broker.ensure_group(self._stream, self._group)
        except ConnectionError as exc:
            # the loop recreates the group once Redis is reachable
            logger.error("internal_events.consumer.ensure_group_failed", error=exc.message)
        except Exception:
            self.state = ConsumerState.STOPPED
            raise
        self._running = True
        self._task = asyncio.create_task(self._loop(), name=f"internal-events-consumer:{self.consumer_name}")
        self.state = ConsumerState.RUNNING
        logger.info(
            "internal_events.consumer.started",
            consumer=self.consumer_name,
            stream=self._stream,
            group=self._group,
        )

    async def stop(self) -> None:
        """Stop after the current read returns and the in-flight entry finishes."""
        if self._task is None:
            return
        self.state = ConsumerState.STOPPING
        self._running = False
        try:
            await self._task
        finally:
            self._task = None
            self.state = ConsumerState.STOPPED
        logger.debug("internal_events.consumer.stopped", consumer=self.consumer_name)

    async def _loop(self) -> None:
        while self._running:
            await self.run_once()

    # ------------------------------------------------------------------
    # Loop body
    # ------------------------------------------------------------------

    async def run_once(self) -> int:
        """One loop iteration; returns the number of entries processed."""
        try:
            processed = await self.claim_pending()
            entries = await self._broker.read_group(
                self._stream,
                self._group,
                self.consumer_name,
                count=self._settings.consumer_count,
                block_ms=self._settings.consumer_block_ms,
            )
            for entry_id, fields in entries:
                await self.process_entry(entry_id, fields)
            return processed + len(entries)
        except StreamGroupMissingError:
            logger.warning("internal_events.consumer.group_missing", stream=self._stream, group=self._group)
            try:
                await self._broker.ensure_group(self._stream, self._group)
            except Exception as exc:  # noqa: BLE001
                logger.warning("internal_events.consumer.ensure_group_failed", error=describe_error(exc))
        except Exception as exc:  # noqa: BLE001
            logger.warning("internal_events.consumer.loop_failed", error=describe_error(exc))
        await asyncio.sleep(self._error_pause)
        return 0

    async def claim_pending(self) -> int:
        """Take over entries left pending by dead or stuck consumers.

        Runs at most once per ``pending_claim_after_ms``; the first call
        always claims.
        """
        now = self._clock.timestamp()
        interval = self._settings.pending_claim_after_ms / 1000
        if self._last_claim_at is not None and now - self._last_claim_at < interval:
            return 0
        self._last_claim_at = now
        try:
            entries: list[StreamEntry] = await self._broker.autoclaim(
                self._stream,
                self._group,
                self.consumer_name,
                min_idle_ms=self._settings.pending_claim_after_ms,
                count=self._settings.consumer_count,
            )
        except StreamGroupMissingError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("internal_events.consumer.claim_failed", error=describe_error(exc))
            return 0
        if entries:
            logger.info("internal_events.consumer.claimed", count=len(entries), consumer=self.consumer_name)
        for entry_id, fields in entries:
            await self.process_entry(entry_id, fields)
        return len(entries)

    async def process_entry(self, entry_id: str, fields: dict[str, str]) -> ProcessOutcome:
        message = StreamMessage.from_fields(fields)
        try:
            event = message.to_event()
        except SerializationError as exc:
            # no retry can make this entry decodable
            logger.error("internal_events.consumer.undecodable", entry_id=entry_id, error=exc.message)
            await self._dead_letter(entry_id, message, exc.message)
            return ProcessOutcome.DEAD_LETTERED

        key = idempotency_key(self._group, event.event_id)
        if not await self._broker.set_if_absent(key, self._settings.idempotency_ttl_seconds):
            await self._ack(entry_id)
            logger.debug("internal_events.consumer.duplicate", event_id=event.event_id, entry_id=entry_id)
            return ProcessOutcome.DUPLICATE

        handlers = self._registry.get_handlers(event.event_type)
        try:
            for handler in handlers:
                await handler.handle(event)
        except Exception as exc:  # noqa: BLE001
            await self._broker.delete(key)
            return await self._handle_failure(entry_id, event, message, exc)

        await self._ack(entry_id)
        if not handlers:
            logger.warning("internal_events.consumer.no_handler", event_type=event.event_type)
            return ProcessOutcome.UNHANDLED
        return ProcessOutcome.SUCCEEDED

    async def _handle_failure(
        self,
        entry_id: str,
        event: InternalEvent,
        message: StreamMessage,
        error: Exception,
    ) -> ProcessOutcome:
        reason = describe_error(error)
        key = retry_key(self._group, entry_id)
        retries = await self._broker.incr_with_ttl(key, self._settings.idempotency_ttl_seconds)
        if retries < self._settings.max_retries:
            logger.warning(
                "internal_events.consumer.handler_failed",
                event_type=event.event_type,
                event_id=event.event_id,
                attempt=retries,
                error=reason,
            )
            return ProcessOutcome.RETRY_SCHEDULED
        await self._dead_letter(entry_id, message, reason)
        await self._broker.delete(key)
        return ProcessOutcome.DEAD_LETTERED

    async def _dead_letter(self, entry_id: str, message: StreamMessage, reason: str) -> None:
        if self._settings.dlq_enabled:
            await self._broker.xadd(self._settings.dlq_stream_name, dead_letter_fields(message, reason))
        logger.error(
            "internal_events.consumer.dead_lettered",
            event_type=message.event_type,
            event_id=message.event_id,
            entry_id=entry_id,
            dlq=self._settings.dlq_stream_name or None,
            error=reason,
        )
        await self._ack(entry_id)

    async def _ack(self, entry_id: str) -> None:
        await self._broker.ack(self._stream, self._group, entry_id)


__all__ = [
    "ConsumerState",
    "InternalEventsConsumer",
    "ProcessOutcome",
    "build_consumer_name",
    "idempotency_key",
    "retry_key",
]
