"""Redis adapter – RedisStreamClient.

Owns the single Redis connection shared by the outbox dispatcher and the
stream consumer. Each command runs under a redis-py :class:`Retry` with
:class:`StepBackoff` and the ``redis_max_retries_per_request`` ceiling
(``-1`` retries until Redis is back). Every failed attempt is logged through
the error-storm suppressor and marks the client not ready; whatever escapes
the ceiling surfaces as :class:`~internal_events.kernel.errors.ConnectionError`.
``ping`` (and therefore ``connect``) and ``ensure_group`` make a single attempt.
"""
from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, TypeVar
from urllib.parse import urlsplit, urlunsplit

from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from internal_events.adapters.redis.backoff import StepBackoff
from internal_events.config.settings import InternalEventsSettings
from internal_events.kernel.errors import ConnectionError, StreamGroupMissingError
from internal_events.kernel.messaging import StreamEntry
from internal_events.observability.logging import ErrorStormSuppressor, get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RECONNECT_NOTICE_INTERVAL_SECONDS = 60.0

_RETRYABLE_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)


def _require_redis() -> Any:
    try:
        import redis.asyncio as aioredis
        return aioredis
    except ImportError as exc:
        raise ImportError("Install 'redis>=5' to use the Redis adapter") from exc


def redact_url(url: str) -> str:
    """Return *url* with any password replaced by ``***``."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid url>"
    if not parts.password:
        return url
    netloc = parts.hostname or ""
    if parts.username:
        netloc = f"{parts.username}:***@{netloc}"
    else:
        netloc = f":***@{netloc}"
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def is_no_group_error(exc: BaseException) -> bool:
    return "NOGROUP" in str(exc)


def is_busy_group_error(exc: BaseException) -> bool:
    return "BUSYGROUP" in str(exc)


class RedisStreamClient:
    """Stream broker client backed by ``redis.asyncio``.

    Parameters
    ----------
    settings:
        Only the ``enable``, ``redis_url`` and ``redis_*`` retry fields are read.
    client:
        Pre-built ``redis.asyncio.Redis`` (tests); built lazily otherwise.
    """

    def __init__(self, settings: InternalEventsSettings, client: Any | None = None) -> None:
        self._settings = settings
        self._enabled = settings.enable
        self._url = settings.redis_url
        self._client = client
        self._connected = False
        self._storm = ErrorStormSuppressor(logger)
        self._last_reconnect_notice: float | None = None
        self._interrupted = False
        self.backoff = StepBackoff(settings.redis_retry_step_ms, settings.redis_retry_max_ms)
        self._retry = Retry(self.backoff, settings.redis_max_retries_per_request, supported_errors=_RETRYABLE_ERRORS)
        self._single_attempt = Retry(NoBackoff(), 0, supported_errors=_RETRYABLE_ERRORS)
        logger.debug(
            "internal_events.redis.retry_configured",
            step_ms=self.backoff.step_ms,
            max_ms=self.backoff.max_ms,
            max_retries_per_request=settings.redis_max_retries_per_request,
        )

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def _get_client(self) -> Any:
        if self._client is None:
            aioredis = _require_redis()
            self._client = aioredis.from_url(
                self._url,
                decode_responses=True,
                # retries happen in _execute, where each attempt is observed
                retry=Retry(NoBackoff(), 0),
                # blocking XREADGROUP must not be cut short client-side
                socket_timeout=None,
            )
        return self._client

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def connected(self) -> bool:
        return self._connected

    def is_ready(self) -> bool:
        """``True`` when the feature is enabled and Redis is reachable."""
        return self._enabled and self._connected

    async def connect(self) -> None:
        """Open the connection and verify it with a single PING.

        A failed initial connect is logged, not raised: the per-request retry
        policy keeps trying once components start issuing commands.
        """
        if not self._enabled:
            logger.warning("internal_events.redis.disabled")
            return
        self._interrupted = False
        url = redact_url(self._url)
        logger.info("internal_events.redis.connecting", url=url)
        try:
            await self.ping()
        except ConnectionError as exc:
            logger.error("internal_events.redis.initial_connect_failed", url=url, error=exc.message)
            return
        logger.info("internal_events.redis.ready", url=url)

    def interrupt(self) -> None:
        """Make commands stuck retrying give up after their current attempt.

        Called on shutdown so an outage cannot hold ``stop()`` forever.
        Cleared by the next :meth:`connect`.
        """
        self._interrupted = True

    async def close(self) -> None:
        self._interrupted = True
        if self._client is None:
            return
        logger.debug("internal_events.redis.closing")
        await self._client.aclose()
        self._connected = False
        logger.warning("internal_events.redis.closed")

    def _mark_connected(self) -> None:
        if not self._connected:
            self._connected = True
            self._storm.flush("internal_events.redis.error")

    def _mark_disconnected(self, exc: BaseException) -> None:
        self._connected = False
        self._storm.error("internal_events.redis.error", self.format_error(exc))
        now = time.monotonic()
        if self._last_reconnect_notice is None or now - self._last_reconnect_notice >= RECONNECT_NOTICE_INTERVAL_SECONDS:
            self._last_reconnect_notice = now
            logger.warning(
                "internal_events.redis.reconnecting",
                step_ms=self.backoff.step_ms,
                max_ms=self.backoff.max_ms,
            )

    async def _on_attempt_failed(self, exc: BaseException) -> None:
        self._mark_disconnected(exc)
        if self._interrupted:
            raise exc

    async def _execute(self, call: Callable[[Any], Awaitable[T]], *, single_attempt: bool = False) -> T:
        client = self._get_client()
        retry = self._single_attempt if single_attempt else self._retry
        try:
            result = await retry.call_with_retry(lambda: call(client), self._on_attempt_failed)
        except _RETRYABLE_ERRORS as exc:
            raise ConnectionError("redis", self.format_error(exc), cause=exc) from exc
        except ResponseError:
            # the server answered, so the connection itself is fine
            self._mark_connected()
            raise
        self._mark_connected()
        return result

    def format_error(self, exc: BaseException) -> str:
        """Human-friendly rendering of common connection failures."""
        text = str(exc) or type(exc).__name__
        host = urlsplit(self._url).hostname or "unknown"
        url = redact_url(self._url)
        lowered = text.lower()
        if "name or service not known" in lowered or "nodename nor servname" in lowered or "getaddrinfo" in lowered:
            return f"Redis host could not be resolved (host={host}, url={url}). Check INTERNAL_EVENTS_REDIS_URL."
        if "connection refused" in lowered:
            return f"Redis refused the connection (host={host}, url={url}). Ensure Redis is reachable."
        return text

    # ------------------------------------------------------------------
    # Stream primitives
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        return bool(await self._execute(lambda c: c.ping(), single_attempt=True))

    async def xadd(self, stream: str, fields: dict[str, str], *, maxlen: int | None = None) -> str:
        return await self._execute(
            lambda c: c.xadd(stream, fields, maxlen=maxlen, approximate=True)
        )

    async def ensure_group(self, stream: str, group: str) -> bool:
        try:
            await self._execute(
                lambda c: c.xgroup_create(name=stream, groupname=group, id="$", mkstream=True),
                # the consumer loop recreates the group itself; start must not wait out an outage
                single_attempt=True,
            )
        except ResponseError as exc:
            if is_busy_group_error(exc):
                return False
            raise
        logger.info("internal_events.redis.group_created", stream=stream, group=group)
        return True

    async def read_group(
        self,
        stream: str,
        group: str,
        consumer: str,
        *,
        count: int,
        block_ms: int,
    ) -> list[StreamEntry]:
        try:
            response = await self._execute(
                lambda c: c.xreadgroup(
                    groupname=group,
                    consumername=consumer,
                    streams={stream: ">"},
                    count=count,
                    block=block_ms,
                )
            )
        except ResponseError as exc:
            if is_no_group_error(exc):
                raise StreamGroupMissingError(stream, group, cause=exc) from exc
            raise
        return _flatten_read_response(response)

    async def autoclaim(
        self,
        stream: str,
        group: str,
        consumer: str,
        *,
        min_idle_ms: int,
        count: int,
    ) -> list[StreamEntry]:
        try:
            response = await self._execute(
                lambda c: c.xautoclaim(
                    stream, group, consumer, min_idle_ms, start_id="0-0", count=count
                )
            )
        except ResponseError as exc:
            if is_no_group_error(exc):
                raise StreamGroupMissingError(stream, group, cause=exc) from exc
            raise
        if not response:
            return []
        entries: list[StreamEntry] = []
        for entry_id, fields in response[1]:
            if not entry_id:
                # Redis 6.2 may reply with a nil id for an entry deleted while pending
                continue
            if fields is None:
                # entry trimmed away while pending; nothing left to process
                await self.ack(stream, group, entry_id)
                continue
            entries.append((entry_id, dict(fields)))
        return entries

    async def ack(self, stream: str, group: str, entry_id: str) -> int:
        return int(await self._execute(lambda c: c.xack(stream, group, entry_id)))

    # ------------------------------------------------------------------
    # Idempotency / retry bookkeeping
    # ------------------------------------------------------------------

    async def set_if_absent(self, key: str, ttl_seconds: int) -> bool:
        return bool(await self._execute(lambda c: c.set(key, "1", ex=ttl_seconds, nx=True)))

    async def delete(self, key: str) -> None:
        await self._execute(lambda c: c.delete(key))

    async def incr_with_ttl(self, key: str, ttl_seconds: int) -> int:
        async def _incr(client: Any) -> int:
            async with client.pipeline(transaction=True) as pipe:
                count, _ = await pipe.incr(key).expire(key, ttl_seconds).execute()
            return int(count)

        return await self._execute(_incr)


def _flatten_read_response(response: Any) -> list[StreamEntry]:
    """Flatten an XREADGROUP reply ``[[stream, [(id, fields), ...]], ...]``."""
    entries: list[StreamEntry] = []
    for _stream, items in response or []:
        for entry_id, fields in items:
            entries.append((entry_id, dict(fields or {})))
    return entries


__all__ = ["RedisStreamClient", "is_busy_group_error", "is_no_group_error", "redact_url"]
