"""Observability – ErrorStormSuppressor.

Wraps a logger so that a broker outage produces one error line instead of
one per failed command. Identical messages inside the window are counted
instead of logged; the count is reported once when the message changes or
when :meth:`flush` is called after recovery.
"""
from __future__ import annotations

import time
from typing import Any, Callable


class ErrorStormSuppressor:
    """Deduplicates repeated error messages within a time window.

    Parameters
    ----------
    logger:
        structlog (or stdlib-compatible) logger receiving the output.
    window_seconds:
        Identical messages logged less than this long after the last emitted
        one are suppressed. Defaults to 30 seconds.
    clock:
        Monotonic time source, injectable for tests.

    Example
    -------
    ::

        storm = ErrorStormSuppressor(get_logger(__name__))
        storm.error("redis.error", "Connection refused")   # logged
        storm.error("redis.error", "Connection refused")   # counted
        storm.flush("redis.error")                         # "... repeated 1 times"
    """

    def __init__(
        self,
        logger: Any,
        window_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._window = window_seconds
        self._clock = clock
        self._last_message: str | None = None
        self._last_at = 0.0
        self._suppressed = 0

    @property
    def suppressed_count(self) -> int:
        return self._suppressed

    def error(self, event: str, message: str, **kwargs: Any) -> bool:
        """Log *message* unless it repeats the last one within the window.

        Returns ``True`` when the record was emitted.
        """
        now = self._clock()
        if message == self._last_message and now - self._last_at < self._window:
            self._suppressed += 1
            return False
        repeated = self._suppressed
        self._suppressed = 0
        self._last_message = message
        self._last_at = now
        if repeated:
            self._logger.warning(f"{event}.suppressed", repeated=repeated)
        self._logger.error(event, error=message, **kwargs)
        return True

    def flush(self, event: str) -> None:
        """Report pending suppressed repeats and forget the last message."""
        repeated = self._suppressed
        self._suppressed = 0
        self._last_message = None
        if repeated:
            self._logger.warning(f"{event}.suppressed", repeated=repeated)


__all__ = ["ErrorStormSuppressor"]
