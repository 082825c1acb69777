"""Redis adapter – StepBackoff reconnect strategy."""
from __future__ import annotations

from redis.backoff import AbstractBackoff

MIN_STEP_MS = 1000


class StepBackoff(AbstractBackoff):
    """Delay grows linearly per failure and is capped.

    ``delay = min(failures * step_ms, max_ms)`` with ``step_ms`` clamped to at
    least one second and ``max_ms`` to at least one step.
    """

    def __init__(self, step_ms: int, max_ms: int) -> None:
        self._step_ms = max(step_ms, MIN_STEP_MS)
        self._max_ms = max(max_ms, self._step_ms)

    @property
    def step_ms(self) -> int:
        return self._step_ms

    @property
    def max_ms(self) -> int:
        return self._max_ms

    def reset(self) -> None:
        pass

    def compute(self, failures: int) -> float:
        return min(max(failures, 1) * self._step_ms, self._max_ms) / 1000


__all__ = ["StepBackoff"]
