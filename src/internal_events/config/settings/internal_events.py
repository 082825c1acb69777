"""Config settings – InternalEventsSettings.

One explicit struct built at startup and handed to every component; nothing
on the hot path reads the environment.

    settings = EnvSettingsLoader().load(InternalEventsSettings)
"""
from __future__ import annotations

import dataclasses

from internal_events.config.settings.base import Settings
from internal_events.config.validation import InvalidSettingValueError

DEFAULT_SERVICE_NAME = "app"
DEFAULT_STREAM_NAME = "internal-events"
DEFAULT_DLQ_STREAM_NAME = "internal-events:dlq"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"

# field name -> inclusive lower bound, checked only while enabled
_MINIMUMS: dict[str, int] = {
    "dispatch_interval_ms": 0,
    "dispatch_batch_size": 1,
    "outbox_retention_days": 1,
    "sweep_interval_seconds": 0,
    # XREADGROUP BLOCK 0 waits forever and would never observe shutdown
    "consumer_block_ms": 1,
    "consumer_count": 1,
    "idempotency_ttl_seconds": 1,
    "max_retries": 0,
    "pending_claim_after_ms": 0,
    "stream_trim_max_len": 0,
    "redis_retry_step_ms": 0,
    "redis_retry_max_ms": 0,
    "redis_max_retries_per_request": -1,
}

# tunables forced to zero when the feature is off
_DISABLED_OVERRIDES: dict[str, int] = {
    "dispatch_interval_ms": 0,
    "dispatch_batch_size": 0,
    "consumer_block_ms": 0,
    "consumer_count": 0,
}


@dataclasses.dataclass
class InternalEventsSettings(Settings):
    """Settings for the outbox dispatcher and the stream consumer."""

    _prefix: dataclasses.ClassVar[str] = "INTERNAL_EVENTS"

    enable: bool = False
    service_name: str = DEFAULT_SERVICE_NAME
    stream_name: str = DEFAULT_STREAM_NAME
    dlq_stream_name: str = DEFAULT_DLQ_STREAM_NAME
    redis_url: str = DEFAULT_REDIS_URL
    dispatch_interval_ms: int = 1000
    dispatch_batch_size: int = 100
    outbox_retention_days: int = 7
    sweep_interval_seconds: int = 3600
    consumer_block_ms: int = 5000
    consumer_count: int = 10
    idempotency_ttl_seconds: int = 86400
    max_retries: int = 5
    pending_claim_after_ms: int = 60000
    stream_trim_max_len: int = 100000
    redis_retry_step_ms: int = 1000
    redis_retry_max_ms: int = 30000
    redis_max_retries_per_request: int = -1

    def _validate(self) -> None:
        if not self.enable:
            for name, value in _DISABLED_OVERRIDES.items():
                setattr(self, name, value)
            return
        for name in ("service_name", "stream_name", "redis_url"):
            if not getattr(self, name):
                raise InvalidSettingValueError(name, getattr(self, name), "must not be empty")
        for name, minimum in _MINIMUMS.items():
            value = getattr(self, name)
            if value < minimum:
                raise InvalidSettingValueError(name, value, f"must be >= {minimum}")

    @property
    def dlq_enabled(self) -> bool:
        return bool(self.dlq_stream_name)

    @property
    def trim_max_len(self) -> int | None:
        """Approximate MAXLEN for stream appends, ``None`` when trimming is off."""
        return self.stream_trim_max_len or None


__all__ = [
    "DEFAULT_DLQ_STREAM_NAME",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SERVICE_NAME",
    "DEFAULT_STREAM_NAME",
    "InternalEventsSettings",
]
