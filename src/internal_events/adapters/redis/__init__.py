"""Redis adapter – Redis Streams broker client."""
from internal_events.adapters.redis.backoff import StepBackoff
from internal_events.adapters.redis.client import RedisStreamClient, redact_url

__all__ = ["RedisStreamClient", "StepBackoff", "redact_url"]
