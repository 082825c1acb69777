from internal_events.observability.health.builtin import (
    InternalEventsHealthCheck,
    OutboxDatabaseHealthCheck,
)
from internal_events.observability.health.registry import (
    HealthCheck,
    HealthRegistry,
    HealthReport,
    HealthStatus,
)

__all__ = [
    "HealthCheck",
    "HealthRegistry",
    "HealthReport",
    "HealthStatus",
    "InternalEventsHealthCheck",
    "OutboxDatabaseHealthCheck",
]
