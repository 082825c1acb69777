from __future__ import annotations

from typing import Any

from internal_events.kernel.errors import describe_error
from internal_events.kernel.messaging import StreamBroker
from internal_events.observability.health.registry import HealthCheck, HealthStatus

__all__ = ["InternalEventsHealthCheck", "OutboxDatabaseHealthCheck"]


class InternalEventsHealthCheck(HealthCheck):
    """Ready when the feature is enabled, connected, and answers PING."""

    def __init__(self, broker: StreamBroker) -> None:
        self._broker = broker

    @property
    def name(self) -> str:
        return "internal_events"

    async def check(self) -> HealthStatus:
        if not self._broker.is_ready():
            return HealthStatus(healthy=False, detail="broker not ready")
        try:
            await self._broker.ping()
            return HealthStatus(healthy=True)
        except Exception as exc:  # noqa: BLE001
            return HealthStatus(healthy=False, detail=describe_error(exc))


class OutboxDatabaseHealthCheck(HealthCheck):
    """Checks outbox database connectivity by running ``SELECT 1``."""

    def __init__(self, session_factory: Any) -> None:
        self._factory = session_factory

    @property
    def name(self) -> str:
        return "outbox_database"

    async def check(self) -> HealthStatus:
        from sqlalchemy import text

        try:
            async with self._factory() as session:
                await session.execute(text("SELECT 1"))
            return HealthStatus(healthy=True)
        except Exception as exc:  # noqa: BLE001
            return HealthStatus(healthy=False, detail=describe_error(exc))
