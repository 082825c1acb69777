"""Unit tests for observability health checks."""
import asyncio

from internal_events.kernel.errors import ConnectionError
from internal_events.observability.health import (
    HealthCheck,
    HealthRegistry,
    HealthReport,
    HealthStatus,
    InternalEventsHealthCheck,
)
from internal_events.testing.fakes import FakeStreamBroker


class _OkCheck(HealthCheck):
    @property
    def name(self) -> str:
        return "ok_check"

    async def check(self) -> HealthStatus:
        return HealthStatus(healthy=True, detail="all good")


class _RaisingCheck(HealthCheck):
    @property
    def name(self) -> str:
        return "raising_check"

    async def check(self) -> HealthStatus:
        raise RuntimeError("boom")


class TestHealthRegistry:
    def test_empty_registry_is_healthy(self) -> None:
        report = asyncio.run(HealthRegistry().run_all())
        assert report.overall is True
        assert report.results == {}

    def test_exception_marks_unhealthy(self) -> None:
        registry = HealthRegistry([_OkCheck()])
        registry.register(_RaisingCheck())
        report = asyncio.run(registry.run_all())
        assert report.overall is False
        assert report.results["ok_check"].healthy is True
        assert "boom" in (report.results["raising_check"].detail or "")

    def test_latency_recorded(self) -> None:
        report = asyncio.run(HealthRegistry([_OkCheck()]).run_all())
        assert report.results["ok_check"].latency_ms >= 0

    def test_to_dict(self) -> None:
        report = HealthReport(results={"a": HealthStatus(healthy=True, latency_ms=1.234)})
        assert report.to_dict() == {
            "healthy": True,
            "checks": {"a": {"healthy": True, "detail": None, "latency_ms": 1.23}},
        }


class TestInternalEventsHealthCheck:
    def test_not_connected_is_unhealthy(self) -> None:
        status = asyncio.run(InternalEventsHealthCheck(FakeStreamBroker()).check())
        assert status.healthy is False
        assert status.detail == "broker not ready"

    def test_connected_and_pinging_is_healthy(self) -> None:
        async def run() -> HealthStatus:
            broker = FakeStreamBroker()
            await broker.connect()
            return await InternalEventsHealthCheck(broker).check()

        assert asyncio.run(run()).healthy is True

    def test_ping_failure_is_unhealthy(self) -> None:
        async def run() -> HealthStatus:
            broker = FakeStreamBroker()
            await broker.connect()
            broker.fail_next("ping", ConnectionError("redis", "connection refused"))
            return await InternalEventsHealthCheck(broker).check()

        status = asyncio.run(run())
        assert status.healthy is False
        assert status.detail == "connection refused"

    def test_name(self) -> None:
        assert InternalEventsHealthCheck(FakeStreamBroker()).name == "internal_events"
