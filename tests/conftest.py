"""Shared fixtures: fake broker, in-memory outbox, frozen clock, enabled settings."""
from internal_events.testing.fixtures import (  # noqa: F401
    enabled_settings,
    fake_broker,
    fake_clock,
    outbox_store,
)
