"""Testing fixtures – pytest fixtures for fake doubles.

Enable in your ``conftest.py``::

    pytest_plugins = ["internal_events.testing.fixtures"]
"""
from internal_events.testing.fixtures.events import (
    enabled_settings,
    fake_broker,
    fake_clock,
    outbox_store,
)

__all__ = ["enabled_settings", "fake_broker", "fake_clock", "outbox_store"]
