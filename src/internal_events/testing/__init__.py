"""Testing support – fakes and pytest fixtures.

Import in your ``conftest.py``::

    pytest_plugins = ["internal_events.testing.fixtures"]
"""

from internal_events.testing.fakes import FakeClock, FakeStreamBroker, InMemoryOutboxStore

__all__ = ["FakeClock", "FakeStreamBroker", "InMemoryOutboxStore"]
