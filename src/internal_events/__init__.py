"""
internal_events – transactional outbox to Redis Streams relay.

Import path convention::

    from internal_events.config.settings import InternalEventsSettings
    from internal_events.application.events import InternalEventsModule
    from internal_events.kernel.messaging import InternalEvent, InternalEventHandler
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
