"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── ApplicationError          (application.py)
    │   └── EventsDisabledError
    └── InfrastructureError       (infrastructure.py)
        ├── ConnectionError
        ├── SerializationError
        └── StreamGroupMissingError
"""

from internal_events.kernel.errors.application import ApplicationError, EventsDisabledError
from internal_events.kernel.errors.base import BaseError, describe_error
from internal_events.kernel.errors.infrastructure import (
    ConnectionError,
    InfrastructureError,
    SerializationError,
    StreamGroupMissingError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConnectionError",
    "EventsDisabledError",
    "InfrastructureError",
    "SerializationError",
    "StreamGroupMissingError",
    "describe_error",
]
