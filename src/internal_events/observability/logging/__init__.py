"""Observability – structured logging helpers."""
from internal_events.observability.logging.factory import JsonLoggerFactory
from internal_events.observability.logging.processors import get_logger
from internal_events.observability.logging.suppressed import ErrorStormSuppressor

__all__ = ["ErrorStormSuppressor", "JsonLoggerFactory", "get_logger"]
