"""Observability – structured logging and health checks."""
