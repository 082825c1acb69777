"""Kernel – errors, messaging primitives and ports, time."""
