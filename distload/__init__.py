"""Distributed load test planning, dispatch and result aggregation."""

__version__ = "0.1.0"
