"""Smoke tests for database container images."""

__version__ = "0.1.0"
