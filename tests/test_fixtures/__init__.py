"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .connection_factory import ConnectionTestFactory, FakeClock, FakeConnection, InMemoryStore

__all__ = ["ConnectionTestFactory", "FakeClock", "FakeConnection", "InMemoryStore"]
