"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures import ConnectionTestFactory, FakeClock, InMemoryStore  # noqa: E402

# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if a real store should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


@pytest.fixture(scope="session")
def real_redis_address():
    """Address of the store used by integration tests."""
    return os.getenv("KVPIPE_ADDRESS", "localhost:6379")


# ============================================================================
# Fake Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    """Manually advanced monotonic clock shared by pool and health checker."""
    return FakeClock()


@pytest.fixture
def store():
    """
    In-memory store stub.

    Executes the command subset used by the tests and answers with RESP2-shaped replies.
    """
    return InMemoryStore()


@pytest.fixture
def fake_dialer(store, fake_clock):
    """Dialer producing FakeConnections bound to ``store``; records every dial."""
    return ConnectionTestFactory.dialer(store, clock=fake_clock)


@pytest.fixture
def pool_config():
    """Small pool configuration for testing."""
    from kvpipe.core.config.settings import PoolConfig

    return PoolConfig(address="fake:6379", max_active=3, max_idle=2)


@pytest.fixture
def pool(pool_config, fake_dialer, fake_clock):
    """ConnectionPool over fake connections, closed after the test."""
    from kvpipe.core.pool.connection_pool import ConnectionPool

    pool = ConnectionPool(pool_config, dialer=fake_dialer, clock=fake_clock)
    yield pool
    pool.close()


@pytest.fixture
def client(pool):
    """KVClient bound to the fake pool."""
    from kvpipe.client import KVClient

    return KVClient(pool=pool)


@pytest.fixture
def release_log():
    """
    Release callback recording ``(conn, discard)`` calls.

    For driving a Pipeline directly without a pool.
    """

    class ReleaseLog(list):
        def __call__(self, conn, discard):
            self.append((conn, discard))

    return ReleaseLog()
