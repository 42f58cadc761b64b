"""
Unit Tests for Configuration Constants

Tests the default values and enumerations.
"""

import pytest

from kvpipe.core.config.constants import (
    DEFAULT_ADDRESS,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_KEEP_ALIVE,
    DEFAULT_MAX_ACTIVE,
    DEFAULT_MAX_CONN_LIFETIME,
    DEFAULT_MAX_IDLE,
    DEFAULT_NETWORK,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
    POOL_CRITICAL_THRESHOLD,
    POOL_DEGRADED_THRESHOLD,
    PoolState,
    Stage,
)


@pytest.mark.unit
class TestDefaults:
    """Test documented default values."""

    def test_network_defaults(self):
        """Test default network and address."""
        assert DEFAULT_NETWORK == "tcp"
        assert DEFAULT_ADDRESS == "localhost:6379"

    def test_timeout_defaults(self):
        """Test default timeouts."""
        assert DEFAULT_CONNECT_TIMEOUT == 5
        assert DEFAULT_READ_TIMEOUT == 5
        assert DEFAULT_WRITE_TIMEOUT == 5
        assert DEFAULT_KEEP_ALIVE == 300

    def test_pool_shape_defaults(self):
        """Test default pool shape."""
        assert DEFAULT_MAX_IDLE == 10
        assert DEFAULT_MAX_ACTIVE == 10
        assert DEFAULT_IDLE_TIMEOUT == 60
        assert DEFAULT_MAX_CONN_LIFETIME == 120


@pytest.mark.unit
class TestEnums:
    """Test enumerations."""

    def test_stage_values_are_unique(self):
        """Test that every stage has a distinct identifier."""
        values = [stage.value for stage in Stage]
        assert len(set(values)) == len(values)

    def test_stage_is_str(self):
        """Test that stages serialize as plain strings in log events."""
        assert Stage.POOL_ACQUIRE == "POOL.1_ACQUIRE"

    def test_pool_state_values(self):
        """Test pool state string values."""
        assert {state.value for state in PoolState} == {"healthy", "degraded", "critical", "exhausted"}

    def test_thresholds_are_ordered(self):
        """Test degraded threshold sits below critical threshold."""
        assert 0 < POOL_DEGRADED_THRESHOLD < POOL_CRITICAL_THRESHOLD < 1
