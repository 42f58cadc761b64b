"""
Client Constants and Enumerations

This module defines library-wide constants and enumerations used across
the pool and pipeline layers.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for default pool shape and timeouts
- Type-safe enums for state reporting
- Stage identifiers shared by every log line
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Processing stages used as the ``stage`` field of log events.

    Format: {PREFIX}.{SEQUENCE}_{DESCRIPTIVE_NAME}
    - PREFIX: component (DIAL, POOL, HC, PIPE)
    - SEQUENCE: order of the step inside the component
    """

    DIAL = "DIAL.1_CONNECT"
    DIAL_FAILED = "DIAL.ERROR"

    POOL_INIT = "POOL.0_INITIALIZATION"
    POOL_ACQUIRE = "POOL.1_ACQUIRE"
    POOL_WAIT = "POOL.2_WAIT_FOR_CAPACITY"
    POOL_EVICT = "POOL.3_EVICT"
    POOL_RELEASE = "POOL.4_RELEASE"
    POOL_CLOSE = "POOL.5_CLOSE"

    HEALTH_CHECK = "HC.1_HEALTH_CHECK"
    HEALTH_PROBE_FAILED = "HC.2_PROBE_FAILED"

    PIPELINE_WRITE = "PIPE.1_WRITE"
    PIPELINE_COMMIT = "PIPE.2_COMMIT"
    PIPELINE_DRAIN = "PIPE.3_DRAIN"
    PIPELINE_ERROR = "PIPE.ERROR"


# ============================================================================
# Pool States
# ============================================================================


class PoolState(str, Enum):
    """Connection pool utilization states."""

    HEALTHY = "healthy"          # < 70% of max active borrowed
    DEGRADED = "degraded"        # 70-90%
    CRITICAL = "critical"        # 90-100%
    EXHAUSTED = "exhausted"      # every slot borrowed


POOL_DEGRADED_THRESHOLD = 0.7
POOL_CRITICAL_THRESHOLD = 0.9

# ============================================================================
# Network
# ============================================================================

NETWORK_TCP = "tcp"
NETWORK_UNIX = "unix"

DEFAULT_NETWORK = NETWORK_TCP
DEFAULT_ADDRESS = "localhost:6379"
DEFAULT_PORT = 6379

# ============================================================================
# Timeouts (seconds)
# ============================================================================

DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 5.0
DEFAULT_WRITE_TIMEOUT = 5.0
DEFAULT_KEEP_ALIVE = 300.0

# Idle connections younger than keep-alive minus this margin skip the PING probe
DEFAULT_HEALTH_CHECK_MARGIN = 1.0

# ============================================================================
# Pool Shape
# ============================================================================

DEFAULT_MAX_IDLE = 10
DEFAULT_MAX_ACTIVE = 10
DEFAULT_IDLE_TIMEOUT = 60.0
DEFAULT_MAX_CONN_LIFETIME = 120.0

# ============================================================================
# Wire Protocol
# ============================================================================

PING_COMMAND = "PING"
DEFAULT_ENCODING = "utf-8"
