"""
Connection pooling: the pooled ``Connection``, the borrow-time
``HealthChecker`` and the bounded ``ConnectionPool``.
"""

from kvpipe.core.pool.connection import Connection, dial
from kvpipe.core.pool.connection_pool import ConnectionPool
from kvpipe.core.pool.health_checker import HealthChecker

__all__ = [
    "Connection",
    "ConnectionPool",
    "HealthChecker",
    "dial",
]
