"""
kvpipe - pooled, pipelined client for Redis-compatible stores.

Borrow a pipeline from a bounded, health-checked connection pool, chain
commands with typed reply destinations, and commit them in one round trip.

    from kvpipe import KVClient, PoolConfig, Reply

    with KVClient(PoolConfig(address="localhost:6379")) as client:
        ok, value = Reply(str), Reply(int)
        client.borrow().set(ok, "k", 9).get(value, "k").commit()
"""

from kvpipe.client import KVClient
from kvpipe.core.config.settings import PoolConfig, Settings, get_settings
from kvpipe.core.exceptions import (
    CommandError,
    CommandWriteError,
    ConfigurationError,
    ConnectionPoolError,
    DialError,
    KVPipeError,
    PipelineCommittedError,
    PipelineConnectionError,
    PipelineError,
    PoolClosedError,
    PoolExhaustedError,
    ReplyDecodeError,
)
from kvpipe.core.logging import setup_logging
from kvpipe.core.pool import Connection, ConnectionPool, HealthChecker
from kvpipe.pipeline import Pipeline, Reply, StreamEntry, StreamReply

__version__ = "1.0.0"

__all__ = [
    "KVClient",
    "PoolConfig",
    "Settings",
    "get_settings",
    "setup_logging",
    "Connection",
    "ConnectionPool",
    "HealthChecker",
    "Pipeline",
    "Reply",
    "StreamEntry",
    "StreamReply",
    "KVPipeError",
    "ConfigurationError",
    "ConnectionPoolError",
    "DialError",
    "PoolClosedError",
    "PoolExhaustedError",
    "PipelineError",
    "CommandWriteError",
    "CommandError",
    "PipelineConnectionError",
    "PipelineCommittedError",
    "ReplyDecodeError",
]
