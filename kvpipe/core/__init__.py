"""
Core Module

Foundational components: configuration, logging, exceptions and connection pooling.
"""

from .exceptions import (
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
from .logging import (
    bind_log_context,
    clear_log_context,
    get_logger,
    setup_logging,
)

__all__ = [
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
    "bind_log_context",
    "clear_log_context",
    "get_logger",
    "setup_logging",
]
