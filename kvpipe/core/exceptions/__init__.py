"""
Exception Module

Structured exception hierarchy for the client.
All exceptions are organized by theme.

Module Structure:
-----------------
- **base.py**: KVPipeError base class + ConfigurationError
- **connection_pool.py**: Dial, closed-pool and exhausted-pool errors
- **pipeline.py**: Write, store-reply, transport and misuse errors of a pipeline
- **decoding.py**: Reply-to-destination type mismatches

Usage:
------
```python
from kvpipe.core.exceptions import CommandError, PoolClosedError

from kvpipe.core.exceptions.connection_pool import DialError
```
"""

# Base exception
from kvpipe.core.exceptions.base import ConfigurationError, KVPipeError

# Connection Pool exceptions
from kvpipe.core.exceptions.connection_pool import (
    ConnectionPoolError,
    DialError,
    PoolClosedError,
    PoolExhaustedError,
)

# Decoding exceptions
from kvpipe.core.exceptions.decoding import ReplyDecodeError

# Pipeline exceptions
from kvpipe.core.exceptions.pipeline import (
    CommandError,
    CommandWriteError,
    PipelineCommittedError,
    PipelineConnectionError,
    PipelineError,
)

__all__ = [
    # Base
    "KVPipeError",
    "ConfigurationError",
    # Connection Pool
    "ConnectionPoolError",
    "DialError",
    "PoolClosedError",
    "PoolExhaustedError",
    # Pipeline
    "PipelineError",
    "CommandWriteError",
    "CommandError",
    "PipelineConnectionError",
    "PipelineCommittedError",
    # Decoding
    "ReplyDecodeError",
]
