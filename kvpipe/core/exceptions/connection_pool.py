"""
Connection Pool Exception Types.

Custom exceptions for connection acquisition and dialing.
"""

from kvpipe.core.exceptions.base import KVPipeError


class ConnectionPoolError(KVPipeError):
    """Base exception for connection pool errors."""

    def __init__(self, message: str = "Connection pool error", details: dict | None = None):
        super().__init__(message=message, details=details)


class DialError(ConnectionPoolError):
    """
    Raised when a new connection cannot be established.

    The pool stays usable; the caller may retry the borrow.

    Common causes:
    - Server is down or address is wrong
    - Connect timeout elapsed
    - Authentication or database selection rejected
    """

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message=message or "Failed to dial store connection", details=details)


class PoolClosedError(ConnectionPoolError):
    """Raised when acquiring from a pool that has been closed."""

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message=message or "Connection pool is closed", details=details)


class PoolExhaustedError(ConnectionPoolError):
    """Raised when the pool is at capacity and the caller refused to wait (or the wait timed out)."""

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(
            message=message or "Connection pool exhausted - all connections are in use",
            details=details
        )
