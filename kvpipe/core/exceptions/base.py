"""
Base Exception Class

This module contains ONLY the base exception class that all other exceptions inherit from.
All specialized exceptions are in their respective themed modules.
"""

from typing import Any


class KVPipeError(Exception):
    """
    Base exception for all client errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling (``except KVPipeError``)
    - Structured error logging
    - Rich context for debugging

    Attributes:
        message: Error message
        details: Additional error details (dict)

    Example:
        raise DialError(
            "Failed to connect to localhost:6379",
            details={
                "network": "tcp",
                "address": "localhost:6379",
            }
        )
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = (details or {}).copy()  # Create a copy to prevent external modification
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def with_context(self, **context) -> "KVPipeError":
        """
        Add additional context to the error details.

        Args:
            **context: Key-value pairs to add to details

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        """
        Return detailed string representation for debugging.

        Example:
            >>> error = CommandError("ERR unknown command", details={"index": 2})
            >>> repr(error)
            "CommandError(message='ERR unknown command', details={'index': 2})"
        """
        details_str = f", details={self.details}" if self.details else ""
        return f"{self.__class__.__name__}(message='{self.message}'{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        **details
    ) -> "KVPipeError":
        """
        Create an error from another exception.

        Useful for wrapping redis-py and socket exceptions with additional context.
        Callers should still chain with ``raise ... from exc``.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            **details: Additional context to include

        Example:
            >>> try:
            ...     transport.connect()
            ... except redis.exceptions.ConnectionError as e:
            ...     raise DialError.from_exception(e, address="localhost:6379") from e
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, details=error_details)


# Configuration exception (kept here as it's fundamental)
class ConfigurationError(KVPipeError):
    """Raised when configuration is invalid or missing."""
    pass
