"""
Pipeline Exceptions

All exceptions raised while building or committing a command pipeline.
"""

from kvpipe.core.exceptions.base import KVPipeError


class PipelineError(KVPipeError):
    """Base exception for pipeline errors."""
    pass


class CommandWriteError(PipelineError):
    """
    Raised when a command cannot be written to the connection.

    The error is sticky: once captured, every later ``add()`` is a no-op and
    ``commit()`` raises it without touching the network.

    Common causes:
    - Argument of a type the wire encoder rejects (None, nested dict, ...)
    - Connection broken while writing
    """
    pass


class CommandError(PipelineError):
    """
    Raised when the store answered one queued command with an error reply.

    Details carry the zero-based ``index`` of the failing command and its ``command`` name.
    """
    pass


class PipelineConnectionError(PipelineError):
    """
    Raised when the transport fails while flushing or reading replies.

    The connection is discarded rather than returned to the pool.
    """
    pass


class PipelineCommittedError(PipelineError):
    """Raised when a pipeline is used again after commit() or discard()."""

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or "Pipeline has already been committed", details=details)
