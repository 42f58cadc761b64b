"""
Reply Decoding Exceptions
"""

from kvpipe.core.exceptions.base import KVPipeError


class ReplyDecodeError(KVPipeError):
    """
    Raised when a reply cannot be represented by its destination type.

    Example:
        decoding the status reply ``PONG`` into an ``int`` destination.
    """
    pass
