"""
Command Options

Each option family is a closed set of small frozen dataclasses sharing a
family base class. Every variant expands itself to an ordered list of wire
tokens via ``to_args()``; the pipeline appends those tokens, in the order
the options were given, after the command's mandatory arguments.

Adding a new option means adding a variant here; the pool and pipeline are
untouched.

Usage:
    pipe.set(reply, "session:42", token, SetNX(), SetEX(3600))
    pipe.xreadgroup(reply, "workers", "w-1", ["jobs"], [">"], XReadGroupCount(10), XReadGroupBlock(500))
"""

from collections.abc import Iterable
from dataclasses import dataclass


class CommandOption:
    """Base class of every option variant."""

    def to_args(self) -> list:
        raise NotImplementedError


def expand_options(family: type[CommandOption], options: Iterable[CommandOption]) -> list:
    """
    Flatten options into wire tokens, preserving their order.

    Raises:
        TypeError: An option does not belong to ``family``
    """
    args: list = []
    for option in options:
        if not isinstance(option, family):
            raise TypeError(
                f"{type(option).__name__} is not a {family.__name__}"
            )
        args.extend(option.to_args())
    return args


# ============================================================================
# SET
# ============================================================================


class SetOption(CommandOption):
    """Options accepted by SET."""


@dataclass(frozen=True)
class SetEX(SetOption):
    """Expire after ``seconds``."""

    seconds: int

    def to_args(self) -> list:
        return ["EX", self.seconds]


@dataclass(frozen=True)
class SetPX(SetOption):
    """Expire after ``milliseconds``."""

    milliseconds: int

    def to_args(self) -> list:
        return ["PX", self.milliseconds]


@dataclass(frozen=True)
class SetNX(SetOption):
    """Only set the key if it does not already exist."""

    def to_args(self) -> list:
        return ["NX"]


@dataclass(frozen=True)
class SetXX(SetOption):
    """Only set the key if it already exists."""

    def to_args(self) -> list:
        return ["XX"]


@dataclass(frozen=True)
class SetKeepTTL(SetOption):
    """Retain the time to live associated with the key."""

    def to_args(self) -> list:
        return ["KEEPTTL"]


@dataclass(frozen=True)
class SetGet(SetOption):
    """Return the old value stored at key instead of OK."""

    def to_args(self) -> list:
        return ["GET"]


# ============================================================================
# EXPIRE
# ============================================================================


class ExpireOption(CommandOption):
    """Options accepted by EXPIRE."""


@dataclass(frozen=True)
class ExpireNX(ExpireOption):
    """Set expiry only when the key has no expiry."""

    def to_args(self) -> list:
        return ["NX"]


@dataclass(frozen=True)
class ExpireXX(ExpireOption):
    """Set expiry only when the key has an existing expiry."""

    def to_args(self) -> list:
        return ["XX"]


@dataclass(frozen=True)
class ExpireGT(ExpireOption):
    """Set expiry only when the new expiry is greater than the current one."""

    def to_args(self) -> list:
        return ["GT"]


@dataclass(frozen=True)
class ExpireLT(ExpireOption):
    """Set expiry only when the new expiry is less than the current one."""

    def to_args(self) -> list:
        return ["LT"]


# ============================================================================
# FLUSHALL
# ============================================================================


class FlushAllOption(CommandOption):
    """Options accepted by FLUSHALL."""


@dataclass(frozen=True)
class FlushAllAsync(FlushAllOption):
    def to_args(self) -> list:
        return ["ASYNC"]


@dataclass(frozen=True)
class FlushAllSync(FlushAllOption):
    def to_args(self) -> list:
        return ["SYNC"]


# ============================================================================
# XADD
# ============================================================================


class XAddOption(CommandOption):
    """Options accepted by XADD (placed before the entry id)."""


@dataclass(frozen=True)
class XAddNoMkStream(XAddOption):
    """Do not create the stream if it does not exist."""

    def to_args(self) -> list:
        return ["NOMKSTREAM"]


@dataclass(frozen=True)
class XAddMaxLen(XAddOption):
    """Trim the stream to ``count`` entries (``~`` when approximate)."""

    count: int
    approximate: bool = False

    def to_args(self) -> list:
        return ["MAXLEN", "~" if self.approximate else "=", self.count]


# ============================================================================
# XGROUP CREATE
# ============================================================================


class XGroupCreateOption(CommandOption):
    """Options accepted by XGROUP CREATE."""


@dataclass(frozen=True)
class XGroupCreateMkStream(XGroupCreateOption):
    """Create the stream if it does not exist."""

    def to_args(self) -> list:
        return ["MKSTREAM"]


# ============================================================================
# XREADGROUP
# ============================================================================


class XReadGroupOption(CommandOption):
    """Options accepted by XREADGROUP (placed before the STREAMS clause)."""


@dataclass(frozen=True)
class XReadGroupCount(XReadGroupOption):
    """Return at most ``count`` entries per stream."""

    count: int

    def to_args(self) -> list:
        return ["COUNT", self.count]


@dataclass(frozen=True)
class XReadGroupBlock(XReadGroupOption):
    """
    Block up to ``milliseconds`` waiting for entries.

    The connection's read timeout must exceed the block time.
    """

    milliseconds: int

    def to_args(self) -> list:
        return ["BLOCK", self.milliseconds]


@dataclass(frozen=True)
class XReadGroupNoAck(XReadGroupOption):
    """Do not add delivered entries to the pending entries list."""

    def to_args(self) -> list:
        return ["NOACK"]
