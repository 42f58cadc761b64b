"""
Reply Decoding

Turns raw wire replies (as produced by redis-py's RESP2 parser: ``bytes``,
``int``, nested ``list``, ``None``) into the Python type a caller asked for.

A caller hands the pipeline a ``Reply`` slot per command:

    counter = Reply(int)
    names = Reply(list[str])
    streams = Reply(list[StreamReply])

Supported destination kinds:
- ``str``, ``bytes``, ``int``, ``float``, ``bool``
- ``list[T]``, ``tuple[T, ...]``, ``tuple[A, B]``, ``set[T]``, ``dict[K, V]``
  (dicts decode from flat field/value arrays)
- ``X | None``
- pydantic models (decoded from flat field/value arrays)
- any class exposing a ``from_reply(reply)`` classmethod
- ``Any`` / ``None`` / ``object``: the raw reply, untouched

A nil reply leaves the kind's zero value (``""``, ``0``, ``[]``, ...; ``None``
for models and hook types).
"""

import types
from typing import Any, Generic, Protocol, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError
from redis.exceptions import ResponseError

from kvpipe.core.config.constants import DEFAULT_ENCODING
from kvpipe.core.exceptions import CommandError, ReplyDecodeError

T = TypeVar("T")

_TRUE_STRINGS = {"1", "t", "true"}
_FALSE_STRINGS = {"0", "f", "false"}


class ReplyDecodable(Protocol):
    """Hook for user types that decode themselves from a wire reply."""

    @classmethod
    def from_reply(cls, reply: Any) -> Any:
        ...


def zero_value(kind: Any) -> Any:
    """Value a destination holds before (or instead of) a successful decode."""
    if kind is str:
        return ""
    if kind is bytes:
        return b""
    if kind is bool:
        return False
    if kind is int:
        return 0
    if kind is float:
        return 0.0
    origin = get_origin(kind) or kind
    if origin is list:
        return []
    if origin is tuple:
        return ()
    if origin is set:
        return set()
    if origin is dict:
        return {}
    return None


class Reply(Generic[T]):
    """
    Typed destination for one queued command.

    ``value`` starts at the zero value of ``kind`` and is written only when
    the command's reply decodes successfully.
    """

    def __init__(self, kind: Any = Any):
        self.kind = kind
        self.value: T = zero_value(kind)
        self.filled = False

    def fill(self, raw: Any) -> None:
        self.value = decode(raw, self.kind)
        self.filled = True

    def __repr__(self) -> str:
        return f"Reply({_kind_name(self.kind)}, value={self.value!r}, filled={self.filled})"


def decode(reply: Any, kind: Any = Any) -> Any:
    """
    Decode one wire reply into ``kind``.

    Raises:
        ReplyDecodeError: The reply's shape cannot be represented by ``kind``
        CommandError: The reply (or a nested element) is a store error
    """
    if isinstance(reply, ResponseError):
        raise CommandError.from_exception(reply)

    if kind is Any or kind is None or kind is object:
        return reply

    if reply is None:
        return zero_value(kind)

    hook = getattr(kind, "from_reply", None)
    if callable(hook):
        try:
            return hook(reply)
        except (ReplyDecodeError, CommandError):
            raise
        except (TypeError, ValueError, IndexError, KeyError, AttributeError) as e:
            raise _mismatch(reply, kind, str(e)) from e

    origin = get_origin(kind)
    if origin is Union or origin is types.UnionType:
        return _decode_union(reply, kind)
    if origin is not None:
        return _decode_container(reply, kind, origin, get_args(kind))

    if kind is str:
        return _to_text(reply, kind)
    if kind is bytes:
        return _to_bytes(reply, kind)
    if kind is bool:
        return _to_bool(reply, kind)
    if kind is int:
        return _to_int(reply, kind)
    if kind is float:
        return _to_float(reply, kind)
    if kind in (list, tuple, set, dict):
        return _decode_container(reply, kind, kind, ())
    if isinstance(kind, type) and issubclass(kind, BaseModel):
        return _to_model(reply, kind)

    raise ReplyDecodeError(
        f"Unsupported destination type {_kind_name(kind)}",
        details={"kind": _kind_name(kind)}
    )


def pairs_to_dict(reply: Any, key_kind: Any = str, value_kind: Any = str) -> dict:
    """
    Decode a flat ``[field, value, field, value, ...]`` array into a dict.

    Useful inside custom ``from_reply`` hooks (hash and stream field lists).
    """
    if isinstance(reply, dict):
        items = reply.items()
    elif isinstance(reply, (list, tuple)):
        if len(reply) % 2:
            raise _mismatch(reply, dict, "odd number of elements in field/value array")
        items = zip(reply[::2], reply[1::2])
    else:
        raise _mismatch(reply, dict)
    try:
        return {decode(k, key_kind): decode(v, value_kind) for k, v in items}
    except TypeError as e:
        raise _mismatch(reply, dict, str(e)) from e


# =========================================================================
# Scalar conversions
# =========================================================================


def _to_text(reply: Any, kind: Any) -> str:
    if isinstance(reply, bytes):
        try:
            return reply.decode(DEFAULT_ENCODING)
        except UnicodeDecodeError as e:
            raise _mismatch(reply, kind, str(e)) from e
    if isinstance(reply, str):
        return reply
    if isinstance(reply, (int, float)) and not isinstance(reply, bool):
        return str(reply)
    raise _mismatch(reply, kind)


def _to_bytes(reply: Any, kind: Any) -> bytes:
    if isinstance(reply, bytes):
        return reply
    if isinstance(reply, str):
        return reply.encode(DEFAULT_ENCODING)
    if isinstance(reply, int) and not isinstance(reply, bool):
        return str(reply).encode()
    raise _mismatch(reply, kind)


def _to_int(reply: Any, kind: Any) -> int:
    if isinstance(reply, int):
        return int(reply)
    if isinstance(reply, (bytes, str)):
        try:
            return int(_to_text(reply, kind).strip())
        except ValueError as e:
            raise _mismatch(reply, kind) from e
    raise _mismatch(reply, kind)


def _to_float(reply: Any, kind: Any) -> float:
    if isinstance(reply, (int, float)):
        return float(reply)
    if isinstance(reply, (bytes, str)):
        try:
            return float(_to_text(reply, kind).strip())
        except ValueError as e:
            raise _mismatch(reply, kind) from e
    raise _mismatch(reply, kind)


def _to_bool(reply: Any, kind: Any) -> bool:
    if isinstance(reply, int):
        return reply != 0
    if isinstance(reply, (bytes, str)):
        text = _to_text(reply, kind).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise _mismatch(reply, kind)


# =========================================================================
# Composite conversions
# =========================================================================


def _decode_container(reply: Any, kind: Any, origin: Any, args: tuple) -> Any:
    if origin is dict:
        key_kind, value_kind = args if len(args) == 2 else (Any, Any)
        return pairs_to_dict(reply, key_kind, value_kind)

    if not isinstance(reply, (list, tuple)):
        raise _mismatch(reply, kind)

    if origin is list:
        item_kind = args[0] if args else Any
        return [decode(item, item_kind) for item in reply]

    if origin is set:
        item_kind = args[0] if args else Any
        try:
            return {decode(item, item_kind) for item in reply}
        except TypeError as e:
            # nested arrays decode to lists, which cannot be set members
            raise _mismatch(reply, kind, str(e)) from e

    if origin is tuple:
        if not args:
            return tuple(reply)
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(decode(item, args[0]) for item in reply)
        if len(args) != len(reply):
            raise _mismatch(reply, kind, f"expected {len(args)} elements, got {len(reply)}")
        return tuple(decode(item, item_kind) for item, item_kind in zip(reply, args))

    raise ReplyDecodeError(
        f"Unsupported destination type {_kind_name(kind)}",
        details={"kind": _kind_name(kind)}
    )


def _decode_union(reply: Any, kind: Any) -> Any:
    last_error = None
    for option in get_args(kind):
        if option is type(None):
            continue
        try:
            return decode(reply, option)
        except ReplyDecodeError as e:
            last_error = e
    raise last_error or _mismatch(reply, kind)


def _to_model(reply: Any, kind: type[BaseModel]) -> BaseModel:
    try:
        return kind.model_validate(pairs_to_dict(reply, str, str))
    except ModelValidationError as e:
        raise _mismatch(reply, kind, str(e)) from e


def _kind_name(kind: Any) -> str:
    if isinstance(kind, type) and get_origin(kind) is None:
        return kind.__name__
    return repr(kind)


def _mismatch(reply: Any, kind: Any, reason: str | None = None) -> ReplyDecodeError:
    message = f"Cannot decode {type(reply).__name__} reply into {_kind_name(kind)}"
    if reason:
        message = f"{message}: {reason}"
    return ReplyDecodeError(
        message,
        details={"kind": _kind_name(kind), "reply_type": type(reply).__name__}
    )
