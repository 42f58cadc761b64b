"""
Command Helpers

Typed, chainable shortcuts for individual store operations. Each helper
only formats arguments and delegates to ``Pipeline.add``; queuing, error
handling and decoding live in the pipeline.

Every helper takes the destination first (a ``Reply`` slot, or None to
drop the value) and returns the pipeline:

    pipe.set(ok, "counter", 9).incr(after, "counter").commit()
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from kvpipe.pipeline.options import (
    ExpireOption,
    FlushAllOption,
    SetOption,
    XAddOption,
    XGroupCreateOption,
    XReadGroupOption,
    expand_options,
)


def flatten_fields(fields: Mapping | BaseModel | Iterable[tuple[Any, Any]]) -> list:
    """Flatten a field map (dict, pydantic model or pairs) to ``[f1, v1, f2, v2, ...]``."""
    if isinstance(fields, BaseModel):
        fields = fields.model_dump(by_alias=True, exclude_none=True)
    items = fields.items() if isinstance(fields, Mapping) else fields
    flat: list = []
    for field, value in items:
        flat.extend((field, value))
    return flat


class CommandsMixin:
    """Operation helpers mixed into Pipeline."""

    def add(self, destination, name: str, *args):
        raise NotImplementedError

    # =========================================================================
    # Connection / server
    # =========================================================================

    def ping(self, destination, message: str | None = None):
        """PING [message] - replies PONG, or echoes ``message``."""
        if message is not None:
            return self.add(destination, "PING", message)
        return self.add(destination, "PING")

    def select(self, destination, index: int):
        """SELECT index - switch the connection's database."""
        return self.add(destination, "SELECT", index)

    def flushall(self, destination, *options: FlushAllOption):
        """FLUSHALL [ASYNC|SYNC] - delete every key of every database."""
        return self.add(destination, "FLUSHALL", *expand_options(FlushAllOption, options))

    # =========================================================================
    # Keys and strings
    # =========================================================================

    def get(self, destination, key):
        return self.add(destination, "GET", key)

    def set(self, destination, key, value, *options: SetOption):
        """SET key value [EX|PX|NX|XX|KEEPTTL|GET ...] - replies OK, or nil when NX/XX blocked it."""
        return self.add(destination, "SET", key, value, *expand_options(SetOption, options))

    def delete(self, destination, *keys):
        """DEL key [key ...] - replies the number of keys removed."""
        return self.add(destination, "DEL", *keys)

    def expire(self, destination, key, seconds: int, *options: ExpireOption):
        """EXPIRE key seconds [NX|XX|GT|LT] - replies 1 if the timeout was set, else 0."""
        return self.add(destination, "EXPIRE", key, seconds, *expand_options(ExpireOption, options))

    def incr(self, destination, key):
        return self.add(destination, "INCR", key)

    def decr(self, destination, key):
        return self.add(destination, "DECR", key)

    def keys(self, destination, pattern: str):
        """KEYS pattern - replies the matching key names."""
        return self.add(destination, "KEYS", pattern)

    # =========================================================================
    # Streams
    # =========================================================================

    def xadd(self, destination, stream, entry_id, fields, *options: XAddOption):
        """
        XADD stream [NOMKSTREAM] [MAXLEN ...] id field value [field value ...]

        Args:
            destination: Receives the id of the added entry
            stream: Stream key
            entry_id: Entry id, usually ``"*"``
            fields: Mapping, pydantic model or (field, value) pairs
        """
        return self.add(
            destination,
            "XADD",
            stream,
            *expand_options(XAddOption, options),
            entry_id,
            *flatten_fields(fields),
        )

    def xgroup_create(self, destination, stream, group: str, start_id, *options: XGroupCreateOption):
        """XGROUP CREATE stream group id [MKSTREAM] - replies OK."""
        return self.add(
            destination,
            "XGROUP",
            "CREATE",
            stream,
            group,
            start_id,
            *expand_options(XGroupCreateOption, options),
        )

    def xreadgroup(
        self,
        destination,
        group: str,
        consumer: str,
        streams: list,
        ids: list,
        *options: XReadGroupOption,
    ):
        """
        XREADGROUP GROUP group consumer [COUNT n] [BLOCK ms] [NOACK] STREAMS key... id...

        Decode into ``Reply(list[StreamReply])``. STREAMS must be the last
        clause, so options are placed before it.

        Raises:
            ValueError: ``streams`` and ``ids`` differ in length or are empty
        """
        if not streams or len(streams) != len(ids):
            raise ValueError("xreadgroup needs one id per stream")
        return self.add(
            destination,
            "XREADGROUP",
            "GROUP",
            group,
            consumer,
            *expand_options(XReadGroupOption, options),
            "STREAMS",
            *streams,
            *ids,
        )

    def xack(self, destination, stream, group: str, *ids):
        """XACK stream group id [id ...] - replies the number of entries acknowledged."""
        return self.add(destination, "XACK", stream, group, *ids)
