"""
Stream Reply Models

pydantic models for the nested replies of stream reads. Both implement the
``from_reply`` decode hook, so they can be used directly as destination
kinds:

    streams = Reply(list[StreamReply])
    pipe.xreadgroup(streams, "workers", "w-1", ["jobs"], [">"]).commit()
    for stream in streams.value:
        for entry in stream.entries:
            handle(entry.id, entry.fields)

Wire shapes (RESP2):
    entry   = [id, [field, value, field, value, ...]]
    stream  = [name, [entry, entry, ...]]
    XREADGROUP reply = [stream, stream, ...]   (nil when nothing was read)
"""

from typing import Any

from pydantic import BaseModel, Field

from kvpipe.core.exceptions import ReplyDecodeError
from kvpipe.pipeline.decoding import decode, pairs_to_dict


def _split_pair(reply: Any, what: str) -> tuple[Any, Any]:
    if not isinstance(reply, (list, tuple)) or len(reply) != 2:
        raise ReplyDecodeError(
            f"Cannot decode {type(reply).__name__} reply into {what}: expected a 2-element array",
            details={"kind": what, "reply_type": type(reply).__name__}
        )
    return reply[0], reply[1]


class StreamEntry(BaseModel):
    """One stream entry: its id and field map."""

    id: str
    fields: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_reply(cls, reply: Any) -> "StreamEntry":
        entry_id, fields = _split_pair(reply, cls.__name__)
        # Entries deleted while pending come back with nil fields
        return cls(
            id=decode(entry_id, str),
            fields=pairs_to_dict(fields) if fields is not None else {},
        )


class StreamReply(BaseModel):
    """Entries read from one stream."""

    name: str
    entries: list[StreamEntry] = Field(default_factory=list)

    @classmethod
    def from_reply(cls, reply: Any) -> "StreamReply":
        name, entries = _split_pair(reply, cls.__name__)
        return cls(
            name=decode(name, str),
            entries=decode(entries, list[StreamEntry]),
        )
