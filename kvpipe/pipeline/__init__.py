"""
Command pipelining: the ``Pipeline`` session, typed ``Reply`` destinations,
option variants and stream reply models.
"""

from kvpipe.pipeline.decoding import Reply, ReplyDecodable, decode, pairs_to_dict, zero_value
from kvpipe.pipeline.models import StreamEntry, StreamReply
from kvpipe.pipeline.options import (
    CommandOption,
    ExpireGT,
    ExpireLT,
    ExpireNX,
    ExpireOption,
    ExpireXX,
    FlushAllAsync,
    FlushAllOption,
    FlushAllSync,
    SetEX,
    SetGet,
    SetKeepTTL,
    SetNX,
    SetOption,
    SetPX,
    SetXX,
    XAddMaxLen,
    XAddNoMkStream,
    XAddOption,
    XGroupCreateMkStream,
    XGroupCreateOption,
    XReadGroupBlock,
    XReadGroupCount,
    XReadGroupNoAck,
    XReadGroupOption,
)
from kvpipe.pipeline.pipeline import PendingCommand, Pipeline

__all__ = [
    "Pipeline",
    "PendingCommand",
    # Decoding
    "Reply",
    "ReplyDecodable",
    "decode",
    "pairs_to_dict",
    "zero_value",
    "StreamEntry",
    "StreamReply",
    # Options
    "CommandOption",
    "SetOption",
    "SetEX",
    "SetPX",
    "SetNX",
    "SetXX",
    "SetKeepTTL",
    "SetGet",
    "ExpireOption",
    "ExpireNX",
    "ExpireXX",
    "ExpireGT",
    "ExpireLT",
    "FlushAllOption",
    "FlushAllAsync",
    "FlushAllSync",
    "XAddOption",
    "XAddNoMkStream",
    "XAddMaxLen",
    "XGroupCreateOption",
    "XGroupCreateMkStream",
    "XReadGroupOption",
    "XReadGroupCount",
    "XReadGroupBlock",
    "XReadGroupNoAck",
]
