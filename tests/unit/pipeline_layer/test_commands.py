"""
Unit Tests for Command Helpers

Tests argument formatting of every helper by inspecting the queued
commands, and end-to-end behaviour against the in-memory store.
"""

import pytest
from pydantic import BaseModel

from kvpipe.pipeline.commands import flatten_fields
from kvpipe.pipeline.decoding import Reply
from kvpipe.pipeline.options import (
    ExpireGT,
    FlushAllAsync,
    SetEX,
    SetGet,
    SetNX,
    SetXX,
    XAddMaxLen,
    XGroupCreateMkStream,
    XReadGroupBlock,
    XReadGroupCount,
)
from kvpipe.pipeline.pipeline import Pipeline
from tests.test_fixtures import FakeConnection, InMemoryStore


class Job(BaseModel):
    kind: str
    payload: str | None = None


@pytest.fixture
def pipe(release_log):
    pipe = Pipeline(FakeConnection(InMemoryStore()), release_log)
    yield pipe
    pipe.discard()


def _wire(pipe):
    return [(cmd.name, *cmd.args) for cmd in pipe.commands]


@pytest.mark.unit
class TestArgumentFormatting:
    """Test the wire form each helper queues."""

    def test_ping(self, pipe):
        """Test PING with and without a message."""
        pipe.ping(None).ping(None, "").ping(None, "hello")

        assert _wire(pipe) == [("PING",), ("PING", ""), ("PING", "hello")]

    def test_select_and_flushall(self, pipe):
        """Test SELECT and FLUSHALL."""
        pipe.select(None, 2).flushall(None).flushall(None, FlushAllAsync())

        assert _wire(pipe) == [("SELECT", 2), ("FLUSHALL",), ("FLUSHALL", "ASYNC")]

    def test_set_with_options(self, pipe):
        """Test SET option tokens follow key and value in order."""
        pipe.set(None, "k", "v", SetNX(), SetEX(30))

        assert _wire(pipe) == [("SET", "k", "v", "NX", "EX", 30)]

    def test_delete_multiple(self, pipe):
        """Test DEL with several keys."""
        pipe.delete(None, "a", "b")

        assert _wire(pipe) == [("DEL", "a", "b")]

    def test_expire(self, pipe):
        """Test EXPIRE with a condition."""
        pipe.expire(None, "k", 60, ExpireGT())

        assert _wire(pipe) == [("EXPIRE", "k", 60, "GT")]

    def test_counters_and_keys(self, pipe):
        """Test INCR, DECR, GET and KEYS."""
        pipe.incr(None, "n").decr(None, "n").get(None, "n").keys(None, "user:*")

        assert _wire(pipe) == [("INCR", "n"), ("DECR", "n"), ("GET", "n"), ("KEYS", "user:*")]

    def test_xadd_options_before_id(self, pipe):
        """Test XADD places trimming options before the entry id."""
        pipe.xadd(None, "jobs", "*", {"kind": "email"}, XAddMaxLen(100, approximate=True))

        assert _wire(pipe) == [("XADD", "jobs", "MAXLEN", "~", 100, "*", "kind", "email")]

    def test_xgroup_create(self, pipe):
        """Test XGROUP CREATE with MKSTREAM."""
        pipe.xgroup_create(None, "jobs", "workers", "$", XGroupCreateMkStream())

        assert _wire(pipe) == [("XGROUP", "CREATE", "jobs", "workers", "$", "MKSTREAM")]

    def test_xreadgroup_options_before_streams(self, pipe):
        """Test XREADGROUP places options before the STREAMS clause."""
        pipe.xreadgroup(None, "workers", "w-1", ["a", "b"], [">", ">"], XReadGroupCount(10), XReadGroupBlock(100))

        assert _wire(pipe) == [
            ("XREADGROUP", "GROUP", "workers", "w-1", "COUNT", 10, "BLOCK", 100, "STREAMS", "a", "b", ">", ">")
        ]

    def test_xreadgroup_requires_matching_ids(self, pipe):
        """Test that each stream needs an id."""
        with pytest.raises(ValueError):
            pipe.xreadgroup(None, "workers", "w-1", ["a", "b"], [">"])
        with pytest.raises(ValueError):
            pipe.xreadgroup(None, "workers", "w-1", [], [])

    def test_xack(self, pipe):
        """Test XACK with several ids."""
        pipe.xack(None, "jobs", "workers", "1-0", "2-0")

        assert _wire(pipe) == [("XACK", "jobs", "workers", "1-0", "2-0")]

    def test_wrong_option_family(self, pipe):
        """Test that passing another command's option raises immediately."""
        with pytest.raises(TypeError):
            pipe.set(None, "k", "v", XGroupCreateMkStream())


@pytest.mark.unit
class TestFlattenFields:
    """Test field map flattening for XADD."""

    def test_mapping(self):
        """Test dict flattening keeps insertion order."""
        assert flatten_fields({"a": 1, "b": "x"}) == ["a", 1, "b", "x"]

    def test_pairs(self):
        """Test flattening (field, value) pairs."""
        assert flatten_fields([("a", 1), ("a", 2)]) == ["a", 1, "a", 2]

    def test_model_skips_none(self):
        """Test pydantic models flatten without unset optional fields."""
        assert flatten_fields(Job(kind="email")) == ["kind", "email"]


@pytest.mark.unit
class TestCommandsAgainstStore:
    """Test helpers end to end through a pooled client."""

    def test_set_conditions(self, client):
        """Test NX/XX/GET flags and nil replies."""
        first, blocked, missing, old = Reply(str), Reply(str | None), Reply(str | None), Reply(str)

        (
            client.borrow()
            .set(first, "k", "v1", SetNX())
            .set(blocked, "k", "v2", SetNX())
            .set(missing, "other", "x", SetXX())
            .set(old, "k", "v3", SetGet())
            .commit()
        )

        assert first.value == "OK"
        assert blocked.value is None
        assert missing.value is None
        assert old.value == "v1"

    def test_keys_and_delete(self, client):
        """Test KEYS pattern matching and DEL counts."""
        names, removed = Reply(list[str]), Reply(int)

        (
            client.borrow()
            .set(None, "user:1", "a")
            .set(None, "user:2", "b")
            .set(None, "order:1", "c")
            .keys(names, "user:*")
            .delete(removed, "user:1", "user:2", "user:3")
            .commit()
        )

        assert sorted(names.value) == ["user:1", "user:2"]
        assert removed.value == 2

    def test_expire_and_flushall(self, client):
        """Test EXPIRE replies and FLUSHALL clearing the store."""
        set_on_existing, set_on_missing, flushed, after = Reply(bool), Reply(bool), Reply(str), Reply(list[str])

        (
            client.borrow()
            .set(None, "k", "v")
            .expire(set_on_existing, "k", 10)
            .expire(set_on_missing, "nope", 10)
            .flushall(flushed, FlushAllAsync())
            .keys(after, "*")
            .commit()
        )

        assert set_on_existing.value is True
        assert set_on_missing.value is False
        assert flushed.value == "OK"
        assert after.value == []

    def test_ping_echo(self, client):
        """Test PING with a message echoes it back."""
        pong, echo = Reply(str), Reply(str)
        client.borrow().ping(pong).ping(echo, "hi").commit()

        assert pong.value == "PONG"
        assert echo.value == "hi"

    def test_ping_empty_message_echoes(self, client):
        """Test that an empty message is sent and echoed rather than answered with PONG."""
        echo = Reply(str)
        client.borrow().ping(echo, "").commit()

        assert echo.filled
        assert echo.value == ""
