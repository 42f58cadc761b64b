"""
Command Pipeline

A ``Pipeline`` wraps exactly one borrowed connection and batches any
number of commands into a single network round trip.

STAGE-PIPE: Pipeline lifecycle
-------------------------------
PIPE.1: add() - queue the command and write it to the outbound buffer
PIPE.2: commit() - flush, read one reply per command in order, decode
PIPE.3: drain - after the first failure keep reading so the connection stays reusable

Guarantees:
- Replies are read and decoded in exactly the order commands were added.
- The first write error is sticky: later add() calls are no-ops and
  commit() raises it without touching the network.
- The first store error (or decode error) ends decoding; destinations after
  it keep their zero values, earlier ones keep their decoded values.
- The connection goes back to its pool exactly once, on every exit path.
  It is discarded instead of re-pooled whenever its read position is unknown.

Round-trip batching only: the store applies each command independently,
so a failed batch may be partially applied.
"""

import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from redis.exceptions import RedisError, ResponseError

from kvpipe.core.config.constants import Stage
from kvpipe.core.exceptions import (
    CommandError,
    CommandWriteError,
    KVPipeError,
    PipelineCommittedError,
    PipelineConnectionError,
    ReplyDecodeError,
)
from kvpipe.core.logging import get_logger
from kvpipe.core.pool.connection import TRANSPORT_ERRORS, Connection
from kvpipe.pipeline.commands import CommandsMixin

logger = get_logger(__name__)


@dataclass
class PendingCommand:
    """One queued command and where its reply goes."""

    name: str
    args: tuple
    destination: Any = None


class Pipeline(CommandsMixin):
    """
    Chainable command batch over one borrowed connection.

    Usage:
        ok, count = Reply(str), Reply(int)
        client.borrow().set(ok, "k", 9).incr(count, "k").commit()

        with client.borrow() as pipe:
            pipe.get(value, "k")
        # committed on exit, discarded if the block raised

    Args:
        conn: Connection owned by this pipeline until commit()/discard()
        release: Callback returning the connection to its origin,
            called as ``release(conn, discard)``
    """

    def __init__(self, conn: Connection, release: Callable[[Connection, bool], None]):
        self._conn: Connection | None = conn
        self._release = release
        self._pending: list[PendingCommand] = []
        self._error: KVPipeError | None = None
        self._committed = False
        self.pipeline_id = uuid.uuid4().hex[:12]

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        state = "committed" if self._committed else "building"
        return f"Pipeline(id={self.pipeline_id}, commands={len(self._pending)}, state={state})"

    def __enter__(self) -> "Pipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._committed:
            return
        if exc_type is not None:
            self.discard()
            return
        self.commit()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def error(self) -> KVPipeError | None:
        """The sticky write error, if one was captured."""
        return self._error

    @property
    def commands(self) -> list[PendingCommand]:
        return list(self._pending)

    # =========================================================================
    # Building
    # =========================================================================

    def add(self, destination, name: str, *args) -> "Pipeline":
        """
        Queue one command.

        STAGE-PIPE.1: Write-ahead

        The request is encoded into the connection's outbound buffer right
        away. Encoding failures are captured as the sticky error.

        Args:
            destination: ``Reply`` slot (anything with ``fill(raw)``) or None
            name: Command name, e.g. ``"SET"``
            *args: Command arguments (str, bytes, int or float)

        Returns:
            Pipeline: self, for chaining

        Raises:
            PipelineCommittedError: The pipeline was already committed
            TypeError: ``destination`` is not a Reply slot
        """
        if self._committed:
            raise PipelineCommittedError(details={"command": name})

        if self._error is not None:
            return self

        if destination is not None and not callable(getattr(destination, "fill", None)):
            raise TypeError(f"destination must be a Reply or None, got {type(destination).__name__}")

        self._pending.append(PendingCommand(name, args, destination))

        try:
            self._conn.send(name, *args)
        except (RedisError, OSError) as e:
            self._error = CommandWriteError.from_exception(
                e,
                message=f"Failed to write {name}: {e}",
                index=len(self._pending) - 1,
                command=name,
            )
            logger.warning(
                "Command write failed, pipeline short-circuited",
                stage=Stage.PIPELINE_WRITE,
                pipeline_id=self.pipeline_id,
                command=name,
                error=str(e)
            )

        return self

    # =========================================================================
    # Commit
    # =========================================================================

    def commit(self) -> None:
        """
        Send every queued command and decode the replies.

        STAGE-PIPE.2: Flush / read / decode

        Raises:
            PipelineCommittedError: commit() or discard() already ran
            CommandWriteError: A command could not be written (nothing was sent)
            CommandError: The store answered a command with an error
            ReplyDecodeError: A reply does not fit its destination type
            PipelineConnectionError: The connection failed mid round trip
        """
        if self._committed:
            raise PipelineCommittedError()
        self._committed = True

        conn, self._conn = self._conn, None
        # Flipped to False only once the read position is known to be clean
        discard = True
        started = time.perf_counter()

        try:
            if self._error is not None:
                conn.clear_outbound()
                discard = conn.broken
                raise self._error

            try:
                conn.flush()
            except TRANSPORT_ERRORS as e:
                raise PipelineConnectionError.from_exception(
                    e,
                    message=f"Failed to flush pipeline: {e}",
                    commands=len(self._pending),
                ) from e

            failure = self._read_replies(conn)
            discard = False

            if failure is not None:
                logger.info(
                    "Pipeline aborted",
                    stage=Stage.PIPELINE_ERROR,
                    pipeline_id=self.pipeline_id,
                    commands=len(self._pending),
                    error_type=type(failure).__name__,
                    error=failure.message
                )
                raise failure

            logger.debug(
                "Pipeline committed",
                stage=Stage.PIPELINE_COMMIT,
                pipeline_id=self.pipeline_id,
                commands=len(self._pending),
                duration_ms=round((time.perf_counter() - started) * 1000, 3)
            )
        finally:
            self._release(conn, discard)

    def discard(self) -> None:
        """Release the connection without sending anything queued."""
        if self._committed:
            return
        self._committed = True
        conn, self._conn = self._conn, None
        conn.clear_outbound()
        self._release(conn, conn.broken)

    def _read_replies(self, conn: Connection) -> KVPipeError | None:
        """
        Read one reply per queued command, in order.

        Returns the first failure (store error or decode error); replies after
        it are read and dropped. Transport failures raise immediately.
        """
        failure: KVPipeError | None = None

        for index, pending in enumerate(self._pending):
            try:
                raw = conn.read_response()
            except ResponseError as e:
                if failure is None:
                    failure = CommandError.from_exception(e, index=index, command=pending.name)
                continue
            except TRANSPORT_ERRORS as e:
                raise PipelineConnectionError.from_exception(
                    e,
                    message=f"Connection lost reading reply {index + 1} of {len(self._pending)}: {e}",
                    index=index,
                    command=pending.name,
                ) from e

            if failure is not None:
                logger.debug(
                    "Draining reply after failure",
                    stage=Stage.PIPELINE_DRAIN,
                    pipeline_id=self.pipeline_id,
                    index=index
                )
                continue

            if pending.destination is None:
                continue

            try:
                pending.destination.fill(raw)
            except (ReplyDecodeError, CommandError) as e:
                failure = e.with_context(index=index, command=pending.name)

        return failure
