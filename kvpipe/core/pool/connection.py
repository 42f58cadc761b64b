"""
Store Connection

A ``Connection`` is one stateful duplex channel to the store. Writing and
reading are separate steps so any number of requests can be buffered with
``send()`` before a single ``flush()``, and their replies read back one at a
time with ``read_response()`` (pipelining).

The RESP encoding, socket handling, AUTH/SELECT handshake and reply parsing
are delegated to redis-py's low-level ``Connection`` classes; this module
adds the outbound buffer, the write timeout, lifecycle bookkeeping used by
the pool, and the ``broken`` flag.

STAGE-DIAL: Connection establishment
"""

import socket
import time
from collections.abc import Callable
from contextlib import contextmanager
from typing import Any

from redis.backoff import NoBackoff
from redis.connection import AbstractConnection
from redis.connection import Connection as RedisConnection
from redis.connection import UnixDomainSocketConnection
from redis.exceptions import ConnectionError, ResponseError, TimeoutError
from redis.retry import Retry

from kvpipe.core.config.constants import NETWORK_UNIX, PING_COMMAND, Stage
from kvpipe.core.config.settings import PoolConfig
from kvpipe.core.exceptions import DialError
from kvpipe.core.logging import get_logger

logger = get_logger(__name__)

# Transport failures that leave the stream in an unknown read/write position
TRANSPORT_ERRORS = (ConnectionError, TimeoutError, OSError)


class Connection:
    """
    One pooled connection.

    Owned by exactly one holder at a time: the pool's idle set or a single
    pipeline. Not thread-safe.

    Attributes:
        created_at: Clock reading when the connection was dialed
        broken: Set once a transport error left the stream unusable
        closed: Set once close() ran
    """

    def __init__(
        self,
        transport: AbstractConnection,
        *,
        write_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._transport = transport
        self._outbound: list[Any] = []
        self._write_timeout = write_timeout
        self.created_at = clock()
        self.broken = False
        self.closed = False

    def __repr__(self) -> str:
        return f"Connection({self._transport!r}, broken={self.broken}, closed={self.closed})"

    @property
    def pending_bytes(self) -> int:
        """Number of bytes buffered and not yet flushed."""
        return sum(len(chunk) for chunk in self._outbound)

    def send(self, *args) -> None:
        """
        Encode one request into the outbound buffer.

        Raises:
            redis.exceptions.DataError: An argument cannot be encoded
        """
        self._outbound.extend(self._transport.pack_command(*args))

    def flush(self) -> None:
        """Write every buffered request to the socket."""
        if not self._outbound:
            return
        chunks, self._outbound = self._outbound, []
        try:
            with self._write_deadline():
                self._transport.send_packed_command(chunks, check_health=False)
        except TRANSPORT_ERRORS:
            self.broken = True
            raise

    def read_response(self) -> Any:
        """
        Read exactly one reply.

        Raises:
            redis.exceptions.ResponseError: The store answered with an error
                reply. The stream stays aligned; the next reply can be read.
            redis.exceptions.ConnectionError / TimeoutError: Transport failure.
                The connection is marked broken.
        """
        try:
            return self._transport.read_response()
        except ResponseError:
            raise
        except TRANSPORT_ERRORS:
            self.broken = True
            raise

    def do(self, *args) -> Any:
        """Send one command and read its reply (no pipelining)."""
        self.send(*args)
        self.flush()
        return self.read_response()

    def ping(self) -> Any:
        """Liveness probe used by the health checker."""
        return self.do(PING_COMMAND)

    def clear_outbound(self) -> None:
        """Drop buffered requests that were never flushed."""
        self._outbound = []

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self._outbound = []
        try:
            self._transport.disconnect()
        except OSError as e:
            logger.debug("Error while closing connection", error=str(e))

    @contextmanager
    def _write_deadline(self):
        """
        Apply the write timeout to the socket for the duration of a flush.

        redis-py uses one socket timeout for reads and writes; the read
        timeout is restored afterwards.
        """
        sock = getattr(self._transport, "_sock", None)
        read_timeout = getattr(self._transport, "socket_timeout", None)
        if sock is None or self._write_timeout is None or self._write_timeout == read_timeout:
            yield
            return
        sock.settimeout(self._write_timeout)
        try:
            yield
        finally:
            # disconnect() on a failed write clears _sock
            if getattr(self._transport, "_sock", None) is sock:
                sock.settimeout(read_timeout)


def _keepalive_options(keep_alive: float) -> dict[int, int]:
    """TCP keep-alive probe timing; only the options the platform exposes."""
    seconds = max(1, int(keep_alive))
    options = {}
    for name, value in (("TCP_KEEPIDLE", seconds), ("TCP_KEEPINTVL", seconds), ("TCP_KEEPCNT", 3)):
        option = getattr(socket, name, None)
        if option is not None:
            options[option] = value
    return options


def build_transport(config: PoolConfig) -> AbstractConnection:
    """Create an unconnected redis-py transport for the configured network."""
    common = {
        "username": config.username,
        "password": config.password,
        "db": config.db,
        "socket_timeout": config.read_timeout,
        "socket_connect_timeout": config.connect_timeout,
        # the pool runs its own health check and never retries transparently
        "health_check_interval": 0,
        "retry": Retry(NoBackoff(), 0),
    }
    if config.network == NETWORK_UNIX:
        return UnixDomainSocketConnection(path=config.address, **common)

    host, port = config.host_port
    return RedisConnection(
        host=host,
        port=port,
        socket_keepalive=config.keep_alive > 0,
        socket_keepalive_options=_keepalive_options(config.keep_alive) if config.keep_alive > 0 else None,
        **common,
    )


def dial(config: PoolConfig, clock: Callable[[], float] = time.monotonic) -> Connection:
    """
    Open a new connection.

    STAGE-DIAL.1: Connect, authenticate and select the database

    Raises:
        DialError: If the connection cannot be established
    """
    transport = build_transport(config)
    try:
        transport.connect()
    except TRANSPORT_ERRORS as e:
        logger.warning(
            "Failed to dial store",
            stage=Stage.DIAL_FAILED,
            network=config.network,
            address=config.address,
            error=str(e)
        )
        raise DialError.from_exception(
            e,
            message=f"Failed to connect to {config.address}: {e}",
            network=config.network,
            address=config.address,
        ) from e
    except ResponseError as e:
        # AUTH or SELECT rejected during the handshake
        transport.disconnect()
        raise DialError.from_exception(
            e,
            message=f"Handshake with {config.address} rejected: {e}",
            network=config.network,
            address=config.address,
        ) from e

    logger.debug(
        "Dialed store connection",
        stage=Stage.DIAL,
        network=config.network,
        address=config.address,
        db=config.db
    )
    return Connection(transport, write_timeout=config.write_timeout, clock=clock)
