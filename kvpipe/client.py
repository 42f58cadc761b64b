#!/usr/bin/env python3
"""
Client Facade

``KVClient`` binds one connection pool and hands out pipelines:

    client = KVClient(PoolConfig(address="localhost:6379"))

    ok, count, value = Reply(str), Reply(int), Reply(int)
    client.borrow().set(ok, "k", 9).incr(count, "k").get(value, "k").commit()

    client.close()

The client is thread-safe: share one instance across threads and borrow a
pipeline per unit of work. Pools are never global; create one client per
store and pass it to whoever needs it.
"""

from collections.abc import Callable

from pydantic import ValidationError

from kvpipe.core.config.constants import Stage
from kvpipe.core.config.settings import PoolConfig, Settings, get_settings
from kvpipe.core.exceptions import ConfigurationError
from kvpipe.core.logging import get_logger
from kvpipe.core.pool.connection import Connection
from kvpipe.core.pool.connection_pool import ConnectionPool
from kvpipe.pipeline.pipeline import Pipeline

logger = get_logger(__name__)


class KVClient:
    """
    Borrow pipelines from a bounded connection pool.

    Args:
        config: Pool configuration (defaults used when omitted)
        pool: Use an existing pool instead of creating one from ``config``
        dialer: Connection factory passed to a newly created pool
    """

    def __init__(
        self,
        config: PoolConfig | None = None,
        *,
        pool: ConnectionPool | None = None,
        dialer: Callable[[], Connection] | None = None,
    ):
        self._pool = pool or ConnectionPool(config, dialer=dialer)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "KVClient":
        """
        Build a client from ``KVPIPE_*`` environment settings.

        Raises:
            ConfigurationError: The environment does not describe a valid pool
        """
        try:
            settings = settings or get_settings()
            config = settings.pool
        except ValidationError as e:
            logger.error(
                "Invalid pool configuration",
                stage=Stage.POOL_INIT,
                errors=e.error_count()
            )
            raise ConfigurationError.from_exception(
                e,
                message=f"Invalid KVPIPE_* configuration: {e}",
                fields=[".".join(str(part) for part in err["loc"]) for err in e.errors()],
            ) from e
        return cls(config)

    def __enter__(self) -> "KVClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def borrow(self, block: bool | None = None, timeout: float | None = None) -> Pipeline:
        """
        Borrow a connection wrapped in a fresh pipeline.

        Blocks while the pool is at capacity (see ConnectionPool.acquire).

        Raises:
            PoolClosedError: The client was closed
            PoolExhaustedError: At capacity and not waiting, or the wait timed out
            DialError: A new connection could not be established
        """
        conn = self._pool.acquire(block=block, timeout=timeout)
        return Pipeline(conn, self._pool.release)

    def close(self) -> None:
        """Close the pool; pipelines still in flight release into a closed pool."""
        self._pool.close()

    def stats(self) -> dict:
        return self._pool.stats()
