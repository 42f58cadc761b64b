"""
Connection Pool

Bounded pool of long-lived store connections shared by every thread of a
process (or of one client). This is the only shared mutable structure in
the library; all of its state is guarded by a single condition variable.

STAGE-POOL: Connection Pool Management
---------------------------------------
POOL.1: Connection acquisition (idle reuse, health check, dial)
POOL.2: Blocking wait at capacity
POOL.3: Eviction (idle timeout, max lifetime, failed health check)
POOL.4: Connection release
POOL.5: Pool shutdown

Policies:
- ``max_active`` bounds borrowed (un-released) connections. At capacity,
  acquire() blocks until a release (backpressure), unless the caller opted
  out of waiting.
- ``max_idle`` bounds the idle set; surplus returned connections are closed.
- Idle and age eviction run lazily on acquire/release, not on a timer.
- Network I/O (dial, probe, close) never happens while holding the lock.
"""

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from kvpipe.core.config.constants import (
    POOL_CRITICAL_THRESHOLD,
    POOL_DEGRADED_THRESHOLD,
    PoolState,
    Stage,
)
from kvpipe.core.config.settings import PoolConfig
from kvpipe.core.exceptions import PoolClosedError, PoolExhaustedError
from kvpipe.core.logging import get_logger
from kvpipe.core.pool.connection import Connection, dial
from kvpipe.core.pool.health_checker import HealthChecker

logger = get_logger(__name__)


@dataclass
class _IdleConnection:
    conn: Connection
    idle_since: float


class ConnectionPool:
    """
    Thread-safe bounded connection pool.

    Usage:
        pool = ConnectionPool(PoolConfig(address="localhost:6379", max_active=5))
        conn = pool.acquire()
        try:
            conn.do("PING")
        finally:
            pool.release(conn)
        pool.close()

    Args:
        config: Pool configuration
        dialer: Factory for new connections (defaults to dialing ``config``)
        health_checker: Borrow-time liveness check (defaults to one built from ``config``)
        clock: Monotonic clock shared with the health checker
    """

    def __init__(
        self,
        config: PoolConfig | None = None,
        *,
        dialer: Callable[[], Connection] | None = None,
        health_checker: HealthChecker | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or PoolConfig()
        self._clock = clock
        self._dial = dialer or (lambda: dial(self.config, clock=clock))
        self._health_checker = health_checker or HealthChecker(
            keep_alive=self.config.keep_alive,
            margin=self.config.health_check_margin,
            clock=clock,
        )

        # Most recently returned connection at the left
        self._idle: deque[_IdleConnection] = deque()
        self._active = 0
        self._closed = False
        self._cond = threading.Condition(threading.Lock())

        logger.info(
            "Connection pool initialized",
            stage=Stage.POOL_INIT,
            network=self.config.network,
            address=self.config.address,
            max_active=self.config.max_active,
            max_idle=self.config.max_idle,
            idle_timeout=self.config.idle_timeout,
            max_conn_lifetime=self.config.max_conn_lifetime,
            keep_alive=self.config.keep_alive
        )

    def __enter__(self) -> "ConnectionPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active_count(self) -> int:
        """Connections currently borrowed and not yet released."""
        return self._active

    @property
    def idle_count(self) -> int:
        """Connections waiting in the idle set."""
        return len(self._idle)

    # =========================================================================
    # Acquire / Release
    # =========================================================================

    def acquire(self, block: bool | None = None, timeout: float | None = None) -> Connection:
        """
        Borrow a connection.

        STAGE-POOL.1: Connection Acquisition

        1. Reuse the most recently returned idle connection if it is young
           enough and passes the health check
        2. Otherwise dial a new one while below max_active
        3. At max_active, block until a connection is released

        Args:
            block: Wait at capacity (defaults to ``config.wait``)
            timeout: Maximum seconds to wait at capacity; None waits forever

        Returns:
            Connection: Exclusively owned until passed to release()

        Raises:
            PoolClosedError: If the pool is closed (also raised to waiters on close)
            PoolExhaustedError: At capacity and not waiting, or the wait timed out
            DialError: If a new connection cannot be established
        """
        if block is None:
            block = self.config.wait

        entry = self._checkout(block, timeout)

        if entry is not None:
            if self._is_reusable(entry):
                logger.debug(
                    "Reusing idle connection",
                    stage=Stage.POOL_ACQUIRE,
                    active=self._active,
                    idle=len(self._idle)
                )
                return entry.conn
            entry.conn.close()

        # A slot is reserved for us at this point
        try:
            conn = self._dial()
        except Exception:
            with self._cond:
                self._active -= 1
                self._cond.notify()
            raise

        logger.debug(
            "Dialed new pooled connection",
            stage=Stage.POOL_ACQUIRE,
            active=self._active,
            idle=len(self._idle),
            pool_state=self.get_pool_state()
        )
        return conn

    def release(self, conn: Connection, discard: bool = False) -> None:
        """
        Return a borrowed connection.

        STAGE-POOL.4: Connection Release

        The connection goes back to the idle set unless the pool is closed,
        ``discard`` is set, the connection is broken or past its max
        lifetime; in those cases it is closed.

        Args:
            conn: Connection obtained from acquire()
            discard: Close instead of re-pooling (unknown stream state)
        """
        to_close: list[Connection] = []
        now = self._clock()

        with self._cond:
            self._active = max(0, self._active - 1)

            if discard or conn.broken or conn.closed or self._closed or self._expired(conn, now):
                to_close.append(conn)
            else:
                conn.clear_outbound()
                self._idle.appendleft(_IdleConnection(conn, now))
                while len(self._idle) > self.config.max_idle:
                    to_close.append(self._idle.pop().conn)

            to_close.extend(self._prune_idle_locked(now))
            self._cond.notify()

        for stale in to_close:
            stale.close()

        logger.debug(
            "Connection released",
            stage=Stage.POOL_RELEASE,
            reused=conn not in to_close,
            active=self._active,
            idle=len(self._idle)
        )

    def close(self) -> None:
        """
        Close the pool.

        STAGE-POOL.5: Pool shutdown

        Closes every idle connection and fails later (and currently waiting)
        acquire() calls. Connections still borrowed are closed when released.
        """
        with self._cond:
            if self._closed:
                return
            self._closed = True
            idle = [entry.conn for entry in self._idle]
            self._idle.clear()
            self._cond.notify_all()

        for conn in idle:
            conn.close()

        logger.info(
            "Connection pool closed",
            stage=Stage.POOL_CLOSE,
            closed_idle=len(idle),
            still_borrowed=self._active
        )

    # =========================================================================
    # Monitoring
    # =========================================================================

    def get_pool_state(self) -> PoolState:
        """Utilization state of the borrowed connections."""
        active = self._active
        max_active = self.config.max_active
        if active >= max_active:
            return PoolState.EXHAUSTED
        elif active >= int(max_active * POOL_CRITICAL_THRESHOLD):
            return PoolState.CRITICAL
        elif active >= int(max_active * POOL_DEGRADED_THRESHOLD):
            return PoolState.DEGRADED
        return PoolState.HEALTHY

    def stats(self) -> dict:
        """
        Get pool statistics.

        Returns:
            dict: Counts, utilization and state
        """
        with self._cond:
            active = self._active
            idle = len(self._idle)
            closed = self._closed
        utilization = (active / self.config.max_active) * 100

        return {
            "active_connections": active,
            "idle_connections": idle,
            "max_active": self.config.max_active,
            "max_idle": self.config.max_idle,
            "utilization_percent": round(utilization, 2),
            "state": self.get_pool_state().value,
            "closed": closed,
        }

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _checkout(self, block: bool, timeout: float | None) -> _IdleConnection | None:
        """
        Reserve an active slot.

        Returns the idle entry to reuse, or None when the caller must dial.
        """
        deadline = None if timeout is None else self._clock() + timeout
        to_close: list[Connection] = []
        waited = False

        try:
            with self._cond:
                while True:
                    if self._closed:
                        raise PoolClosedError(details={"address": self.config.address})

                    to_close.extend(self._prune_idle_locked(self._clock()))

                    if self._idle:
                        self._active += 1
                        return self._idle.popleft()

                    if self._active < self.config.max_active:
                        self._active += 1
                        return None

                    if not block:
                        raise PoolExhaustedError(
                            details={"active": self._active, "max_active": self.config.max_active}
                        )

                    remaining = None
                    if deadline is not None:
                        remaining = deadline - self._clock()
                        if remaining <= 0:
                            raise PoolExhaustedError(
                                message=f"Timed out after {timeout}s waiting for a pooled connection",
                                details={"active": self._active, "max_active": self.config.max_active}
                            )

                    if not waited:
                        waited = True
                        logger.info(
                            "Pool at capacity, waiting for a connection",
                            stage=Stage.POOL_WAIT,
                            active=self._active,
                            max_active=self.config.max_active
                        )
                    self._cond.wait(remaining)
        finally:
            for stale in to_close:
                stale.close()

    def _is_reusable(self, entry: _IdleConnection) -> bool:
        """Age check, then the borrow-time health check (may probe the network)."""
        if self._expired(entry.conn, self._clock()):
            logger.debug("Evicting connection past max lifetime", stage=Stage.POOL_EVICT)
            return False
        if not self._health_checker.check(entry.conn, entry.idle_since):
            logger.debug("Evicting connection that failed health check", stage=Stage.POOL_EVICT)
            return False
        return True

    def _expired(self, conn: Connection, now: float) -> bool:
        lifetime = self.config.max_conn_lifetime
        return lifetime > 0 and now - conn.created_at >= lifetime

    def _prune_idle_locked(self, now: float) -> list[Connection]:
        """Pop idle connections past idle_timeout (oldest sit at the right end)."""
        stale = []
        idle_timeout = self.config.idle_timeout
        if idle_timeout <= 0:
            return stale
        while self._idle and now - self._idle[-1].idle_since >= idle_timeout:
            stale.append(self._idle.pop().conn)
        if stale:
            logger.debug(
                "Evicting idle connections past idle timeout",
                stage=Stage.POOL_EVICT,
                count=len(stale)
            )
        return stale
