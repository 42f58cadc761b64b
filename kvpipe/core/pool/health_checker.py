"""
Borrow-Time Health Checker

Decides whether an idle connection may be handed out again.

STAGE-HC: Health check tiers
-----------------------------
1. keep_alive == 0      → always reject (each borrow dials a fresh connection)
2. recently returned    → accept without touching the network
3. otherwise            → send PING and trust its outcome

The window in tier 2 is ``keep_alive - margin``; the margin is configurable
because the right boundary is a latency/safety trade-off.
"""

import time
from collections.abc import Callable

from redis.exceptions import RedisError

from kvpipe.core.config.constants import Stage
from kvpipe.core.logging import get_logger
from kvpipe.core.pool.connection import Connection

logger = get_logger(__name__)


class HealthChecker:
    """
    Tiered liveness predicate applied to idle connections on borrow.

    Args:
        keep_alive: Seconds a returned connection is trusted; 0 disables reuse
        margin: Seconds subtracted from keep_alive for the no-probe window
        clock: Monotonic clock (injectable for tests)
    """

    def __init__(
        self,
        keep_alive: float,
        margin: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.keep_alive = keep_alive
        self.margin = margin
        self._clock = clock

    def is_fresh(self, idle_since: float) -> bool:
        """True when the connection was returned recently enough to skip the probe."""
        if self.keep_alive <= self.margin:
            return False
        return self._clock() - idle_since < self.keep_alive - self.margin

    def check(self, conn: Connection, idle_since: float) -> bool:
        """
        Return True if ``conn`` may be reused.

        Args:
            conn: Idle connection about to be handed out
            idle_since: Clock reading when it was returned to the pool
        """
        if self.keep_alive == 0:
            return False

        if self.is_fresh(idle_since):
            return True

        try:
            conn.ping()
        except (RedisError, OSError) as e:
            logger.warning(
                "Idle connection failed liveness probe",
                stage=Stage.HEALTH_PROBE_FAILED,
                idle_seconds=round(self._clock() - idle_since, 3),
                error=str(e)
            )
            return False

        logger.debug(
            "Idle connection passed liveness probe",
            stage=Stage.HEALTH_CHECK,
            idle_seconds=round(self._clock() - idle_since, 3)
        )
        return True
