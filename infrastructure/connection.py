# ============================================================================
# CONNECTION ACQUIRER
# ============================================================================
# STATUS: Infrastructure - Session acquisition against a starting database
# PURPOSE: Open a live psycopg session to a node whose readiness time is
#          unknown, retrying at a fixed interval up to a bounded attempt count
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ConnectionAcquirer
# DEPENDENCIES: psycopg, config.database_config, util_logger
# PATTERNS: Bounded retry (fixed interval), scoped resource (context manager)
# ENTRY_POINTS: with ConnectionAcquirer(endpoint).session() as conn: ...
# ============================================================================
"""
Connection Acquirer.

The database container on a freshly provisioned node comes up some time
after the node itself. Early attempts are refused or time out; that is
the expected case, not an error. Each attempt is:

    1. psycopg.connect() with the endpoint's conninfo and connect timeout
    2. a liveness probe (SELECT 1), because a server still running initdb
       may accept the TCP connection and then drop it

A handle that connected but failed the probe is closed before the next
attempt. Between two failed attempts the acquirer sleeps a constant delay;
after the last one it gives up with ConnectionExhaustedError. With
max_attempts=k there are exactly k attempts and k-1 sleeps.

Usage:
    acquirer = ConnectionAcquirer(endpoint, max_attempts=10, delay_seconds=10)

    with acquirer.session() as conn:
        ...  # closed exactly once on exit

    # Or manage the handle yourself
    conn = acquirer.acquire()
    try:
        ...
    finally:
        acquirer.release(conn)

The connect and sleep callables are injectable for tests.
"""

import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import psycopg
from psycopg.rows import dict_row

from config.database_config import EndpointConfig
from config.defaults import RetryDefaults
from exceptions import ConnectionExhaustedError, ContractViolationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "ConnectionAcquirer")


class ConnectionAcquirer:
    """
    Opens one live session to the endpoint, retrying at a fixed interval.
    """

    def __init__(
        self,
        endpoint: EndpointConfig,
        max_attempts: int = RetryDefaults.MAX_ATTEMPTS,
        delay_seconds: float = RetryDefaults.DELAY_SECONDS,
        connect: Optional[Callable[..., Any]] = None,
        sleep: Optional[Callable[[float], None]] = None
    ):
        """
        Args:
            endpoint: Where to connect and as whom
            max_attempts: Total attempts before giving up (>= 1)
            delay_seconds: Constant wait between two attempts (>= 0)
            connect: Replacement for psycopg.connect (tests)
            sleep: Replacement for time.sleep (tests)
        """
        if max_attempts < 1:
            raise ContractViolationError(f"max_attempts must be >= 1, got {max_attempts}")
        if delay_seconds < 0:
            raise ContractViolationError(f"delay_seconds must be >= 0, got {delay_seconds}")

        self.endpoint = endpoint
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self._connect = connect or psycopg.connect
        self._sleep = sleep or time.sleep

        # Attempts made by the most recent acquire() call
        self.attempts_made = 0

    @classmethod
    def from_config(cls, config, **kwargs) -> "ConnectionAcquirer":
        """Build from a BootstrapConfig (endpoint + retry policy)."""
        return cls(
            config.endpoint,
            max_attempts=config.retry.max_attempts,
            delay_seconds=config.retry.delay_seconds,
            **kwargs
        )

    # ========================================================================
    # ACQUISITION
    # ========================================================================

    def acquire(self):
        """
        Return an open, probed session.

        Raises:
            ConnectionExhaustedError: all attempts failed; chained from the
                last underlying error
        """
        target = self.endpoint.display_name
        logger.info(
            f"🔌 Connecting to {target} "
            f"(up to {self.max_attempts} attempts, {self.delay_seconds}s apart)"
        )

        last_error: Optional[BaseException] = None
        self.attempts_made = 0

        for attempt in range(1, self.max_attempts + 1):
            self.attempts_made = attempt
            conn = None
            try:
                conn = self._connect(self.endpoint.conninfo, row_factory=dict_row)
                self._probe(conn)
                logger.info(f"✅ Connected to {target} on attempt {attempt}/{self.max_attempts}")
                return conn

            except (psycopg.Error, OSError) as e:
                last_error = e
                if conn is not None:
                    self._discard(conn)
                logger.warning(
                    f"⚠️ Attempt {attempt}/{self.max_attempts} failed: "
                    f"{type(e).__name__}: {str(e).strip()}"
                )
                if attempt < self.max_attempts:
                    logger.debug(f"⏳ Retrying in {self.delay_seconds}s")
                    self._sleep(self.delay_seconds)

        logger.error(f"❌ Could not connect to {target} after {self.max_attempts} attempts")
        raise ConnectionExhaustedError(self.max_attempts, last_error) from last_error

    def _probe(self, conn) -> None:
        """Round-trip a trivial query; leaves no transaction open."""
        with conn.cursor() as cur:
            cur.execute("SELECT 1")
            cur.fetchone()
        conn.rollback()

    def _discard(self, conn) -> None:
        """Close a handle that connected but failed the probe."""
        try:
            conn.close()
        except psycopg.Error as e:
            logger.debug(f"Closing half-open connection raised {type(e).__name__}: {e}")

    # ========================================================================
    # RELEASE
    # ========================================================================

    def release(self, conn) -> None:
        """Close a session returned by acquire()."""
        conn.close()
        logger.info(f"🔒 Session to {self.endpoint.display_name} released")

    @contextmanager
    def session(self) -> Iterator[Any]:
        """
        Acquire a session and release it exactly once on exit.

        Raises:
            ConnectionExhaustedError: on entry, when no session could be opened
        """
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)
