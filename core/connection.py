"""
core/connection.py
------------------
Pooled, verified connections to one target PostgreSQL database.

Design Decisions:
    * ``ConnectionManager`` wraps a ``psycopg2`` ``ThreadedConnectionPool``
      bounded to a small number of open (``max_open``) and idle
      (``max_idle``) connections, so concurrent migrations each borrow
      their own connection and never share one.
    * ``open()`` verifies reachability with a fixed number of probes
      separated by a fixed delay, then gives up with
      :class:`DatabaseConnectionError`. It never waits open-endedly.
    * Connections older than ``max_lifetime`` seconds are closed instead of
      being handed out or put back, so a long-lived process does not keep
      stale connections to a remote database. Age is counted from the
      moment :class:`TimedConnectionPool` opened the connection.
    * Pool exhaustion raises immediately instead of blocking.
    * ``close()`` is idempotent and safe after a failed ``open()``.
"""
from __future__ import annotations

import threading
import time
import weakref
from contextlib import contextmanager
from typing import Callable, Iterator

import psycopg2
from psycopg2.extensions import connection as PgConnection
from psycopg2.pool import ThreadedConnectionPool

from config import CONFIG
from core.exceptions import DatabaseConnectionError
from logger import get_logger
from models.target import safe_dsn

log = get_logger(__name__)


class TimedConnectionPool(ThreadedConnectionPool):
    """``ThreadedConnectionPool`` that reports each connection as it is opened."""

    def __init__(
        self,
        minconn: int,
        maxconn: int,
        *args,
        on_connect: Callable[[PgConnection], None],
        **kwargs,
    ) -> None:
        # Set before super().__init__, which opens the first minconn connections.
        self._on_connect = on_connect
        super().__init__(minconn, maxconn, *args, **kwargs)

    def _connect(self, key=None):
        conn = super()._connect(key)
        self._on_connect(conn)
        return conn


class ConnectionManager:
    """
    Owns the connection pool for one target database.

    Args:
        dsn:             libpq connection string or URL.
        max_open:        Upper bound on simultaneously open connections.
        max_idle:        Connections kept open in the pool between uses.
        max_lifetime:    Seconds after which a connection is retired.
        probe_attempts:  Connectivity probes performed by ``open()``.
        probe_delay:     Seconds to wait between failed probes.
        connect_timeout: Per-connection-attempt timeout passed to libpq.

    Example::

        with ConnectionManager(dsn) as manager:
            with manager.connection() as conn:
                ...
    """

    def __init__(
        self,
        dsn: str,
        max_open: int | None = None,
        max_idle: int | None = None,
        max_lifetime: float | None = None,
        probe_attempts: int | None = None,
        probe_delay: float | None = None,
        connect_timeout: int | None = None,
    ) -> None:
        if not dsn:
            raise DatabaseConnectionError("no database connection string available")
        self._dsn = dsn
        self._max_open = max_open or CONFIG.db.pool_max_open
        self._max_idle = min(
            max_idle if max_idle is not None else CONFIG.db.pool_max_idle,
            self._max_open,
        )
        self._max_lifetime = max_lifetime or CONFIG.db.conn_max_lifetime
        self._probe_attempts = probe_attempts or CONFIG.db.probe_attempts
        self._probe_delay = (
            probe_delay if probe_delay is not None else CONFIG.db.probe_delay
        )
        self._connect_timeout = connect_timeout or CONFIG.db.connect_timeout

        self._pool: ThreadedConnectionPool | None = None
        self._born: weakref.WeakKeyDictionary[PgConnection, float] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "ConnectionManager":
        if self._pool is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        pool = self._pool
        return pool is not None and not pool.closed

    def open(self) -> "ConnectionManager":
        """
        Create the pool and verify the database answers.

        Raises:
            DatabaseConnectionError: If every probe failed. The last driver
                error is chained as ``__cause__``.
        """
        last_exc: Exception | None = None
        for attempt in range(1, self._probe_attempts + 1):
            try:
                log.info(
                    "Connecting to %s (attempt %d/%d)",
                    safe_dsn(self._dsn), attempt, self._probe_attempts,
                )
                if self._pool is None:
                    self._pool = TimedConnectionPool(
                        self._max_idle,
                        self._max_open,
                        self._dsn,
                        connect_timeout=self._connect_timeout,
                        on_connect=self._track,
                    )
                self.ping()
                log.info("Connected to target database.")
                return self
            except (psycopg2.Error, DatabaseConnectionError) as exc:
                last_exc = exc
                log.warning("Connection attempt %d failed: %s", attempt, exc)
                if attempt < self._probe_attempts:
                    time.sleep(self._probe_delay)

        self.close()
        raise DatabaseConnectionError(
            f"failed to connect to database after {self._probe_attempts} "
            f"attempts: {last_exc}"
        ) from last_exc

    def close(self) -> None:
        """Close every pooled connection. Safe to call repeatedly."""
        with self._lock:
            pool, self._pool = self._pool, None
            self._born.clear()
        if pool is None or pool.closed:
            return
        try:
            pool.closeall()
            log.info("Connection pool closed.")
        except psycopg2.Error as exc:
            log.warning("Error while closing connection pool: %s", exc)

    # ------------------------------------------------------------------
    # Checkout / return
    # ------------------------------------------------------------------

    def acquire(self) -> PgConnection:
        """
        Borrow a connection from the pool.

        Raises:
            DatabaseConnectionError: Pool not open, exhausted, or the
                connection could not be established.
        """
        pool = self._pool
        if pool is None:
            raise DatabaseConnectionError("connection pool is not open")
        while True:
            try:
                conn = pool.getconn()
            except psycopg2.Error as exc:
                raise DatabaseConnectionError(f"could not acquire connection: {exc}") from exc
            if conn.closed or self._expired(conn):
                log.debug("Retiring expired connection %#x", id(conn))
                self._discard(pool, conn)
                continue
            return conn

    def release(self, conn: PgConnection | None) -> None:
        """Return *conn* to the pool (or close it once the pool is gone). No-op for None."""
        if conn is None:
            return
        pool = self._pool
        if pool is None or pool.closed:
            if not conn.closed:
                conn.close()
            return
        if conn.closed or self._expired(conn):
            self._discard(pool, conn)
            return
        pool.putconn(conn)

    @contextmanager
    def connection(self) -> Iterator[PgConnection]:
        """Scoped checkout: the connection is returned on every exit path."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def ping(self) -> None:
        """Run ``SELECT 1`` on a pooled connection."""
        with self.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            conn.rollback()

    # ------------------------------------------------------------------
    # Lifetime bookkeeping
    # ------------------------------------------------------------------

    def _track(self, conn: PgConnection) -> None:
        with self._lock:
            self._born[conn] = time.monotonic()

    def _expired(self, conn: PgConnection) -> bool:
        now = time.monotonic()
        with self._lock:
            # Connections not opened through TimedConnectionPool age from first use.
            born = self._born.setdefault(conn, now)
        return now - born > self._max_lifetime

    def _discard(self, pool: ThreadedConnectionPool, conn: PgConnection) -> None:
        with self._lock:
            self._born.pop(conn, None)
        if not pool.closed:
            pool.putconn(conn, close=True)
        elif not conn.closed:
            conn.close()
