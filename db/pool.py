"""Connection pool construction.

PostgreSQL connections come from psycopg2's thread-safe pool. SQLite has no
pool of its own, so SQLiteConnectionPool offers the same getconn/putconn/closeall
surface over short-lived file connections.
"""

import logging
import sqlite3
import threading
from typing import Dict

import psycopg2
from psycopg2 import pool as psycopg2_pool

from .config import ConnectionType, DatabaseConfig
from .exceptions import DBConnectionError
from .interfaces import ConnectionPool

logger = logging.getLogger(__name__)


class SQLiteConnectionPool:
    """Hand out SQLite connections to a single database file.

    Every ``getconn`` opens a fresh connection with foreign keys enabled and
    ``putconn`` closes it, so no state is shared between callers.
    """

    def __init__(self, path: str, maxconn: int = 10) -> None:
        if path == ":memory:":
            # Each connection would see its own empty database.
            raise DBConnectionError("SQLiteConnectionPool requires a database file, not ':memory:'")
        self.path = path
        self.maxconn = maxconn
        self.closed = False
        self._used: Dict[int, sqlite3.Connection] = {}
        self._lock = threading.Lock()

    def getconn(self) -> sqlite3.Connection:
        """Open a connection, failing when the pool is closed or exhausted.

        There is no waiting: like psycopg2's ThreadedConnectionPool, a request
        beyond ``maxconn`` raises at once. StatementExecutor reports that as a
        CONNECTIVITY failure, so size ``max_connections`` for the number of
        threads that run statements concurrently.
        """
        with self._lock:
            if self.closed:
                raise DBConnectionError("Connection pool is closed")
            if len(self._used) >= self.maxconn:
                raise DBConnectionError(f"Connection pool exhausted ({self.maxconn} connections in use)")
            try:
                conn = sqlite3.connect(self.path, check_same_thread=False)
                conn.execute("PRAGMA foreign_keys = ON")
            except sqlite3.Error as e:
                raise DBConnectionError(f"Failed to open SQLite database '{self.path}': {e}") from e
            self._used[id(conn)] = conn
            return conn

    def putconn(self, conn: sqlite3.Connection) -> None:
        """Close a connection obtained from this pool."""
        with self._lock:
            if self._used.pop(id(conn), None) is None:
                raise DBConnectionError("Trying to put back a connection this pool does not own")
        conn.close()

    def closeall(self) -> None:
        """Close every outstanding connection and refuse further requests."""
        with self._lock:
            self.closed = True
            outstanding = list(self._used.values())
            self._used.clear()
        for conn in outstanding:
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.warning("Error closing SQLite connection: %s", e)

    @property
    def in_use(self) -> int:
        """Number of connections currently handed out."""
        return len(self._used)


def create_pool(config: DatabaseConfig) -> ConnectionPool:
    """Build the pool described by ``config``.

    Both pools raise DBConnectionError from ``getconn`` once
    ``max_connections`` connections are in use; neither blocks.

    Raises:
        DBConnectionError: If the pool cannot be created.
    """
    if config.connection_type == ConnectionType.SQLITE:
        logger.info("Using SQLite database at '%s'", config.sqlite_path)
        return SQLiteConnectionPool(config.sqlite_path, maxconn=config.max_connections)

    if config.connection_type == ConnectionType.POSTGRES:
        logger.info(
            "Creating PostgreSQL pool for %s:%s/%s (%s-%s connections)",
            config.host,
            config.port,
            config.database,
            config.min_connections,
            config.max_connections,
        )
        try:
            return psycopg2_pool.ThreadedConnectionPool(
                config.min_connections,
                config.max_connections,
                dsn=config.build_dsn(),
            )
        except (psycopg2.Error, psycopg2_pool.PoolError) as e:
            raise DBConnectionError(f"Failed to create PostgreSQL connection pool: {e}") from e

    raise DBConnectionError(f"Unsupported connection type: {config.connection_type}")
