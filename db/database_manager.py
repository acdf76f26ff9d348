"""Central database manager for project-wide use.

Owns the connection pool and the statement executor, and provides schema
management for the ``users`` table. Supports both PostgreSQL (through a
psycopg2 pool) and local SQLite files.
"""

import logging
from types import TracebackType
from typing import Dict, List, Optional, Type, cast

from .config import ConnectionType, DatabaseConfig
from .exceptions import DatabaseError
from .interfaces import ConnectionPool
from .pool import create_pool
from .statement import PreparedStatement
from .statement_executor import StatementExecutor

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Centralized manager for the database pool and schema.

    All statement execution goes through ``self.executor``; the manager itself
    only creates the pool and the application tables.
    """

    USERS_TABLE = "users"

    def __init__(
        self,
        config: Optional[DatabaseConfig] = None,
        *,
        pool: Optional[ConnectionPool] = None,
        debug_util: Optional[object] = None,
    ) -> None:
        """Initialize a DatabaseManager.

        Args:
            config: Connection settings. Read from the environment when None.
            pool: Ready-made pool to use instead of building one from ``config``.
            debug_util: Optional DebugUtil instance for handling debug output.

        Raises:
            DBConnectionError: If the pool cannot be created.
        """
        self.config = config or DatabaseConfig.from_env()
        self.pool: ConnectionPool = pool if pool is not None else create_pool(self.config)
        self.debug_util = debug_util
        self.executor = StatementExecutor(
            self.pool,
            connection_type=self.config.connection_type,
            key_column=self.config.key_column,
            debug_util=debug_util,
        )
        self._closed = False

    @property
    def is_postgres(self) -> bool:
        return self.config.connection_type == ConnectionType.POSTGRES

    def _execute_ddl(self, query: str) -> None:
        """Execute a DDL statement, raising the translated error on failure."""
        result = self.executor.run(query, (), PreparedStatement.execute_update)
        if not result.ok:
            assert result.error is not None
            raise result.error

    def _fetch_rows(self, query: str, params: tuple = ()) -> List[Dict[str, object]]:
        result = self.executor.run(query, params, PreparedStatement.execute_query)
        if not result.ok:
            assert result.error is not None
            raise result.error
        return result.value or []

    def _create_users_table(self) -> None:
        """Create the users table with an auto-generated integer key if it does not exist."""
        if self.is_postgres:
            ddl = f"""
                CREATE TABLE IF NOT EXISTS {self.USERS_TABLE} (
                    {self.config.key_column} SERIAL PRIMARY KEY,
                    login VARCHAR(255)
                )
                """
        else:
            ddl = f"""
                CREATE TABLE IF NOT EXISTS {self.USERS_TABLE} (
                    {self.config.key_column} INTEGER PRIMARY KEY AUTOINCREMENT,
                    login TEXT
                )
                """
        self._execute_ddl(ddl)

    def init_tables(self) -> None:
        """Initialize all database tables by creating them if they do not exist."""
        self._create_users_table()
        logger.info("Database tables initialized")

    def drop_tables(self) -> None:
        """Drop every application table."""
        self._execute_ddl(f"DROP TABLE IF EXISTS {self.USERS_TABLE}")

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists in the database (backend-agnostic).

        Args:
            table_name: Name of the table to check
        Returns:
            True if the table exists, False otherwise
        """
        return table_name in self.list_tables()

    def list_tables(self) -> List[str]:
        """Return a list of all user table names in the database, backend-agnostic."""
        if self.is_postgres:
            query = (
                "SELECT table_name FROM information_schema.tables "
                "WHERE table_schema = current_schema() AND table_type = 'BASE TABLE' "
                "ORDER BY table_name"
            )
        else:
            query = (
                "SELECT name AS table_name FROM sqlite_master "
                "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
            )
        return [cast(str, row["table_name"]) for row in self._fetch_rows(query)]

    def close(self) -> None:
        """Close every pooled connection.

        Raises:
            DatabaseError: If closing the pool fails.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self.pool.closeall()
        except Exception as e:
            logger.error("Error closing connection pool: %s", e)
            raise DatabaseError(f"Error closing connection pool: {e}") from e

    def __enter__(self) -> "DatabaseManager":
        """Context manager protocol support.

        Returns:
            Self for using in with statements.
        """
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Context manager protocol support - close the pool when exiting context."""
        self.close()
