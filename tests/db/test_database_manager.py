"""Tests for the DatabaseManager class."""

from typing import Callable
from unittest.mock import MagicMock

import pytest

from db.config import ConnectionType, DatabaseConfig
from db.database_manager import DatabaseManager
from db.exceptions import DatabaseError, DBConnectionError
from db.statement import PreparedStatement


class TestDatabaseManagerInitialization:
    """Test cases for DatabaseManager initialization and basic functionality."""

    def test_init_with_sqlite(self, sqlite_config: DatabaseConfig) -> None:
        with DatabaseManager(sqlite_config) as db:
            assert not db.is_postgres
            assert db.executor.connection_type is ConnectionType.SQLITE
            assert db.executor.key_column == "id"

    def test_init_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.setenv("DBSTORE_CONNECTION_TYPE", "sqlite")
        monkeypatch.setenv("DBSTORE_SQLITE_PATH", str(tmp_path / "env.db"))
        with DatabaseManager() as db:
            assert db.config.sqlite_path == str(tmp_path / "env.db")

    def test_injected_pool_is_used(self, make_pool: Callable) -> None:
        pool = make_pool()
        db = DatabaseManager(DatabaseConfig(), pool=pool)
        assert db.pool is pool
        assert db.is_postgres

    def test_debug_util_is_forwarded(self, sqlite_config: DatabaseConfig) -> None:
        debug_util = MagicMock()
        with DatabaseManager(sqlite_config, debug_util=debug_util) as db:
            assert db.executor.debug_util is debug_util

    def test_context_manager_closes_pool(self, make_pool: Callable) -> None:
        pool = make_pool()
        with DatabaseManager(DatabaseConfig(), pool=pool):
            pass
        assert pool.events == ["closeall"]

    def test_close_is_idempotent(self, make_pool: Callable) -> None:
        pool = make_pool()
        db = DatabaseManager(DatabaseConfig(), pool=pool)
        db.close()
        db.close()
        assert pool.events.count("closeall") == 1

    def test_close_failure_raises(self, make_pool: Callable) -> None:
        pool = make_pool()
        pool.closeall = MagicMock(side_effect=RuntimeError("stuck"))
        with pytest.raises(DatabaseError, match="stuck"):
            DatabaseManager(DatabaseConfig(), pool=pool).close()


class TestSchema:
    """Test cases for table management."""

    def test_init_tables_creates_users(self, db_manager: DatabaseManager) -> None:
        assert db_manager.table_exists("users")
        assert "users" in db_manager.list_tables()

    def test_init_tables_is_repeatable(self, db_manager: DatabaseManager) -> None:
        db_manager.init_tables()
        assert db_manager.list_tables().count("users") == 1

    def test_drop_tables(self, db_manager: DatabaseManager) -> None:
        db_manager.drop_tables()
        assert not db_manager.table_exists("users")

    def test_users_id_is_generated(self, db_manager: DatabaseManager) -> None:
        db_manager.executor.execute_void(
            "INSERT INTO users (login) VALUES (?)", ["alice"], PreparedStatement.execute_update
        )
        rows = db_manager.executor.execute("SELECT id, login FROM users", [], PreparedStatement.execute_query)
        assert rows is not None
        assert rows[0]["login"] == "alice"
        assert isinstance(rows[0]["id"], int) and rows[0]["id"] > 0

    def test_ddl_failure_raises(self, make_pool: Callable) -> None:
        db = DatabaseManager(DatabaseConfig(), pool=make_pool(pool_error=OSError("down")))
        with pytest.raises(DBConnectionError):
            db.init_tables()


class TestPostgresDatabaseManager:
    """Integration tests against a PostgreSQL container (skipped without Docker)."""

    def test_init_tables(self, postgres_db_manager: DatabaseManager) -> None:
        assert postgres_db_manager.is_postgres
        assert postgres_db_manager.table_exists("users")

    def test_drop_tables(self, postgres_db_manager: DatabaseManager) -> None:
        postgres_db_manager.drop_tables()
        assert postgres_db_manager.list_tables() == []
