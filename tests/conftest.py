"""Pytest configuration for the test suite."""

import contextlib
import os
import sys
from pathlib import Path
from typing import Any, Callable, Generator, List, Optional, Sequence, Tuple

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from db.config import ConnectionType, DatabaseConfig
from db.database_manager import DatabaseManager
from db.statement_executor import StatementExecutor
from models.user_store import UserStore


class FakeCursor:
    """Records executed SQL and replays canned rows."""

    def __init__(
        self,
        events: List[str],
        rows: Optional[List[Tuple[object, ...]]] = None,
        description: Optional[Sequence[Sequence[object]]] = None,
        lastrowid: Optional[int] = None,
        rowcount: int = 1,
        fail_with: Optional[BaseException] = None,
    ) -> None:
        self.events = events
        self.rows = rows or []
        self.description = description
        self.lastrowid = lastrowid
        self.rowcount = rowcount
        self.fail_with = fail_with
        self.executed: List[Tuple[str, Tuple[object, ...]]] = []
        self.closed = False

    def execute(self, query: str, params: Tuple[object, ...] = ()) -> "FakeCursor":
        self.events.append("execute")
        self.executed.append((query, params))
        if self.fail_with is not None:
            raise self.fail_with
        return self

    def fetchall(self) -> List[Tuple[object, ...]]:
        return list(self.rows)

    def close(self) -> None:
        self.events.append("cursor.close")
        self.closed = True


class FakeConnection:
    def __init__(self, events: List[str], cursor: FakeCursor) -> None:
        self.events = events
        self._cursor = cursor

    def cursor(self) -> FakeCursor:
        self.events.append("cursor")
        return self._cursor

    def commit(self) -> None:
        self.events.append("commit")

    def rollback(self) -> None:
        self.events.append("rollback")

    def close(self) -> None:
        self.events.append("connection.close")


class FakePool:
    """Pool handing out a single FakeConnection and recording every call."""

    def __init__(self, cursor: Optional[FakeCursor] = None, fail_with: Optional[BaseException] = None) -> None:
        self.events: List[str] = []
        self.cursor = cursor or FakeCursor(self.events)
        self.cursor.events = self.events
        self.connection = FakeConnection(self.events, self.cursor)
        self.fail_with = fail_with

    def getconn(self) -> FakeConnection:
        self.events.append("getconn")
        if self.fail_with is not None:
            raise self.fail_with
        return self.connection

    def putconn(self, conn: Any) -> None:
        assert conn is self.connection
        self.events.append("putconn")

    def closeall(self) -> None:
        self.events.append("closeall")


@pytest.fixture(autouse=True)
def clean_dbstore_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DBSTORE_* variables from the developer's shell out of DatabaseConfig."""
    for name in list(os.environ):
        if name.startswith("DBSTORE_") and name != "DBSTORE_POSTGRES_IMAGE":
            monkeypatch.delenv(name)


@pytest.fixture
def make_pool() -> Callable[..., FakePool]:
    """Factory for FakePool; keyword arguments configure its FakeCursor."""

    def _make(*, pool_error: Optional[BaseException] = None, **cursor_kwargs: Any) -> FakePool:
        return FakePool(cursor=FakeCursor([], **cursor_kwargs), fail_with=pool_error)

    return _make


@pytest.fixture
def sqlite_config(tmp_path: Path) -> DatabaseConfig:
    return DatabaseConfig(connection_type=ConnectionType.SQLITE, sqlite_path=str(tmp_path / "dbstore_test.db"))


@pytest.fixture
def db_manager(sqlite_config: DatabaseConfig) -> Generator[DatabaseManager, None, None]:
    """Provide a DatabaseManager with the users table on a temporary SQLite file."""
    db = DatabaseManager(sqlite_config)
    db.init_tables()
    try:
        yield db
    finally:
        with contextlib.suppress(Exception):
            db.close()


@pytest.fixture
def executor(db_manager: DatabaseManager) -> StatementExecutor:
    return db_manager.executor


@pytest.fixture
def user_store(executor: StatementExecutor) -> UserStore:
    return UserStore(executor=executor)


@pytest.fixture(scope="session")
def docker_postgres_session() -> Generator[Any, None, None]:
    """Launch a shared PostgreSQL Docker container, or skip when Docker is unavailable."""
    pytest.importorskip("docker")
    from models.docker_manager import DockerManager

    try:
        manager = DockerManager()
        manager.start_postgres_container()
    except Exception as e:
        pytest.skip(f"PostgreSQL container is not available: {e}")
    try:
        yield manager
    finally:
        manager.remove_container()


@pytest.fixture
def postgres_config(docker_postgres_session: Any) -> Generator[DatabaseConfig, None, None]:
    """Provide a config for an isolated per-test PostgreSQL database."""
    tmp_db = docker_postgres_session.add_tmp_db()
    config: DatabaseConfig = docker_postgres_session.database_config(tmp_db, max_connections=4)
    try:
        yield config
    finally:
        with contextlib.suppress(Exception):
            docker_postgres_session.remove_tmp_db(tmp_db)


@pytest.fixture
def postgres_db_manager(postgres_config: DatabaseConfig) -> Generator[DatabaseManager, None, None]:
    db = DatabaseManager(postgres_config)
    db.init_tables()
    try:
        yield db
    finally:
        with contextlib.suppress(Exception):
            db.close()
