"""Shared database interface definitions.

This module provides lightweight typing Protocols for database interactions,
so models and services can depend on abstractions instead of concrete
implementations. This helps with testability and decoupling.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Callable,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    TypeVar,
)

if TYPE_CHECKING:
    from db.statement import KeyMode, PreparedStatement
    from db.statement_executor import ExecutionResult

R = TypeVar("R")
T = TypeVar("T")


class CursorProtocol(Protocol):
    """Minimal DB-API cursor protocol used by PreparedStatement."""

    def execute(self, query: str, params: Tuple[object, ...] = ...) -> object:
        """Execute a single SQL statement with optional parameters."""
        ...

    def fetchall(self) -> List[Tuple[object, ...]]:
        """Fetch all remaining rows of a query result."""
        ...

    def close(self) -> None:
        """Close the cursor."""
        ...

    @property
    def description(self) -> Optional[Sequence[Sequence[object]]]:
        """DB-API cursor description: column metadata or None before execution."""
        ...

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last statement."""
        ...

    @property
    def lastrowid(self) -> Optional[int]:
        """Row id of the last inserted row (SQLite)."""
        ...


class ConnectionProtocol(Protocol):
    """Minimal DB-API connection protocol used by StatementExecutor."""

    def cursor(self) -> CursorProtocol:
        """Return a new database cursor."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    def close(self) -> None:
        """Close the underlying connection."""
        ...


class ConnectionPool(Protocol):
    """Connection pool surface shared by psycopg2 pools and SQLiteConnectionPool."""

    def getconn(self) -> ConnectionProtocol:
        """Acquire a connection; may block or fail."""
        ...

    def putconn(self, conn: ConnectionProtocol) -> None:
        """Give a connection back to the pool."""
        ...

    def closeall(self) -> None:
        """Close every connection owned by the pool."""
        ...


class StatementRunner(Protocol):
    """Protocol for parameterized statement execution used by stores.

    Implemented by `db.statement_executor.StatementExecutor`.
    """

    def run(
        self,
        sql: str,
        params: Sequence[object],
        operation: Callable[[PreparedStatement], R],
        key_mode: KeyMode = ...,
    ) -> ExecutionResult[R]:
        """Execute and report success or the kind of failure."""
        ...

    def execute(
        self,
        sql: str,
        params: Sequence[object],
        operation: Callable[[PreparedStatement], R],
        key_mode: KeyMode = ...,
    ) -> Optional[R]:
        """Execute and return the operation's result, or None on failure."""
        ...

    def execute_void(
        self,
        sql: str,
        params: Sequence[object],
        action: Callable[[PreparedStatement], object],
        key_mode: KeyMode = ...,
    ) -> None:
        """Execute for side effects only."""
        ...


class Store(Protocol[T]):
    """CRUD operations over one kind of record.

    Arguments are positional-only so implementations may name them after
    their record type.
    """

    def add(self, model: T, /) -> T:
        """Persist a new record and return it with its identifier set."""
        ...

    def find_all(self) -> List[T]:
        """Return every record."""
        ...

    def find_by_id(self, record_id: int, /) -> T:
        """Return the record with the given id, or an empty record."""
        ...

    def update(self, model: T, /) -> None:
        """Overwrite the stored record that has the model's id."""
        ...

    def delete(self, record_id: int, /) -> None:
        """Remove the record with the given id."""
        ...
