"""Parameterized statement execution with scoped resources.

Every call acquires its own pooled connection and prepared statement, binds
the parameters, runs a caller-supplied operation against the open statement
and releases both resources before returning. Failures never propagate:
``run`` reports them as an ExecutionResult, ``execute`` as None.
"""

import contextlib
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, Optional, Sequence, TypeVar

from .binder import ParameterBinder
from .config import ConnectionType
from .exceptions import (
    DatabaseError,
    DBConnectionError,
    ParameterBindingError,
    translate_error,
)
from .interfaces import ConnectionPool, ConnectionProtocol
from .statement import KeyMode, PreparedStatement

logger = logging.getLogger(__name__)

R = TypeVar("R")

StatementOperation = Callable[[PreparedStatement], R]


class ErrorKind(enum.Enum):
    """Which stage of a call failed."""

    BINDING = "binding"
    CONNECTIVITY = "connectivity"
    STATEMENT = "statement"


@dataclass(frozen=True)
class ExecutionResult(Generic[R]):
    """Outcome of one statement execution: a value or a classified error."""

    value: Optional[R] = None
    error: Optional[DatabaseError] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def optional(self) -> Optional[R]:
        """Return the value on success and None on failure."""
        return self.value if self.ok else None

    @classmethod
    def success(cls, value: R) -> "ExecutionResult[R]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, error: DatabaseError) -> "ExecutionResult[R]":
        return cls(error=error, error_kind=kind)


def classify_error(error: DatabaseError, stage: ErrorKind) -> ErrorKind:
    """Return the kind for ``error`` raised while ``stage`` was in progress.

    The stage decides, not the error text: a "database is locked" error from
    an open connection is a statement failure. Binding errors are reported
    as BINDING wherever they surface, including unbound placeholders found
    at execute time.
    """
    if isinstance(error, ParameterBindingError):
        return ErrorKind.BINDING
    return stage


class StatementExecutor:
    """Run parameterized SQL against connections drawn from a pool.

    Handles connection and statement lifecycle, parameter binding, commit and
    rollback, and exception translation for callers such as ``UserStore``.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        connection_type: ConnectionType = ConnectionType.POSTGRES,
        key_column: str = "id",
        binder: Optional[ParameterBinder] = None,
        debug_util: Optional[object] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            pool: Source of connections; the executor never configures it.
            connection_type: Backend behind the pool, used for placeholder style
                and generated-key retrieval.
            key_column: Column returned as the generated key for inserts.
            binder: Parameter binder; a default one is created when omitted.
            debug_util: Optional DebugUtil instance for SQL tracing.
        """
        self._pool = pool
        self.connection_type = connection_type
        self.key_column = key_column
        self._binder = binder or ParameterBinder()
        self.debug_util = debug_util

    def _debug_message(self, *args: object) -> None:
        if self.debug_util and hasattr(self.debug_util, "debugMessage"):
            self.debug_util.debugMessage(*args)

    @contextlib.contextmanager
    def _connection(self) -> Iterator[ConnectionProtocol]:
        """Borrow a connection from the pool and always give it back."""
        try:
            conn = self._pool.getconn()
        except DBConnectionError:
            raise
        except Exception as e:
            raise DBConnectionError(f"Could not acquire a connection: {e}") from e
        try:
            yield conn
        finally:
            try:
                self._pool.putconn(conn)
            except Exception as release_exc:
                logger.warning("Failed to return connection to pool: %s", release_exc)

    @contextlib.contextmanager
    def _statement(self, conn: ConnectionProtocol, sql: str, key_mode: KeyMode) -> Iterator[PreparedStatement]:
        """Prepare a statement on ``conn`` and always close it."""
        statement = PreparedStatement(
            conn.cursor(),
            sql,
            connection_type=self.connection_type,
            key_mode=key_mode,
            key_column=self.key_column,
        )
        try:
            yield statement
        finally:
            try:
                statement.close()
            except Exception as close_exc:
                logger.warning("Failed to close statement: %s", close_exc)

    def run(
        self,
        sql: str,
        params: Sequence[object],
        operation: StatementOperation[R],
        key_mode: KeyMode = KeyMode.NO_GENERATED_KEYS,
    ) -> ExecutionResult[R]:
        """Execute ``sql`` and report the operation's value or what went wrong.

        Args:
            sql: Statement with ``?`` positional placeholders.
            params: Values bound to placeholders 1..n in order.
            operation: Called with the bound, still-open statement; it performs
                the execute call and extracts whatever the caller needs.
            key_mode: Whether the statement should expose generated keys.

        Returns:
            A successful ExecutionResult holding the operation's return value,
            or a failed one carrying the translated error and its ErrorKind.
        """
        stage = ErrorKind.CONNECTIVITY
        try:
            with self._connection() as conn:
                stage = ErrorKind.STATEMENT
                try:
                    with self._statement(conn, sql, key_mode) as statement:
                        self._binder.bind_all(statement, params)
                        self._debug_message(f"Executing SQL: {' '.join(sql.split())}; params={tuple(params)}")
                        value = operation(statement)
                    conn.commit()
                except Exception:
                    self._rollback(conn)
                    raise
        except Exception as e:
            error = translate_error(e)
            kind = classify_error(error, stage)
            logger.error("Statement failed (%s): %s; sql=%s", kind.value, error, sql, exc_info=e)
            return ExecutionResult.failure(kind, error)
        return ExecutionResult.success(value)

    def execute(
        self,
        sql: str,
        params: Sequence[object],
        operation: StatementOperation[R],
        key_mode: KeyMode = KeyMode.NO_GENERATED_KEYS,
    ) -> Optional[R]:
        """Execute ``sql`` and return the operation's value, or None on any failure."""
        return self.run(sql, params, operation, key_mode).optional()

    def execute_void(
        self,
        sql: str,
        params: Sequence[object],
        action: Callable[[PreparedStatement], object],
        key_mode: KeyMode = KeyMode.NO_GENERATED_KEYS,
    ) -> None:
        """Execute ``sql`` for its side effects; failures are logged only."""

        def _discarding(statement: PreparedStatement) -> bool:
            action(statement)
            return True

        self.execute(sql, params, _discarding, key_mode)

    def _rollback(self, conn: ConnectionProtocol) -> None:
        try:
            conn.rollback()
        except Exception as rollback_exc:
            logger.warning("Rollback failed: %s", rollback_exc)
