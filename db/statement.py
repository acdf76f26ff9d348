"""Prepared statement over a DB-API cursor.

SQL is written with ``?`` positional placeholders. Values are bound by
1-based position through typed setters and handed to the driver, in its own
paramstyle, when the statement executes.
"""

import enum
import re
from types import TracebackType
from typing import Dict, List, Optional, Tuple, Type, cast

from .config import ConnectionType
from .exceptions import DatabaseError, ParameterBindingError
from .interfaces import CursorProtocol

_INSERT_RE = re.compile(r"(?i)^\s*INSERT\s")


class KeyMode(enum.Enum):
    """Whether a statement exposes auto-generated keys after execution."""

    NO_GENERATED_KEYS = "no_generated_keys"
    RETURN_GENERATED_KEYS = "return_generated_keys"


class PreparedStatement:
    """A single-use parameterized statement bound to an open cursor.

    Placeholders are counted with a plain ``?`` scan, so a literal question
    mark inside a quoted string is treated as a placeholder too.
    """

    def __init__(
        self,
        cursor: CursorProtocol,
        sql: str,
        *,
        connection_type: ConnectionType = ConnectionType.POSTGRES,
        key_mode: KeyMode = KeyMode.NO_GENERATED_KEYS,
        key_column: str = "id",
    ) -> None:
        self._cursor = cursor
        self.sql = sql
        self.connection_type = connection_type
        self.key_mode = key_mode
        self.key_column = key_column
        self.parameter_count = sql.count("?")
        self.closed = False
        self._params: Dict[int, object] = {}
        self._generated_keys: List[Tuple[object, ...]] = []

    # --- parameter binding ---

    def set_int(self, index: int, value: int) -> "PreparedStatement":
        """Bind an integer at 1-based ``index``."""
        return self._set(index, int(value))

    def set_string(self, index: int, value: str) -> "PreparedStatement":
        """Bind a string at 1-based ``index``."""
        return self._set(index, str(value))

    def set_float(self, index: int, value: float) -> "PreparedStatement":
        """Bind a float at 1-based ``index``."""
        return self._set(index, float(value))

    def set_bool(self, index: int, value: bool) -> "PreparedStatement":
        """Bind a boolean at 1-based ``index``."""
        return self._set(index, bool(value))

    def clear_parameters(self) -> None:
        """Forget every bound value."""
        self._params.clear()

    def _set(self, index: int, value: object) -> "PreparedStatement":
        self._check_open()
        if not 1 <= index <= self.parameter_count:
            raise ParameterBindingError(
                f"Parameter index {index} is out of range (statement has {self.parameter_count} placeholders)"
            )
        self._params[index] = value
        return self

    @property
    def parameters(self) -> Tuple[object, ...]:
        """Bound values in placeholder order.

        Raises:
            ParameterBindingError: If any placeholder has no value.
        """
        for index in range(1, self.parameter_count + 1):
            if index not in self._params:
                raise ParameterBindingError(f"No value specified for parameter {index}")
        return tuple(self._params[index] for index in range(1, self.parameter_count + 1))

    # --- execution ---

    def execute_query(self) -> List[Dict[str, object]]:
        """Run the statement and return every row as a dict keyed by column name."""
        self._execute(self._driver_sql())
        rows = cast(List[Tuple[object, ...]], self._cursor.fetchall())
        if not rows:
            return []
        assert self._cursor.description is not None
        col_names = [cast(str, desc[0]) for desc in self._cursor.description]
        return [{col_names[i]: row[i] for i in range(len(col_names))} for row in rows]

    def execute_update(self) -> int:
        """Run a data-modifying statement and return the affected row count.

        In RETURN_GENERATED_KEYS mode the generated keys are captured for
        ``generated_keys()``.
        """
        returning = self._returns_keys_inline()
        query = self._driver_sql()
        if returning:
            query = f"{query.rstrip().rstrip(';')} RETURNING {self.key_column}"
        self._execute(query)

        if self.key_mode is KeyMode.RETURN_GENERATED_KEYS:
            if returning:
                self._generated_keys = [tuple(row) for row in self._cursor.fetchall()]
            elif self._cursor.lastrowid is not None:
                self._generated_keys = [(self._cursor.lastrowid,)]
            else:
                self._generated_keys = []
        return self._cursor.rowcount

    def generated_keys(self) -> List[Tuple[object, ...]]:
        """Rows of keys generated by the last ``execute_update``.

        Raises:
            DatabaseError: If the statement was not prepared to return keys.
        """
        self._check_open()
        if self.key_mode is not KeyMode.RETURN_GENERATED_KEYS:
            raise DatabaseError("Generated keys were not requested for this statement")
        return list(self._generated_keys)

    def _execute(self, query: str) -> None:
        self._check_open()
        self._cursor.execute(query, self.parameters)

    def _returns_keys_inline(self) -> bool:
        return (
            self.key_mode is KeyMode.RETURN_GENERATED_KEYS
            and self.connection_type == ConnectionType.POSTGRES
            and bool(_INSERT_RE.match(self.sql))
        )

    def _driver_sql(self) -> str:
        """Convert ``?`` placeholders into the driver's paramstyle."""
        if self.connection_type == ConnectionType.POSTGRES:
            # psycopg2 uses the format paramstyle; escape literal percent signs first.
            return self.sql.replace("%", "%%").replace("?", "%s")
        return self.sql

    # --- lifecycle ---

    def _check_open(self) -> None:
        if self.closed:
            raise DatabaseError("Statement is closed")

    def close(self) -> None:
        """Close the underlying cursor. Calling twice is a no-op."""
        if self.closed:
            return
        self.closed = True
        self._cursor.close()

    def __enter__(self) -> "PreparedStatement":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
