"""User Store for CRUD operations.

Handles all DB access for users through a StatementExecutor. None of these
methods raise on database failure: the executor logs the error and each
method falls back to a documented default.
"""

import logging
from typing import List, Optional

from db.interfaces import StatementRunner
from db.statement import KeyMode, PreparedStatement
from models.user import User

logger = logging.getLogger(__name__)


class UserStore:
    """CRUD operations and queries for `User` objects via a statement executor."""

    TABLE_NAME = "users"

    def __init__(self, *, executor: StatementRunner, key_column: str = "id") -> None:
        """Create a new `UserStore` bound to the given executor."""
        self.executor: StatementRunner = executor
        self.key_column = key_column
        self._columns = f"{key_column} AS id, login"

    def add(self, user: User) -> User:
        """Insert ``user`` and copy the generated id into it.

        On failure the user is returned unmodified, with its id still unset.
        That includes an exhausted connection pool: the insert is not retried.
        """

        def _insert(ps: PreparedStatement) -> Optional[int]:
            ps.execute_update()
            keys = ps.generated_keys()
            return int(str(keys[0][0])) if keys else None

        new_id = self.executor.execute(
            f"INSERT INTO {self.TABLE_NAME} (login) VALUES (?)",
            [user.login],
            _insert,
            KeyMode.RETURN_GENERATED_KEYS,
        )
        if new_id is not None:
            user.user_id = new_id
        else:
            logger.debug("User %r was not added", user.login)
        return user

    def find_all(self) -> List[User]:
        """Return all users ordered by id; empty on failure."""

        def _read(ps: PreparedStatement) -> List[User]:
            return [User.from_row(row) for row in ps.execute_query()]

        users = self.executor.execute(
            f"SELECT {self._columns} FROM {self.TABLE_NAME} ORDER BY {self.key_column}",
            [],
            _read,
        )
        return users if users is not None else []

    def find_by_id(self, user_id: int) -> User:
        """Return the user with ``user_id``, or an empty `User` if none matches or the query fails."""

        def _read(ps: PreparedStatement) -> User:
            rows = ps.execute_query()
            return User.from_row(rows[0]) if rows else User()

        user = self.executor.execute(
            f"SELECT {self._columns} FROM {self.TABLE_NAME} WHERE {self.key_column} = ?",
            [user_id],
            _read,
        )
        return user if user is not None else User()

    def update(self, user: User) -> None:
        """Overwrite the login of the stored user with the same id."""
        self.executor.execute_void(
            f"UPDATE {self.TABLE_NAME} SET login = ? WHERE {self.key_column} = ?",
            [user.login, user.user_id],
            PreparedStatement.execute_update,
        )

    def delete(self, user_id: int) -> None:
        """Delete the user with ``user_id``; deleting a missing user is a no-op."""
        self.executor.execute_void(
            f"DELETE FROM {self.TABLE_NAME} WHERE {self.key_column} = ?",
            [user_id],
            PreparedStatement.execute_update,
        )
