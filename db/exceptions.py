"""
Custom database exceptions for the dbstore data-access layer.
"""

import sqlite3
from typing import Optional

import psycopg2


class DatabaseError(Exception):
    """Base class for all database-related exceptions."""


class DBConnectionError(DatabaseError):
    """Raised when there are issues connecting to the database."""


class ForeignKeyError(DatabaseError):
    """Raised when a foreign key constraint fails."""


class ConstraintError(DatabaseError):
    """Raised when a database constraint is violated."""


class DatabaseTypeError(DatabaseError, TypeError):
    """Raised when there's a type mismatch in database operations."""


class ParameterBindingError(DatabaseTypeError):
    """Raised when a statement parameter cannot be bound to its placeholder."""


class UnsupportedParameterTypeError(ParameterBindingError):
    """Raised when no binding strategy exists for a parameter's type."""


class IntegrityError(DatabaseError):
    """Raised when database integrity is violated."""


class SchemaError(DatabaseError):
    """Raised when there are schema-related issues."""


class TableNotFoundError(DatabaseError):
    """Raised when a table is not found in the database."""


def translate_error(e: BaseException) -> DatabaseError:
    """Translate backend-specific exceptions to our custom exceptions.

    Errors that already belong to the taxonomy are returned unchanged. Anything
    else is wrapped, with the original chained as ``__cause__``.
    """
    if isinstance(e, DatabaseError):
        return e

    translated = _translate_postgres(e) or _translate_sqlite(e)
    if translated is None:
        translated = DatabaseError(f"Unexpected database error: {e}")
    translated.__cause__ = e
    return translated


def _translate_postgres(e: BaseException) -> Optional[DatabaseError]:
    if isinstance(e, (psycopg2.OperationalError, psycopg2.ProgrammingError)):
        error_msg = str(e).lower()
        if "connection" in error_msg or "could not connect" in error_msg:
            return DBConnectionError(f"Failed to connect to PostgreSQL database: {e}")
        if "does not exist" in error_msg and "relation" in error_msg:
            return TableNotFoundError(f"Table not found: {e}")
        if "column" in error_msg and "does not exist" in error_msg:
            return SchemaError(f"Schema error: {e}")
        return DatabaseError(f"Database operation failed: {e}")
    if isinstance(e, psycopg2.IntegrityError):
        error_msg = str(e).lower()
        if "foreign key" in error_msg:
            return ForeignKeyError(f"Foreign key constraint failed: {e}")
        if "not null" in error_msg or "not-null" in error_msg or "null value" in error_msg or "unique" in error_msg:
            return ConstraintError(f"Constraint violation: {e}")
        return IntegrityError(f"Integrity error: {e}")
    if isinstance(e, psycopg2.DataError):
        return DatabaseTypeError(f"Type error in query parameters: {e}")
    if isinstance(e, psycopg2.InterfaceError):
        return DBConnectionError(f"PostgreSQL connection unusable: {e}")
    if isinstance(e, psycopg2.DatabaseError):
        return DatabaseError(f"Database error: {e}")
    return None


def _translate_sqlite(e: BaseException) -> Optional[DatabaseError]:
    if isinstance(e, sqlite3.OperationalError):
        error_msg = str(e).lower()
        if "no such table" in error_msg:
            return TableNotFoundError(f"Table not found: {e}")
        if "no such column" in error_msg or "has no column" in error_msg:
            return SchemaError(f"Schema error: {e}")
        if "unable to open" in error_msg or "locked" in error_msg:
            return DBConnectionError(f"Failed to connect to SQLite database: {e}")
        return DatabaseError(f"Database operation failed: {e}")
    if isinstance(e, sqlite3.IntegrityError):
        error_msg = str(e).lower()
        if "foreign key" in error_msg:
            return ForeignKeyError(f"Foreign key constraint failed: {e}")
        if "not null" in error_msg or "unique" in error_msg:
            return ConstraintError(f"Constraint violation: {e}")
        return IntegrityError(f"Integrity error: {e}")
    if isinstance(e, sqlite3.ProgrammingError):
        error_msg = str(e).lower()
        if "closed" in error_msg:
            return DBConnectionError(f"SQLite connection unusable: {e}")
        return DatabaseError(f"Database operation failed: {e}")
    if isinstance(e, (sqlite3.DataError, sqlite3.InterfaceError)):
        return DatabaseTypeError(f"Type error in query parameters: {e}")
    if isinstance(e, sqlite3.DatabaseError):
        return DatabaseError(f"Database error: {e}")
    return None
