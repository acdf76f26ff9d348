"""Tests for translating driver exceptions into the database exception taxonomy."""

import sqlite3

import psycopg2
import pytest

from db.exceptions import (
    ConstraintError,
    DatabaseError,
    DatabaseTypeError,
    DBConnectionError,
    ForeignKeyError,
    IntegrityError,
    ParameterBindingError,
    SchemaError,
    TableNotFoundError,
    UnsupportedParameterTypeError,
    translate_error,
)


class TestTaxonomy:
    """Test cases for the exception hierarchy."""

    def test_binding_errors_are_type_errors(self) -> None:
        assert issubclass(UnsupportedParameterTypeError, ParameterBindingError)
        assert issubclass(ParameterBindingError, DatabaseTypeError)
        assert issubclass(ParameterBindingError, TypeError)

    def test_taxonomy_errors_pass_through(self) -> None:
        error = SchemaError("bad column")
        assert translate_error(error) is error


class TestSQLiteTranslation:
    """Test cases for sqlite3 exceptions."""

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (sqlite3.OperationalError("no such table: users"), TableNotFoundError),
            (sqlite3.OperationalError("no such column: nickname"), SchemaError),
            (sqlite3.OperationalError("table users has no column named nickname"), SchemaError),
            (sqlite3.OperationalError("unable to open database file"), DBConnectionError),
            (sqlite3.OperationalError("near \"SELEC\": syntax error"), DatabaseError),
            (sqlite3.IntegrityError("FOREIGN KEY constraint failed"), ForeignKeyError),
            (sqlite3.IntegrityError("NOT NULL constraint failed: users.login"), ConstraintError),
            (sqlite3.IntegrityError("UNIQUE constraint failed: users.login"), ConstraintError),
            (sqlite3.IntegrityError("CHECK constraint failed: positive_id"), IntegrityError),
            (sqlite3.ProgrammingError("Cannot operate on a closed database."), DBConnectionError),
            (sqlite3.InterfaceError("Error binding parameter 1"), DatabaseTypeError),
        ],
    )
    def test_translation(self, exc: Exception, expected: type) -> None:
        translated = translate_error(exc)
        assert type(translated) is expected
        assert translated.__cause__ is exc

    def test_real_constraint_violation(self, tmp_path) -> None:
        conn = sqlite3.connect(str(tmp_path / "constraints.db"))
        try:
            conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, login TEXT NOT NULL)")
            with pytest.raises(sqlite3.IntegrityError) as info:
                conn.execute("INSERT INTO users (login) VALUES (NULL)")
        finally:
            conn.close()
        assert isinstance(translate_error(info.value), ConstraintError)


class TestPostgresTranslation:
    """Test cases for psycopg2 exceptions."""

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (psycopg2.OperationalError("could not connect to server: Connection refused"), DBConnectionError),
            (psycopg2.ProgrammingError('relation "users" does not exist'), TableNotFoundError),
            (psycopg2.ProgrammingError('column "nickname" does not exist'), SchemaError),
            (psycopg2.ProgrammingError('syntax error at or near "SELEC"'), DatabaseError),
            (psycopg2.IntegrityError("insert or update violates foreign key constraint"), ForeignKeyError),
            (psycopg2.IntegrityError('null value in column "login" violates not-null constraint'), ConstraintError),
            (psycopg2.IntegrityError("duplicate key value violates unique constraint"), ConstraintError),
            (psycopg2.IntegrityError("new row violates check constraint"), IntegrityError),
            (psycopg2.DataError("invalid input syntax for type integer"), DatabaseTypeError),
            (psycopg2.InterfaceError("cursor already closed"), DBConnectionError),
        ],
    )
    def test_translation(self, exc: Exception, expected: type) -> None:
        translated = translate_error(exc)
        assert type(translated) is expected
        assert translated.__cause__ is exc


def test_unknown_exception_is_wrapped() -> None:
    exc = KeyError("login")
    translated = translate_error(exc)
    assert type(translated) is DatabaseError
    assert "Unexpected database error" in str(translated)
    assert translated.__cause__ is exc
