"""Connection configuration for the data-access layer.

Values come from ``DBSTORE_*`` environment variables by default so that the
same code can run against a local SQLite file or a PostgreSQL server.
"""

from __future__ import annotations

import enum
from typing import Optional
from urllib.parse import quote

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "DBSTORE_"


class ConnectionType(enum.Enum):
    """Connection type enum for database connections."""

    POSTGRES = "postgres"
    SQLITE = "sqlite"


class DatabaseConfig(BaseSettings):
    """Settings needed to build a connection pool, read from ``DBSTORE_*`` variables.

    Attributes:
        connection_type: Backend to connect to.
        dsn: Full PostgreSQL DSN; overrides the individual fields when set.
        host: PostgreSQL host.
        port: PostgreSQL port.
        database: PostgreSQL database name.
        username: PostgreSQL user.
        password: PostgreSQL password.
        sqlite_path: Database file used for SQLite connections.
        min_connections: Connections a PostgreSQL pool opens up front.
        max_connections: Upper bound on connections in use at once.
        key_column: Auto-generated identifier column returned for inserts.
    """

    connection_type: ConnectionType = ConnectionType.POSTGRES
    dsn: Optional[str] = None
    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    database: str = "dbstore"
    username: str = "postgres"
    password: str = ""
    sqlite_path: str = "dbstore.db"
    min_connections: int = Field(default=1, ge=0)
    max_connections: int = Field(default=10, ge=1)
    key_column: str = "id"

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("key_column")
    @classmethod
    def validate_key_column(cls, v: str) -> str:
        """Key column is spliced into SQL, so it must be a bare identifier."""
        stripped_v = v.strip()
        if not stripped_v or not all(c.isalnum() or c == "_" for c in stripped_v):
            raise ValueError("key_column must be a plain SQL identifier.")
        return stripped_v

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "DatabaseConfig":
        """Reject pools that could never hand out a connection."""
        if self.max_connections < max(1, self.min_connections):
            raise ValueError(
                f"max_connections ({self.max_connections}) must be >= min_connections ({self.min_connections})"
            )
        return self

    def build_dsn(self) -> str:
        """Return the configured DSN or assemble one from the individual fields."""
        if self.dsn:
            return self.dsn
        credentials = quote(self.username, safe="")
        if self.password:
            credentials = f"{credentials}:{quote(self.password, safe='')}"
        return f"postgresql://{credentials}@{self.host}:{self.port}/{self.database}"

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Create a config from ``DBSTORE_*`` variables, falling back to defaults.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        return cls()
