"""Docker manager for throwaway PostgreSQL containers.

Used by the integration tests to run the store against a real server.
"""

import logging
import os
import time
import uuid
from types import TracebackType
from typing import Any, Dict, Optional, Type

import docker
import psycopg2
from docker.errors import APIError, ImageNotFound, NotFound

from db.config import ConnectionType, DatabaseConfig

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TAG = "postgres:16-alpine"
IMAGE_ENV = "DBSTORE_POSTGRES_IMAGE"


class DockerManager:
    """Manages PostgreSQL Docker container lifecycle."""

    def __init__(self, image_tag: Optional[str] = None) -> None:
        """Initialize the Docker client.

        Raises:
            docker.errors.DockerException: If the Docker daemon cannot be reached.
        """
        self.client = docker.from_env()
        self.client.ping()
        self.container: Optional[Any] = None
        self.connection_params: Dict[str, Any] = {}
        self.image_tag = image_tag or os.environ.get(IMAGE_ENV, DEFAULT_IMAGE_TAG)

    def start_postgres_container(
        self,
        container_name: Optional[str] = None,
        postgres_user: str = "dbstore",
        postgres_password: str = "dbstore",
        postgres_db: str = "dbstore",
    ) -> Dict[str, Any]:
        """Start a PostgreSQL container on a free host port and return connection parameters."""
        name = container_name or f"dbstore-pg-{uuid.uuid4().hex[:8]}"
        self.ensure_image()
        logger.info("Starting PostgreSQL container '%s' with image '%s'", name, self.image_tag)
        try:
            self.container = self.client.containers.run(
                self.image_tag,
                name=name,
                environment={
                    "POSTGRES_USER": postgres_user,
                    "POSTGRES_PASSWORD": postgres_password,
                    "POSTGRES_DB": postgres_db,
                },
                ports={"5432/tcp": ("127.0.0.1", 0)},
                detach=True,
            )
            self.container.reload()
            mapping = self.container.attrs["NetworkSettings"]["Ports"]["5432/tcp"]
            port = int(mapping[0]["HostPort"])
            self.connection_params = {
                "host": "127.0.0.1",
                "port": port,
                "user": postgres_user,
                "password": postgres_password,
                "database": postgres_db,
            }
            self._wait_for_postgres()
            return self.get_connection_params()
        except Exception as e:
            logger.error("Error starting PostgreSQL container '%s': %s", name, e)
            self.remove_container()
            raise

    def _wait_for_postgres(self, max_attempts: int = 30) -> None:
        """Wait for PostgreSQL to be ready to accept connections."""
        for attempt in range(max_attempts):
            try:
                conn = psycopg2.connect(connect_timeout=5, **self._build_psycopg_params())
                conn.close()
                logger.info("PostgreSQL is ready to accept connections")
                return
            except psycopg2.Error as e:
                if attempt == max_attempts - 1:
                    raise RuntimeError("PostgreSQL failed to start within timeout") from e
                logger.debug("Connection attempt %s failed (%s); retrying", attempt + 1, e)
                time.sleep(1)

    def ensure_image(self) -> None:
        """Pull the configured image if it is not available locally."""
        try:
            self.client.images.get(self.image_tag)
        except ImageNotFound:
            logger.info("Docker image '%s' not found locally. Pulling...", self.image_tag)
            self.client.images.pull(self.image_tag)
        except APIError as exc:
            logger.error("Docker API error when ensuring image '%s': %s", self.image_tag, exc)
            raise

    def get_connection_params(self) -> Dict[str, Any]:
        """Get connection parameters for the running container."""
        return self.connection_params.copy()

    def _build_psycopg_params(self, *, database: Optional[str] = None) -> Dict[str, Any]:
        if not self.connection_params:
            raise RuntimeError("PostgreSQL container is not running")
        params = dict(self.connection_params)
        if database:
            params["database"] = database
        return params

    def database_config(self, database: Optional[str] = None, **overrides: Any) -> DatabaseConfig:
        """Return a DatabaseConfig pointing at ``database`` inside the container."""
        params = self._build_psycopg_params(database=database)
        return DatabaseConfig(
            connection_type=ConnectionType.POSTGRES,
            host=params["host"],
            port=params["port"],
            database=params["database"],
            username=params["user"],
            password=params["password"],
            **overrides,
        )

    def add_tmp_db(self) -> str:
        """Create a temporary database with a unique name and return the name."""
        db_name = f"test_db_{uuid.uuid4().hex[:8]}"
        conn = psycopg2.connect(**self._build_psycopg_params(database="postgres"))
        try:
            conn.autocommit = True
            with conn.cursor() as cursor:
                cursor.execute(f'CREATE DATABASE "{db_name}"')
        finally:
            conn.close()
        logger.info("Temporary database '%s' created", db_name)
        return db_name

    def remove_tmp_db(self, db_name: str) -> None:
        """Drop a temporary database, terminating any connections to it first."""
        conn = psycopg2.connect(**self._build_psycopg_params(database="postgres"))
        try:
            conn.autocommit = True
            with conn.cursor() as cursor:
                cursor.execute(
                    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
                    "WHERE datname = %s AND pid <> pg_backend_pid()",
                    (db_name,),
                )
                cursor.execute(f'DROP DATABASE IF EXISTS "{db_name}"')
        finally:
            conn.close()
        logger.info("Temporary database '%s' removed", db_name)

    def remove_container(self) -> None:
        """Stop and remove the PostgreSQL container."""
        if self.container is None:
            return
        name = getattr(self.container, "name", "<unknown>")
        try:
            self.container.remove(force=True)
            logger.info("Container '%s' removed", name)
        except NotFound:
            pass
        except APIError as e:
            logger.warning("Error removing container '%s': %s", name, e)
        finally:
            self.container = None

    def __enter__(self) -> "DockerManager":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.remove_container()
