"""
Database initialization script for dbstore.

Creates the users table in the database described by the DBSTORE_*
environment variables.

Usage:
    python init_db.py
    python init_db.py --sqlite-path ./dbstore.db
    python init_db.py --reset

Set DBSTORE_DEBUG_MODE=loud to print every executed statement.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from db.config import ConnectionType, DatabaseConfig
from db.database_manager import DatabaseManager
from db.exceptions import DatabaseError
from helpers.debug_util import DebugUtil

logger = logging.getLogger("init_db")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create the dbstore tables")
    parser.add_argument(
        "--sqlite-path",
        help="Use this SQLite file instead of the configured PostgreSQL server",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables before creating (WARNING: deletes all data!)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Create the tables; returns a process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    try:
        config = DatabaseConfig.from_env()
        if args.sqlite_path:
            config = config.model_copy(
                update={"connection_type": ConnectionType.SQLITE, "sqlite_path": args.sqlite_path}
            )
    except ValidationError as e:
        logger.error("Invalid database configuration: %s", e)
        return 2

    try:
        with DatabaseManager(config, debug_util=DebugUtil()) as db_manager:
            if args.reset:
                db_manager.drop_tables()
            db_manager.init_tables()
            logger.info("Tables: %s", ", ".join(db_manager.list_tables()))
    except DatabaseError as e:
        logger.error("Database initialization failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
