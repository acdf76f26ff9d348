"""
Database package for dbstore.
This package contains all database related functionality.
"""
from .binder import ParameterBinder, ParamKind
from .config import ConnectionType, DatabaseConfig
from .database_manager import DatabaseManager
from .pool import SQLiteConnectionPool, create_pool
from .statement import KeyMode, PreparedStatement
from .statement_executor import ErrorKind, ExecutionResult, StatementExecutor

__all__ = [
    "ConnectionType",
    "DatabaseConfig",
    "DatabaseManager",
    "ErrorKind",
    "ExecutionResult",
    "KeyMode",
    "ParamKind",
    "ParameterBinder",
    "PreparedStatement",
    "SQLiteConnectionPool",
    "StatementExecutor",
    "create_pool",
]
