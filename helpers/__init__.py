"""Helper utilities for the dbstore data-access layer.

This package contains various utility functions and classes that are used across
the application to provide common functionality.
"""

from .debug_util import DebugUtil  # noqa: F401
