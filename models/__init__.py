"""
Models package for dbstore.

This package contains the data models and the stores that persist them.
"""

from .user import User
from .user_store import UserStore

__all__ = [
    "User",
    "UserStore",
]
