"""
Database module initialization.
Exports database components for use throughout the application.
"""

from database.base import Base
from database.dependencies import get_db
from database.session import (
    check_db_connection,
    close_db,
    enable_sqlite_savepoints,
    get_db_info,
    get_db_session,
    init_db,
)

__all__ = [
    # Base class
    "Base",
    # Connection management
    "init_db",
    "close_db",
    "enable_sqlite_savepoints",
    # Dependencies
    "get_db",
    "get_db_session",
    # Utilities
    "check_db_connection",
    "get_db_info",
]
