"""
Database module for the saved searches service.

This module provides the async engine/session manager and database error types.
"""

from .error_handling import (
    DatabaseError,
    DatabaseUnavailableError,
    DuplicateRecordError,
    StatementFailedError,
    handle_database_errors,
)
from .sqlmodel_engine import SQLModelDatabaseManager, async_database_url

__all__ = [
    "SQLModelDatabaseManager",
    "async_database_url",
    "DatabaseError",
    "DatabaseUnavailableError",
    "DuplicateRecordError",
    "StatementFailedError",
    "handle_database_errors",
]
