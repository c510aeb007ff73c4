"""Shared plumbing for SQL repositories."""

from __future__ import annotations

from typing import Optional

from saved_searches.database.sqlmodel_engine import SQLModelDatabaseManager
from saved_searches.infrastructure.providers.database_provider import get_database_manager


class SQLRepositoryBase:
    """Resolves the database manager lazily unless one is injected."""

    def __init__(self, db_manager: Optional[SQLModelDatabaseManager] = None):
        self._db_manager = db_manager

    async def _get_db_manager(self) -> SQLModelDatabaseManager:
        """Get database manager (lazy initialization)."""
        if self._db_manager is None:
            self._db_manager = await get_database_manager()
        return self._db_manager


__all__ = ["SQLRepositoryBase"]
