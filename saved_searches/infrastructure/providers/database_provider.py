"""Database manager provider."""

from __future__ import annotations

import asyncio
from typing import Optional

from saved_searches.core.config import get_settings
from saved_searches.database.sqlmodel_engine import SQLModelDatabaseManager

_database_manager: Optional[SQLModelDatabaseManager] = None
_lock = asyncio.Lock()


async def get_database_manager() -> SQLModelDatabaseManager:
    """Return the initialized database manager."""
    global _database_manager

    if _database_manager is not None:
        return _database_manager

    async with _lock:
        if _database_manager is not None:
            return _database_manager

        manager = SQLModelDatabaseManager(get_settings())
        await manager.initialize()
        _database_manager = manager
        return _database_manager


async def set_database_manager(manager: SQLModelDatabaseManager) -> None:
    """Use an already initialized manager, e.g. one bound to a test database."""
    global _database_manager
    async with _lock:
        _database_manager = manager


async def reset_database_manager() -> None:
    global _database_manager
    async with _lock:
        if _database_manager is not None:
            await _database_manager.shutdown()
        _database_manager = None


__all__ = ["get_database_manager", "set_database_manager", "reset_database_manager"]
