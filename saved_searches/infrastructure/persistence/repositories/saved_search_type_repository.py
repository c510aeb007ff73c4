"""SQL implementation of ISavedSearchTypeRepository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlmodel import select

from saved_searches.database.error_handling import handle_database_errors
from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.domain.repositories.saved_search_type_repository import (
    ISavedSearchTypeRepository,
)
from saved_searches.infrastructure.persistence.mappers.saved_search_type_mapper import (
    SavedSearchTypeMapper,
)
from saved_searches.infrastructure.persistence.models.saved_search_type_table import (
    SavedSearchTypeTable,
)
from saved_searches.infrastructure.persistence.repositories.base import SQLRepositoryBase


class SQLSavedSearchTypeRepository(SQLRepositoryBase, ISavedSearchTypeRepository):
    """SQL adapter implementation of ISavedSearchTypeRepository."""

    @handle_database_errors()
    async def get_by_id(self, type_id: str) -> Optional[SavedSearchType]:
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            row = await session.get(SavedSearchTypeTable, type_id)
            return SavedSearchTypeMapper.to_domain(row) if row else None

    @handle_database_errors()
    async def get_default(self) -> Optional[SavedSearchType]:
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            result = await session.execute(
                select(SavedSearchTypeTable)
                .where(SavedSearchTypeTable.is_default.is_(True))
                .order_by(SavedSearchTypeTable.id)
                .limit(1)
            )
            row = result.scalars().first()
            return SavedSearchTypeMapper.to_domain(row) if row else None

    @handle_database_errors()
    async def save(self, search_type: SavedSearchType) -> SavedSearchType:
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            if search_type.is_default:
                await session.execute(
                    update(SavedSearchTypeTable)
                    .where(SavedSearchTypeTable.id != search_type.id)
                    .values(is_default=False)
                )

            existing_row = await session.get(SavedSearchTypeTable, search_type.id)
            if existing_row:
                SavedSearchTypeMapper.update_table_from_domain(existing_row, search_type)
            else:
                session.add(SavedSearchTypeMapper.to_table(search_type))

        return search_type

    @handle_database_errors()
    async def list_all(self, enabled_only: bool = False) -> List[SavedSearchType]:
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            stmt = select(SavedSearchTypeTable).order_by(SavedSearchTypeTable.id)
            if enabled_only:
                stmt = stmt.where(SavedSearchTypeTable.enabled.is_(True))
            result = await session.execute(stmt)
            rows = result.scalars().all()

        return [SavedSearchTypeMapper.to_domain(row) for row in rows]


__all__ = ["SQLSavedSearchTypeRepository"]
