"""SQL implementation of ISavedSearchRepository using SavedSearchMapper."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import delete, desc
from sqlmodel import select

from saved_searches.database.error_handling import handle_database_errors
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.repositories.saved_search_repository import ISavedSearchRepository
from saved_searches.domain.utils.clock import ensure_utc
from saved_searches.domain.value_objects import SavedSearchId, UserId
from saved_searches.infrastructure.persistence.mappers.saved_search_mapper import SavedSearchMapper
from saved_searches.infrastructure.persistence.models.known_result_table import KnownResultTable
from saved_searches.infrastructure.persistence.models.saved_search_table import SavedSearchTable
from saved_searches.infrastructure.persistence.repositories.base import SQLRepositoryBase


class SQLSavedSearchRepository(SQLRepositoryBase, ISavedSearchRepository):
    """SQL adapter implementation of ISavedSearchRepository."""

    @handle_database_errors()
    async def save(self, saved_search: SavedSearch) -> SavedSearch:
        """Save saved search to database and return the domain entity."""
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            existing_row = await session.get(SavedSearchTable, saved_search.id.value)

            if existing_row:
                SavedSearchMapper.update_table_from_domain(existing_row, saved_search)
            else:
                session.add(SavedSearchMapper.to_table(saved_search))

        return saved_search

    @handle_database_errors()
    async def update(self, saved_search: SavedSearch) -> bool:
        """Update an existing row, leaving deleted saved searches deleted."""
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            existing_row = await session.get(SavedSearchTable, saved_search.id.value)
            if existing_row is None:
                return False
            SavedSearchMapper.update_table_from_domain(existing_row, saved_search)

        return True

    @handle_database_errors()
    async def get_by_id(self, saved_search_id: SavedSearchId) -> Optional[SavedSearch]:
        """Load a saved search by identifier."""
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            table_obj = await session.get(SavedSearchTable, saved_search_id.value)
            if not table_obj:
                return None
            return SavedSearchMapper.to_domain(table_obj)

    @handle_database_errors()
    async def list_due(self, now: datetime, limit: int = 100) -> List[SavedSearch]:
        """List activated saved searches whose next execution has come."""
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            stmt = (
                select(SavedSearchTable)
                .where(
                    SavedSearchTable.status.is_(True),
                    SavedSearchTable.next_execution_at.is_not(None),
                    SavedSearchTable.next_execution_at <= ensure_utc(now),
                )
                .order_by(SavedSearchTable.next_execution_at)
                .limit(limit)
            )

            result = await session.execute(stmt)
            rows = result.scalars().all()

        return [SavedSearchMapper.to_domain(row) for row in rows]

    @handle_database_errors()
    async def list_by_owner(
        self,
        owner_id: UserId,
        limit: int = 50,
        offset: int = 0
    ) -> List[SavedSearch]:
        """List saved searches owned by a user."""
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            stmt = (
                select(SavedSearchTable)
                .where(SavedSearchTable.owner_id == owner_id.value)
                .order_by(desc(SavedSearchTable.created_at))
                .offset(offset)
                .limit(limit)
            )

            result = await session.execute(stmt)
            rows = result.scalars().all()

        return [SavedSearchMapper.to_domain(row) for row in rows]

    @handle_database_errors()
    async def delete_many(self, saved_search_ids: Sequence[SavedSearchId]) -> int:
        """Delete saved searches and their known results in one transaction."""
        ids = [saved_search_id.value for saved_search_id in saved_search_ids]
        if not ids:
            return 0

        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            await session.execute(
                delete(KnownResultTable).where(KnownResultTable.search_id.in_(ids))
            )
            result = await session.execute(
                delete(SavedSearchTable).where(SavedSearchTable.id.in_(ids))
            )

        return result.rowcount or 0


__all__ = ["SQLSavedSearchRepository"]
