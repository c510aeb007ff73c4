"""SQL implementation of IKnownResultRepository."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set

from sqlalchemy import delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from saved_searches.database.error_handling import handle_database_errors
from saved_searches.domain.repositories.known_result_repository import IKnownResultRepository
from saved_searches.domain.value_objects import SavedSearchId
from saved_searches.infrastructure.persistence.models.known_result_table import KnownResultTable
from saved_searches.infrastructure.persistence.repositories.base import SQLRepositoryBase

# Keeps multi-row inserts below SQLite's bound parameter limit
INSERT_CHUNK_SIZE = 400


class SQLKnownResultRepository(SQLRepositoryBase, IKnownResultRepository):
    """SQL adapter implementation of IKnownResultRepository."""

    @handle_database_errors()
    async def get_known_item_ids(self, saved_search_id: SavedSearchId) -> Set[str]:
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            result = await session.execute(
                select(KnownResultTable.item_id).where(
                    KnownResultTable.search_id == saved_search_id.value
                )
            )
            return set(result.scalars().all())

    @handle_database_errors()
    async def add_known_item_ids(
        self,
        saved_search_id: SavedSearchId,
        item_ids: Iterable[str]
    ) -> int:
        """Insert item ids, ignoring the ones already stored."""
        unique_ids = list(dict.fromkeys(str(item_id) for item_id in item_ids))
        if not unique_ids:
            return 0

        db_manager = await self._get_db_manager()
        inserted = 0

        async with db_manager.get_session() as session:
            for start in range(0, len(unique_ids), INSERT_CHUNK_SIZE):
                chunk = unique_ids[start:start + INSERT_CHUNK_SIZE]
                inserted += await self._insert_ignoring_duplicates(
                    session, saved_search_id, chunk
                )

        return inserted

    async def _insert_ignoring_duplicates(
        self,
        session: AsyncSession,
        saved_search_id: SavedSearchId,
        item_ids: List[str],
    ) -> int:
        rows = [{"search_id": saved_search_id.value, "item_id": item_id} for item_id in item_ids]
        dialect = session.bind.dialect.name

        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            stmt = (
                insert(KnownResultTable)
                .values(rows)
                .on_conflict_do_nothing(index_elements=["search_id", "item_id"])
            )
            result = await session.execute(stmt)
            return max(result.rowcount or 0, 0)

        existing = await session.execute(
            select(KnownResultTable.item_id).where(
                KnownResultTable.search_id == saved_search_id.value,
                KnownResultTable.item_id.in_(item_ids),
            )
        )
        known = set(existing.scalars().all())
        missing = [row for row in rows if row["item_id"] not in known]
        session.add_all(KnownResultTable(**row) for row in missing)
        return len(missing)

    @handle_database_errors()
    async def delete_for_searches(self, saved_search_ids: Sequence[SavedSearchId]) -> int:
        ids = [saved_search_id.value for saved_search_id in saved_search_ids]
        if not ids:
            return 0

        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            result = await session.execute(
                delete(KnownResultTable).where(KnownResultTable.search_id.in_(ids))
            )

        return result.rowcount or 0

    @handle_database_errors()
    async def count_for_search(self, saved_search_id: SavedSearchId) -> int:
        db_manager = await self._get_db_manager()

        async with db_manager.get_session() as session:
            result = await session.execute(
                select(func.count()).select_from(KnownResultTable).where(
                    KnownResultTable.search_id == saved_search_id.value
                )
            )
            return int(result.scalar_one())


__all__ = ["SQLKnownResultRepository"]
