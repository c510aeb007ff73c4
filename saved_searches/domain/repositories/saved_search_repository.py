"""Domain repository contracts for saved search aggregates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.value_objects import SavedSearchId, UserId


class ISavedSearchRepository(ABC):
    """Domain-facing abstraction for saved search persistence operations."""

    @abstractmethod
    async def get_by_id(self, saved_search_id: SavedSearchId) -> Optional[SavedSearch]:
        """Load a saved search by identifier."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, saved_search: SavedSearch) -> SavedSearch:
        """Insert or update a saved search aggregate."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, saved_search: SavedSearch) -> bool:
        """Overwrite a stored saved search.

        Never inserts: returns False when the saved search no longer exists.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_due(self, now: datetime, limit: int = 100) -> List[SavedSearch]:
        """List activated saved searches with ``next_execution_at <= now``, oldest first."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_owner(
        self,
        owner_id: UserId,
        limit: int = 50,
        offset: int = 0
    ) -> List[SavedSearch]:
        """List saved searches owned by a user, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def delete_many(self, saved_search_ids: Sequence[SavedSearchId]) -> int:
        """Delete saved searches together with their known results.

        Both deletions happen in one transaction: a failure leaves every row in
        place. Returns the number of saved searches removed.
        """
        raise NotImplementedError


__all__ = ["ISavedSearchRepository"]
