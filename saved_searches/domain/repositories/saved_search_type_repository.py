"""Domain repository contract for saved search types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from saved_searches.domain.entities.saved_search_type import SavedSearchType


class ISavedSearchTypeRepository(ABC):
    """Persistence operations for saved search types."""

    @abstractmethod
    async def get_by_id(self, type_id: str) -> Optional[SavedSearchType]:
        raise NotImplementedError

    @abstractmethod
    async def get_default(self) -> Optional[SavedSearchType]:
        """Return the type flagged as default, if any."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, search_type: SavedSearchType) -> SavedSearchType:
        """Insert or update a type. Saving a default type clears the flag on the others."""
        raise NotImplementedError

    @abstractmethod
    async def list_all(self, enabled_only: bool = False) -> List[SavedSearchType]:
        raise NotImplementedError


__all__ = ["ISavedSearchTypeRepository"]
