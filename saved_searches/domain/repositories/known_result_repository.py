"""Domain repository contract for results already reported to a saved search."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence, Set

from saved_searches.domain.value_objects import SavedSearchId


class IKnownResultRepository(ABC):
    """Set of (saved search, result item) pairs used in result-id detection."""

    @abstractmethod
    async def get_known_item_ids(self, saved_search_id: SavedSearchId) -> Set[str]:
        """Return every item id remembered for the saved search."""
        raise NotImplementedError

    @abstractmethod
    async def add_known_item_ids(
        self,
        saved_search_id: SavedSearchId,
        item_ids: Iterable[str]
    ) -> int:
        """Remember item ids; already known ids are ignored.

        Returns the number of newly stored ids.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_for_searches(self, saved_search_ids: Sequence[SavedSearchId]) -> int:
        """Forget all item ids of the given saved searches in one statement."""
        raise NotImplementedError

    @abstractmethod
    async def count_for_search(self, saved_search_id: SavedSearchId) -> int:
        raise NotImplementedError


__all__ = ["IKnownResultRepository"]
