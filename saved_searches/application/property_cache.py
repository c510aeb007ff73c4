"""Per-search cache of derived saved search properties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import structlog

from saved_searches.domain.entities.results import ResultSet
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.domain.entities.search_query import SearchQuery
from saved_searches.domain.exceptions import SavedSearchTypeNotFoundError
from saved_searches.domain.repositories.saved_search_type_repository import (
    ISavedSearchTypeRepository,
)
from saved_searches.domain.value_objects import SavedSearchId

logger = structlog.get_logger(__name__)


@dataclass
class _Entry:
    payload: Optional[str] = None
    query: Optional[SearchQuery] = None
    search_type: Optional[SavedSearchType] = None
    executed_results: Optional[ResultSet] = None


class SavedSearchPropertyCache:
    """Remembers the deserialized query, the resolved type and an executed
    result set per saved search id.

    A cached query is only reused while the stored payload is unchanged. The
    executed result set is handed out once, then forgotten. Checks and
    priming evict the entry of their search when they finish, so entries
    only live for the duration of one of them.
    """

    def __init__(self, type_repository: ISavedSearchTypeRepository):
        self._type_repository = type_repository
        self._entries: Dict[SavedSearchId, _Entry] = {}

    def _entry(self, search_id: SavedSearchId) -> _Entry:
        return self._entries.setdefault(search_id, _Entry())

    def get_query(self, search: SavedSearch) -> SearchQuery:
        """Return the search's query, deserializing the payload on first use.

        Raises:
            QueryDeserializationError: If the stored payload is corrupt.
        """
        entry = self._entry(search.id)
        if entry.query is None or entry.payload != search.query_payload:
            entry.query = SearchQuery.deserialize(search.query_payload)
            entry.payload = search.query_payload
        return entry.query

    def remember_query(self, search: SavedSearch, query: SearchQuery) -> None:
        entry = self._entry(search.id)
        entry.query = query
        entry.payload = search.query_payload

    async def get_type(self, search: SavedSearch) -> SavedSearchType:
        """Resolve the search's type.

        Raises:
            SavedSearchTypeNotFoundError: If the type does not exist.
        """
        entry = self._entry(search.id)
        if entry.search_type is None or entry.search_type.id != search.type_id:
            search_type = await self._type_repository.get_by_id(search.type_id)
            if search_type is None:
                raise SavedSearchTypeNotFoundError(
                    f"Saved search type '{search.type_id}' does not exist"
                )
            entry.search_type = search_type
        return entry.search_type

    def remember_executed_results(self, search_id: SavedSearchId, results: ResultSet) -> None:
        self._entry(search_id).executed_results = results

    def pop_executed_results(self, search_id: SavedSearchId) -> Optional[ResultSet]:
        entry = self._entries.get(search_id)
        if entry is None:
            return None
        results, entry.executed_results = entry.executed_results, None
        return results

    def invalidate(self, search_id: SavedSearchId) -> None:
        if self._entries.pop(search_id, None) is not None:
            logger.debug("Saved search properties invalidated", saved_search_id=str(search_id))

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, search_id: SavedSearchId) -> bool:
        return search_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["SavedSearchPropertyCache"]
