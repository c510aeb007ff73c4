"""Mappers between domain entities and persistence models."""

from saved_searches.infrastructure.persistence.mappers.saved_search_mapper import SavedSearchMapper
from saved_searches.infrastructure.persistence.mappers.saved_search_type_mapper import (
    SavedSearchTypeMapper,
)

__all__ = ["SavedSearchMapper", "SavedSearchTypeMapper"]
