"""
Infrastructure persistence models module.

Database table definitions, separated from domain models and business logic.
"""

from saved_searches.infrastructure.persistence.models.known_result_table import KnownResultTable
from saved_searches.infrastructure.persistence.models.saved_search_table import SavedSearchTable
from saved_searches.infrastructure.persistence.models.saved_search_type_table import (
    SavedSearchTypeTable,
)

__all__ = [
    "KnownResultTable",
    "SavedSearchTable",
    "SavedSearchTypeTable",
]
