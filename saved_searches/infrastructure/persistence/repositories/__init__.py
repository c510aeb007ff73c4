"""SQL repository implementations of the domain repository interfaces."""

from saved_searches.infrastructure.persistence.repositories.known_result_repository import (
    SQLKnownResultRepository,
)
from saved_searches.infrastructure.persistence.repositories.saved_search_repository import (
    SQLSavedSearchRepository,
)
from saved_searches.infrastructure.persistence.repositories.saved_search_type_repository import (
    SQLSavedSearchTypeRepository,
)

__all__ = [
    "SQLKnownResultRepository",
    "SQLSavedSearchRepository",
    "SQLSavedSearchTypeRepository",
]
