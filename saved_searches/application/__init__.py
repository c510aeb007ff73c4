"""Application services orchestrating saved search workflows."""

from .new_results_check_service import NewResultsCheckService
from .property_cache import SavedSearchPropertyCache
from .saved_search_service import SavedSearchApplicationService

__all__ = [
    "NewResultsCheckService",
    "SavedSearchApplicationService",
    "SavedSearchPropertyCache",
]
