"""Application service dependencies."""

from .saved_search_dependencies import NewResultsCheckDependencies, SavedSearchDependencies

__all__ = [
    "NewResultsCheckDependencies",
    "SavedSearchDependencies",
]
