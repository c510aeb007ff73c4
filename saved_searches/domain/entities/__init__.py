"""Domain entities exposed for application layer use."""

from .results import CheckStatus, DueCheckReport, NewResultsOutcome, ResultItem, ResultSet
from .saved_search import DEFAULT_LABEL, NotifyInterval, SavedSearch, compute_next_execution
from .saved_search_type import DetectionMode, SavedSearchType
from .search_query import SearchQuery

__all__ = [
    # Saved searches
    "SavedSearch",
    "NotifyInterval",
    "compute_next_execution",
    "DEFAULT_LABEL",
    # Types
    "SavedSearchType",
    "DetectionMode",
    # Queries and results
    "SearchQuery",
    "ResultItem",
    "ResultSet",
    "CheckStatus",
    "NewResultsOutcome",
    "DueCheckReport",
]
