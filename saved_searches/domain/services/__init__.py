"""Domain services package."""

from .access_tokens import OPERATIONS, AccessTokenService
from .links import SavedSearchLinkBuilder
from .new_results_detector import NewResultsDetector, parse_date_value

__all__ = [
    "AccessTokenService",
    "OPERATIONS",
    "SavedSearchLinkBuilder",
    "NewResultsDetector",
    "parse_date_value",
]
