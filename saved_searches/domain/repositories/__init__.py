"""Repository interfaces for the domain layer."""

from .known_result_repository import IKnownResultRepository
from .saved_search_repository import ISavedSearchRepository
from .saved_search_type_repository import ISavedSearchTypeRepository

__all__ = [
    "IKnownResultRepository",
    "ISavedSearchRepository",
    "ISavedSearchTypeRepository",
]
