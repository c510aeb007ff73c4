"""Dependency containers for the saved search application services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from saved_searches.application.property_cache import SavedSearchPropertyCache
from saved_searches.domain.interfaces import (
    INotificationPluginFactory,
    IQueryExecutor,
    ISearchLock,
)
from saved_searches.domain.repositories.known_result_repository import IKnownResultRepository
from saved_searches.domain.repositories.saved_search_repository import ISavedSearchRepository
from saved_searches.domain.repositories.saved_search_type_repository import (
    ISavedSearchTypeRepository,
)
from saved_searches.domain.services.access_tokens import AccessTokenService
from saved_searches.domain.services.new_results_detector import NewResultsDetector

if TYPE_CHECKING:
    from saved_searches.application.new_results_check_service import NewResultsCheckService


@dataclass
class NewResultsCheckDependencies:
    """Container for new results check service dependencies."""

    saved_search_repository: ISavedSearchRepository
    known_result_repository: IKnownResultRepository
    query_executor: IQueryExecutor
    notification_plugins: INotificationPluginFactory
    search_lock: ISearchLock
    property_cache: SavedSearchPropertyCache
    detector: NewResultsDetector = field(default_factory=NewResultsDetector)


@dataclass
class SavedSearchDependencies:
    """Container for saved search service dependencies."""

    saved_search_repository: ISavedSearchRepository
    saved_search_type_repository: ISavedSearchTypeRepository
    property_cache: SavedSearchPropertyCache
    new_results_check_service: "NewResultsCheckService"
    notification_plugins: INotificationPluginFactory
    access_tokens: AccessTokenService
    search_lock: ISearchLock


__all__ = ["NewResultsCheckDependencies", "SavedSearchDependencies"]
