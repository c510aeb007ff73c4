"""FastAPI dependencies resolving the saved search services and mapping domain errors to HTTP."""

from typing import Annotated, Optional, Tuple, Type

import structlog
from fastapi import Depends, HTTPException

from saved_searches.application.new_results_check_service import NewResultsCheckService
from saved_searches.application.saved_search_service import SavedSearchApplicationService
from saved_searches.core.config import Settings, get_settings
from saved_searches.domain.exceptions import (
    AuthorizationError,
    ConcurrencyError,
    ConfigurationError,
    DomainException,
    NotFoundError,
    ProcessingError,
    ValidationError,
)
from saved_searches.infrastructure.providers import saved_search_provider

logger = structlog.get_logger(__name__)


# Application Service Dependencies
async def get_saved_search_service() -> SavedSearchApplicationService:
    """Return the SavedSearchApplicationService with injected dependencies."""
    try:
        return await saved_search_provider.get_saved_search_service()
    except Exception as e:
        logger.error("Failed to create saved search service", error=str(e))
        raise HTTPException(
            status_code=500,
            detail="Saved search service unavailable"
        ) from e


async def get_new_results_check_service() -> NewResultsCheckService:
    """Return the NewResultsCheckService with injected dependencies."""
    try:
        return await saved_search_provider.get_new_results_check_service()
    except Exception as e:
        logger.error("Failed to create new results check service", error=str(e))
        raise HTTPException(
            status_code=500,
            detail="New results check service unavailable"
        ) from e


# Type aliases for dependency injection
SavedSearchServiceDep = Annotated[SavedSearchApplicationService, Depends(get_saved_search_service)]
NewResultsCheckServiceDep = Annotated[NewResultsCheckService, Depends(get_new_results_check_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


async def require_manual_checks(settings: SettingsDep) -> None:
    """Hide the manual check trigger unless it was switched on."""
    if not settings.MANUAL_CHECKS_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")


# Domain Exception Handlers

# Checked in order: unknown saved search types are configuration errors too,
# but a caller naming one gets a 404.
_STATUS_BY_EXCEPTION: Tuple[Tuple[Type[DomainException], int, Optional[str]], ...] = (
    (NotFoundError, 404, None),
    (ValidationError, 400, None),
    (AuthorizationError, 403, None),
    (ConcurrencyError, 409, None),
    (ProcessingError, 422, None),
    (ConfigurationError, 500, "Service configuration error"),
)


def map_domain_exception_to_http(exception: Exception) -> HTTPException:
    """Map domain exceptions to appropriate HTTP responses.

    Messages of client errors are passed through; server side failures get a
    generic detail and are logged.
    """
    for exception_type, status_code, detail in _STATUS_BY_EXCEPTION:
        if isinstance(exception, exception_type):
            if status_code >= 500:
                logger.error(
                    "Saved search request failed",
                    exception_type=type(exception).__name__,
                    error=str(exception),
                )
            return HTTPException(status_code=status_code, detail=detail or str(exception))

    logger.error(
        "Unmapped exception in saved search request",
        exception_type=type(exception).__name__,
        error=str(exception),
    )
    if isinstance(exception, DomainException):
        return HTTPException(status_code=500, detail="Domain operation failed")
    return HTTPException(status_code=500, detail="Internal server error")


__all__ = [
    "get_saved_search_service",
    "get_new_results_check_service",
    "SavedSearchServiceDep",
    "NewResultsCheckServiceDep",
    "map_domain_exception_to_http",
]
