"""
Saved Search API Endpoints

Endpoints for stored queries whose owners are notified of new results:
- Saving a search, priming it with the results it was saved with
- Token protected view, activation, edit and delete links
- Triggering a pass over all due saved searches
"""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from saved_searches.api.dependencies import (
    NewResultsCheckServiceDep,
    SavedSearchServiceDep,
    map_domain_exception_to_http,
    require_manual_checks,
)
from saved_searches.api.schemas.saved_search_schemas import (
    DueCheckReportResponse,
    SavedSearchCreate,
    SavedSearchResponse,
    SavedSearchUpdate,
)
from saved_searches.core.config import get_settings
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.entities.search_query import SearchQuery
from saved_searches.domain.exceptions import DomainException, QueryDeserializationError

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/saved-searches", tags=["saved-searches"])

TokenQuery = Query(None, description="Access token from the saved search link")


def _to_response(saved_search: SavedSearch) -> SavedSearchResponse:
    try:
        query = SearchQuery.deserialize(saved_search.query_payload)
    except QueryDeserializationError:
        query = None
    return SavedSearchResponse.from_domain(saved_search, query)


def _internal_error(error: str, message: str, exc: Exception) -> HTTPException:
    settings = get_settings()
    return HTTPException(
        status_code=500,
        detail={
            "error": error,
            "message": message,
            "details": str(exc)
            if settings.ENVIRONMENT in ("local", "development")
            else None,
        },
    )


@router.post("", response_model=SavedSearchResponse, status_code=status.HTTP_201_CREATED)
async def create_saved_search(
    request: SavedSearchCreate,
    saved_search_service: SavedSearchServiceDep,
) -> SavedSearchResponse:
    """
    Save a search so its owner hears about new results.

    Results the query returned while the search was saved may be passed
    along; they are remembered as already seen instead of running the query
    again. Anonymous searches stay inactive until the activation link sent
    to ``mail`` was followed.
    """
    try:
        saved_search = await saved_search_service.create_saved_search(
            query=request.query.to_domain(),
            type_id=request.type_id,
            owner_id=str(request.owner_id) if request.owner_id else None,
            label=request.label,
            mail=str(request.mail) if request.mail else None,
            notify_interval=request.notify_interval,
            options=request.options,
            executed_results=request.executed_result_set(),
            owner_mail=str(request.owner_mail) if request.owner_mail else None,
        )
        return _to_response(saved_search)

    except DomainException as domain_exc:
        raise map_domain_exception_to_http(domain_exc)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Failed to create saved search", error=str(exc))
        raise _internal_error("saved_search_creation_failed", "Failed to save search", exc)


@router.post(
    "/checks",
    response_model=DueCheckReportResponse,
    dependencies=[Depends(require_manual_checks)],
)
async def run_due_checks(
    check_service: NewResultsCheckServiceDep,
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of due searches to check"),
) -> DueCheckReportResponse:
    """Check every due saved search once and report what happened.

    Only available when ``MANUAL_CHECKS_ENABLED`` is set; the periodic check
    covers normal operation.
    """
    try:
        report = await check_service.run_due_checks(limit=limit)
        return DueCheckReportResponse.from_domain(report)

    except DomainException as domain_exc:
        raise map_domain_exception_to_http(domain_exc)
    except Exception as exc:
        logger.error("Failed to run due saved search checks", error=str(exc))
        raise _internal_error("saved_search_checks_failed", "Failed to check saved searches", exc)


@router.get("/{search_id}", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def view_saved_search(
    search_id: UUID,
    saved_search_service: SavedSearchServiceDep,
    token: Optional[str] = TokenQuery,
) -> RedirectResponse:
    """Redirect to the search page the saved search was created on."""
    try:
        page = await saved_search_service.get_search_page(str(search_id), token)
        return RedirectResponse(page, status_code=status.HTTP_302_FOUND)

    except DomainException as domain_exc:
        raise map_domain_exception_to_http(domain_exc)


@router.get("/{search_id}/activate", response_model=SavedSearchResponse)
async def activate_saved_search(
    search_id: UUID,
    saved_search_service: SavedSearchServiceDep,
    token: Optional[str] = TokenQuery,
) -> SavedSearchResponse:
    """Activate a saved search from the link in its activation mail."""
    try:
        saved_search = await saved_search_service.activate_saved_search(str(search_id), token)
        return _to_response(saved_search)

    except DomainException as domain_exc:
        raise map_domain_exception_to_http(domain_exc)


@router.patch("/{search_id}", response_model=SavedSearchResponse)
async def update_saved_search(
    search_id: UUID,
    request: SavedSearchUpdate,
    saved_search_service: SavedSearchServiceDep,
    token: Optional[str] = TokenQuery,
) -> SavedSearchResponse:
    """Change label, mail address, notification interval or options."""
    changes = {}
    if "mail" in request.model_fields_set:
        changes["mail"] = str(request.mail) if request.mail else None

    try:
        saved_search = await saved_search_service.update_saved_search(
            str(search_id),
            token,
            label=request.label,
            notify_interval=request.notify_interval,
            options=request.options,
            owner_mail=str(request.owner_mail) if request.owner_mail else None,
            **changes,
        )
        return _to_response(saved_search)

    except DomainException as domain_exc:
        raise map_domain_exception_to_http(domain_exc)


@router.delete("/{search_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_search(
    search_id: UUID,
    saved_search_service: SavedSearchServiceDep,
    token: Optional[str] = TokenQuery,
) -> None:
    """Delete a saved search together with the results remembered for it."""
    try:
        await saved_search_service.delete_saved_search(str(search_id), token)

    except DomainException as domain_exc:
        raise map_domain_exception_to_http(domain_exc)


__all__ = ["router"]
