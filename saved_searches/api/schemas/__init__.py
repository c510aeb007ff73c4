"""
API Schemas - DTOs for REST API following hexagonal architecture.

These are separated from domain entities and persistence tables.
"""

from saved_searches.api.schemas.saved_search_schemas import (
    CheckOutcomeResponse,
    DueCheckReportResponse,
    ResultItemSchema,
    SavedSearchCreate,
    SavedSearchResponse,
    SavedSearchUpdate,
    SearchQuerySchema,
)

__all__ = [
    "CheckOutcomeResponse",
    "DueCheckReportResponse",
    "ResultItemSchema",
    "SavedSearchCreate",
    "SavedSearchResponse",
    "SavedSearchUpdate",
    "SearchQuerySchema",
]
