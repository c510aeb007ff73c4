"""
Saved Search API Schemas

Request/response models for saved searches:
- The query a saved search re-runs and the results it was executed with
- Creation and update payloads
- Saved search representation and due-check reports
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from saved_searches.domain.entities.results import (
    DueCheckReport,
    NewResultsOutcome,
    ResultItem,
    ResultSet,
)
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.entities.search_query import SearchQuery


class SearchQuerySchema(BaseModel):
    """Query against one index of the search backend"""

    index_id: str = Field(..., min_length=1, description="Index the query runs against")
    keys: Union[str, List[str], Dict[str, Any], None] = Field(None, description="Search keywords")
    filters: List[Dict[str, Any]] = Field(default_factory=list, description="Filter conditions")
    sort: List[Dict[str, Any]] = Field(default_factory=list, description="Sort criteria")
    options: Dict[str, Any] = Field(default_factory=dict, description="Backend specific query options")
    limit: Optional[int] = Field(None, ge=0, description="Maximum number of results")

    def to_domain(self) -> SearchQuery:
        return SearchQuery(
            index_id=self.index_id,
            keys=self.keys,
            filters=list(self.filters),
            sort=list(self.sort),
            options=dict(self.options),
            limit=self.limit,
        )


class ResultItemSchema(BaseModel):
    """Single result of an already executed query"""

    id: str = Field(..., min_length=1, description="Result item identifier")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Indexed field values")

    def to_domain(self) -> ResultItem:
        return ResultItem(item_id=self.id, fields=dict(self.fields))


class SavedSearchCreate(BaseModel):
    """Request to save a search"""

    query: SearchQuerySchema
    type_id: Optional[str] = Field(None, description="Saved search type, the default type when omitted")
    owner_id: Optional[UUID] = Field(None, description="Owning user, omitted for anonymous searches")
    owner_mail: Optional[EmailStr] = Field(None, description="Account address of the owning user")
    label: Optional[str] = Field(None, max_length=255, description="Label, derived from the keywords when omitted")
    mail: Optional[EmailStr] = Field(None, description="Address notifications are sent to")
    notify_interval: int = Field(-1, ge=-1, description="Seconds between checks, -1 to never check")
    options: Dict[str, Any] = Field(default_factory=dict, description="Options such as the search page")
    executed_results: Optional[List[ResultItemSchema]] = Field(
        None,
        description="Results the query returned while the search was saved"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": {
                    "index_id": "jobs",
                    "keys": "python developer",
                    "filters": [{"field": "location", "value": "Berlin"}],
                },
                "mail": "alice@example.com",
                "notify_interval": 86400,
                "options": {"page": "/search/jobs?keys=python+developer"},
            }
        }
    )

    def executed_result_set(self) -> Optional[ResultSet]:
        if self.executed_results is None:
            return None
        return ResultSet(items=[item.to_domain() for item in self.executed_results])


class SavedSearchUpdate(BaseModel):
    """Partial update of a saved search"""

    label: Optional[str] = Field(None, min_length=1, max_length=255)
    mail: Optional[EmailStr] = None
    notify_interval: Optional[int] = Field(None, ge=-1)
    options: Optional[Dict[str, Any]] = None
    owner_mail: Optional[EmailStr] = Field(None, description="Account address of the owning user")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"label": "Python jobs in Berlin", "notify_interval": 604800}
        }
    )


class SavedSearchResponse(BaseModel):
    """Saved search as returned by the API"""

    id: str
    type_id: str
    label: str
    owner_id: Optional[str] = None
    mail: Optional[str] = None
    index_id: Optional[str] = None
    status: bool
    notify_interval: int
    options: Dict[str, Any] = Field(default_factory=dict)
    query: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    last_executed_at: Optional[datetime] = None
    next_execution_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, saved_search: SavedSearch, query: Optional[SearchQuery] = None) -> "SavedSearchResponse":
        return cls(
            id=str(saved_search.id),
            type_id=saved_search.type_id,
            label=saved_search.label,
            owner_id=str(saved_search.owner_id) if saved_search.owner_id else None,
            mail=str(saved_search.mail) if saved_search.mail else None,
            index_id=saved_search.index_id,
            status=saved_search.status,
            notify_interval=saved_search.notify_interval,
            options=dict(saved_search.options),
            query=query.to_dict() if query is not None else {},
            created_at=saved_search.created_at,
            last_executed_at=saved_search.last_executed_at,
            next_execution_at=saved_search.next_execution_at,
        )


class CheckOutcomeResponse(BaseModel):
    """Outcome of checking one saved search"""

    search_id: str
    status: str
    new_results: int = 0
    reason: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, outcome: NewResultsOutcome) -> "CheckOutcomeResponse":
        return cls(**outcome.to_dict())


class DueCheckReportResponse(BaseModel):
    """Report of one pass over the due saved searches"""

    checked: int
    summary: Dict[str, int]
    outcomes: List[CheckOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, report: DueCheckReport) -> "DueCheckReportResponse":
        return cls(
            checked=report.checked,
            summary=report.summary(),
            outcomes=[CheckOutcomeResponse.from_domain(outcome) for outcome in report.outcomes],
        )


__all__ = [
    "SearchQuerySchema",
    "ResultItemSchema",
    "SavedSearchCreate",
    "SavedSearchUpdate",
    "SavedSearchResponse",
    "CheckOutcomeResponse",
    "DueCheckReportResponse",
]
