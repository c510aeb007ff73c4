"""
SQLModel SavedSearch table definition.

The stored query is kept as an opaque text payload; scheduling columns are
indexed for the due-search lookup.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import Boolean, Column, Index, Integer, String, Text, Uuid
from sqlmodel import Field

from saved_searches.infrastructure.persistence.models.base import (
    BaseModel,
    json_column,
    utc_datetime_column,
)


class SavedSearchTable(BaseModel, table=True):
    """
    Saved search model with database persistence.
    """
    __tablename__ = "saved_searches"

    __table_args__ = (
        Index("idx_saved_searches_due", "status", "next_execution_at"),
        Index("idx_saved_searches_owner_created", "owner_id", "created_at"),
    )

    id: UUID = Field(
        sa_column=Column(Uuid, primary_key=True),
        description="Saved search identifier"
    )
    type_id: str = Field(
        sa_column=Column(String(64), nullable=False, index=True),
        description="Saved search type identifier"
    )
    owner_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(Uuid, nullable=True),
        description="Owning user, NULL for anonymous saved searches"
    )
    label: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Saved search label"
    )
    mail: Optional[str] = Field(
        default=None,
        sa_column=Column(String(254), nullable=True),
        description="Notification e-mail address"
    )
    index_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Index the stored query runs against"
    )
    status: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, default=True),
        description="Whether the saved search has been activated"
    )
    query_payload: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Serialized search query"
    )
    options: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=json_column(),
        description="Free-form saved search options"
    )
    notify_interval: int = Field(
        default=-1,
        sa_column=Column(Integer, nullable=False, default=-1),
        description="Seconds between checks, -1 for never"
    )
    known_results_primed: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False),
        description="Whether the known results baseline was stored"
    )
    created_at: datetime = Field(
        sa_column=utc_datetime_column(nullable=False),
        description="Creation time"
    )
    last_executed_at: Optional[datetime] = Field(
        default=None,
        sa_column=utc_datetime_column(),
        description="Start time of the last completed check"
    )
    next_execution_at: Optional[datetime] = Field(
        default=None,
        sa_column=utc_datetime_column(),
        description="Time the saved search becomes due, NULL when never"
    )


__all__ = ["SavedSearchTable"]
