"""
Shared column helpers for SQLModel table definitions.

JSON documents are stored as JSONB on PostgreSQL and as JSON text elsewhere.
All timestamps are stored in UTC.
"""

from typing import Any

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import SQLModel

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def json_column(nullable: bool = False) -> Column:
    return Column(JSONDocument, nullable=nullable, default=dict)


def utc_datetime_column(nullable: bool = True, index: bool = False) -> Column:
    return Column(DateTime(timezone=True), nullable=nullable, index=index)


class BaseModel(SQLModel):
    """Base SQLModel with common configuration."""

    model_config = {
        "arbitrary_types_allowed": True,
        "populate_by_name": True,
    }

    def dict_exclude_none(self, **kwargs: Any) -> dict:
        """Export to dict excluding None values."""
        return self.model_dump(exclude_none=True, **kwargs)


__all__ = ["BaseModel", "JSONDocument", "json_column", "utc_datetime_column"]
