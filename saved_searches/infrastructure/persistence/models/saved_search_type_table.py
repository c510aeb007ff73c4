"""SQLModel table for saved search types."""

from typing import Any, Dict

from sqlalchemy import Boolean, Column, String
from sqlmodel import Field

from saved_searches.infrastructure.persistence.models.base import BaseModel, json_column


class SavedSearchTypeTable(BaseModel, table=True):
    """Saved search type configuration."""
    __tablename__ = "saved_search_types"

    id: str = Field(
        sa_column=Column(String(64), primary_key=True),
        description="Machine name of the type"
    )
    label: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Human readable label"
    )
    enabled: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, default=True),
        description="Whether new saved searches of this type are checked"
    )
    is_default: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False, index=True),
        description="Whether this is the default type"
    )
    options: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=json_column(),
        description="Nested type options, e.g. date_field per index"
    )
    notification_plugin: str = Field(
        default="email",
        sa_column=Column(String(64), nullable=False, default="email"),
        description="Notification plugin id"
    )
    notification_configuration: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=json_column(),
        description="Notification plugin configuration"
    )


__all__ = ["SavedSearchTypeTable"]
