"""SQLModel table remembering results already reported to a saved search."""

from uuid import UUID

from sqlalchemy import Column, ForeignKey, String, Uuid
from sqlmodel import Field

from saved_searches.infrastructure.persistence.models.base import BaseModel


class KnownResultTable(BaseModel, table=True):
    """One (saved search, result item) pair."""
    __tablename__ = "saved_search_known_results"

    search_id: UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("saved_searches.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        description="Saved search the item was reported to"
    )
    item_id: str = Field(
        sa_column=Column(String(255), primary_key=True),
        description="Result item identifier"
    )


__all__ = ["KnownResultTable"]
