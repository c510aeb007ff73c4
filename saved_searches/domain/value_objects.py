"""Domain value objects used across aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID, uuid4


def _coerce_uuid(value: Any, *, field_name: str) -> UUID:
    """Convert strings to UUID instances while validating type."""
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        return UUID(value)
    raise TypeError(f"{field_name} must be a UUID-compatible value")


@dataclass(frozen=True)
class SavedSearchId:
    """Aggregate identifier for SavedSearch domain entities."""

    value: UUID

    def __init__(self, value: Any):
        object.__setattr__(self, "value", _coerce_uuid(value, field_name="saved_search_id"))

    @classmethod
    def generate(cls) -> "SavedSearchId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Identifier of the user owning a saved search."""

    value: UUID

    def __init__(self, value: Any):
        object.__setattr__(self, "value", _coerce_uuid(value, field_name="user_id"))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EmailAddress:
    """Value object for email addresses with validation."""

    value: str

    def __init__(self, value: str):
        if not value or "@" not in value:
            raise ValueError("Invalid email address format")

        object.__setattr__(self, "value", value.lower().strip())

    def __str__(self) -> str:
        return self.value


__all__ = [
    "SavedSearchId",
    "UserId",
    "EmailAddress",
]
