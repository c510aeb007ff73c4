"""Search query value stored inside saved searches."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from saved_searches.domain.exceptions import QueryDeserializationError, ValidationError

# Options describing the request a query was executed in. They only make sense
# during that request and are never stored.
TRANSIENT_OPTIONS = frozenset({"execution_context", "search_display", "request"})

Keys = Union[str, List[str], Dict[str, Any], None]


@dataclass(frozen=True)
class SearchQuery:
    """A search against one index, re-executable at any later time."""

    index_id: str
    keys: Keys = None
    filters: List[Dict[str, Any]] = field(default_factory=list)
    sort: List[Dict[str, Any]] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    limit: Optional[int] = None

    def __post_init__(self):
        if not self.index_id or not str(self.index_id).strip():
            raise ValidationError("Search query must target an index")
        if self.limit is not None and self.limit < 0:
            raise ValidationError("Search query limit cannot be negative")

    def original_keys(self) -> Optional[str]:
        """Keywords as entered by the user, when they are a plain string."""
        if isinstance(self.keys, str) and self.keys.strip():
            return self.keys.strip()
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index_id": self.index_id,
            "keys": self.keys,
            "filters": list(self.filters),
            "sort": list(self.sort),
            "options": {
                key: value
                for key, value in self.options.items()
                if key not in TRANSIENT_OPTIONS
            },
            "limit": self.limit,
        }

    def serialize(self) -> str:
        """Serialize to the inert payload kept on the saved search."""
        return json.dumps(self.to_dict(), sort_keys=True, default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchQuery":
        return cls(
            index_id=data["index_id"],
            keys=data.get("keys"),
            filters=list(data.get("filters") or []),
            sort=list(data.get("sort") or []),
            options=dict(data.get("options") or {}),
            limit=data.get("limit"),
        )

    @classmethod
    def deserialize(cls, payload: str) -> "SearchQuery":
        """Rebuild a query from a stored payload.

        Raises:
            QueryDeserializationError: If the payload is not a valid query.
        """
        try:
            data = json.loads(payload)
            if not isinstance(data, dict):
                raise TypeError("query payload must be a JSON object")
            return cls.from_dict(data)
        except (TypeError, ValueError, KeyError, ValidationError) as e:
            raise QueryDeserializationError(f"Stored query could not be restored: {e}") from e


__all__ = ["SearchQuery", "TRANSIENT_OPTIONS"]
