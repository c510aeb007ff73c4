"""Search results and the outcome of new-results checks."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from saved_searches.domain.value_objects import SavedSearchId


@dataclass(frozen=True)
class ResultItem:
    """One result returned by the search backend."""

    item_id: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @property
    def title(self) -> str:
        for name in ("title", "label", "name"):
            value = self.fields.get(name)
            if value:
                return str(value)
        return self.item_id

    @property
    def url(self) -> Optional[str]:
        value = self.fields.get("url")
        return str(value) if value else None


@dataclass(frozen=True)
class ResultSet:
    """Ordered results of one query execution."""

    items: List[ResultItem] = field(default_factory=list)
    total: Optional[int] = None

    def __iter__(self) -> Iterator[ResultItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]


class CheckStatus(str, Enum):
    """Result of checking a single saved search."""

    NOTIFIED = "notified"
    DELIVERY_FAILED = "delivery_failed"
    NO_NEW_RESULTS = "no_new_results"
    PRIMED = "primed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class NewResultsOutcome:
    """What a check did for one saved search."""

    search_id: SavedSearchId
    status: CheckStatus
    new_results: List[ResultItem] = field(default_factory=list)
    reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def new_result_count(self) -> int:
        return len(self.new_results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search_id": str(self.search_id),
            "status": self.status.value,
            "new_results": self.new_result_count,
            "reason": self.reason,
            "error": self.error,
        }


@dataclass
class DueCheckReport:
    """Summary of one pass over all due saved searches."""

    outcomes: List[NewResultsOutcome] = field(default_factory=list)

    def add(self, outcome: NewResultsOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def checked(self) -> int:
        return len(self.outcomes)

    def count(self, status: CheckStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def summary(self) -> Dict[str, int]:
        counts = Counter(outcome.status.value for outcome in self.outcomes)
        return {status.value: counts.get(status.value, 0) for status in CheckStatus}


__all__ = [
    "ResultItem",
    "ResultSet",
    "CheckStatus",
    "NewResultsOutcome",
    "DueCheckReport",
]
