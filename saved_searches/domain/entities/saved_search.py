"""Pure domain representation of saved searches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from saved_searches.domain.exceptions import ValidationError
from saved_searches.domain.utils.clock import ensure_utc, utc_now
from saved_searches.domain.value_objects import EmailAddress, SavedSearchId, UserId

DEFAULT_LABEL = "Saved search"
MAX_LABEL_LENGTH = 255


class NotifyInterval:
    """Conventional notification intervals in seconds."""

    NEVER = -1
    HOURLY = 3600
    DAILY = 86400
    WEEKLY = 604800

    CHOICES = {
        HOURLY: "Hourly",
        DAILY: "Daily",
        WEEKLY: "Weekly",
        NEVER: "Never",
    }


def compute_next_execution(
    last_executed_at: Optional[datetime],
    notify_interval: int,
) -> Optional[datetime]:
    """Return when a search becomes due again.

    A negative interval disables checks. The result may lie in the past, in
    which case the search is due immediately.
    """
    if notify_interval < 0 or last_executed_at is None:
        return None
    return last_executed_at + timedelta(seconds=notify_interval)


@dataclass
class SavedSearch:
    """Aggregate root for a stored query whose owner wants to hear about new results."""

    id: SavedSearchId
    type_id: str
    query_payload: str
    owner_id: Optional[UserId] = None
    label: str = DEFAULT_LABEL
    mail: Optional[EmailAddress] = None
    index_id: Optional[str] = None
    status: bool = True
    notify_interval: int = NotifyInterval.NEVER
    options: Dict[str, Any] = field(default_factory=dict)
    known_results_primed: bool = False

    created_at: datetime = field(default_factory=utc_now)
    last_executed_at: Optional[datetime] = None
    next_execution_at: Optional[datetime] = None

    def __post_init__(self):
        self.created_at = ensure_utc(self.created_at)
        self.last_executed_at = ensure_utc(self.last_executed_at) or self.created_at
        self.next_execution_at = ensure_utc(self.next_execution_at)
        self._validate()

    def _validate(self) -> None:
        if not self.type_id:
            raise ValidationError("Saved search must reference a saved search type")

        if not self.label or not self.label.strip():
            raise ValidationError("Saved search must have a label")

        if len(self.label) > MAX_LABEL_LENGTH:
            raise ValidationError(
                f"Saved search label must be {MAX_LABEL_LENGTH} characters or less"
            )

        if self.notify_interval < NotifyInterval.NEVER:
            raise ValidationError("Notification interval must be -1 or a non-negative number of seconds")

    @property
    def is_anonymous(self) -> bool:
        return self.owner_id is None

    @property
    def search_page(self) -> Optional[str]:
        """Path of the search page the query was saved from, if known."""
        page = self.options.get("page")
        return str(page) if page else None

    def refresh_next_execution(self) -> Optional[datetime]:
        """Recompute ``next_execution_at`` from the last check and the interval.

        Must run before every persist.
        """
        self.next_execution_at = compute_next_execution(
            self.last_executed_at, self.notify_interval
        )
        return self.next_execution_at

    def is_due(self, now: datetime) -> bool:
        return (
            self.status
            and self.next_execution_at is not None
            and self.next_execution_at <= ensure_utc(now)
        )

    def record_check(self, checked_at: datetime) -> None:
        """Record a completed check started at ``checked_at``."""
        self.last_executed_at = ensure_utc(checked_at)
        self.refresh_next_execution()

    def mark_primed(self) -> None:
        self.known_results_primed = True

    def activate(self) -> bool:
        """Activate the search. Returns False if it was already active."""
        if self.status:
            return False
        self.status = True
        return True

    def rename(self, label: str) -> None:
        self.label = label
        self._validate()

    def change_notify_interval(self, notify_interval: int) -> None:
        self.notify_interval = notify_interval
        self._validate()


__all__ = [
    "SavedSearch",
    "NotifyInterval",
    "compute_next_execution",
    "DEFAULT_LABEL",
]
