"""
Domain service deciding which results of a query execution are new.

Two strategies exist:

* Date field: a result is new when its date field is strictly later than the
  time the saved search was last checked. Results without a usable value are
  never new.
* Result ids: a result is new when its id has not been remembered for the
  saved search before.

Both keep the order in which the search backend returned the results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Set

from saved_searches.domain.entities.results import ResultItem
from saved_searches.domain.utils.clock import ensure_utc


def parse_date_value(value: Any) -> Optional[datetime]:
    """Interpret a date field value as an aware UTC datetime.

    Accepts datetimes, Unix timestamps (int/float) and ISO 8601 strings.
    Lists use their first element, as multi-valued fields do in most backends.
    """
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return parse_date_value(int(text))
        try:
            return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


class NewResultsDetector:
    """Pure new-result detection, free of any storage concerns."""

    def new_by_date(
        self,
        results: Iterable[ResultItem],
        date_field: str,
        since: datetime,
    ) -> List[ResultItem]:
        threshold = ensure_utc(since)
        new_results = []
        for item in results:
            value = parse_date_value(item.get(date_field))
            if value is not None and value > threshold:
                new_results.append(item)
        return new_results

    def new_by_known_ids(
        self,
        results: Iterable[ResultItem],
        known_item_ids: Set[str],
    ) -> List[ResultItem]:
        new_results = []
        seen: Set[str] = set()
        for item in results:
            if item.item_id in known_item_ids or item.item_id in seen:
                continue
            seen.add(item.item_id)
            new_results.append(item)
        return new_results


__all__ = ["NewResultsDetector", "parse_date_value"]
