"""Saved search types: configuration shared by a group of saved searches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from saved_searches.domain.exceptions import ValidationError

DEFAULT_NOTIFICATION_PLUGIN = "email"

_MISSING = object()


class DetectionMode(str, Enum):
    """How new results are told apart from already reported ones."""

    DATE_FIELD = "date_field"
    RESULT_IDS = "result_ids"


@dataclass
class SavedSearchType:
    """Bundle of saved searches sharing detection and notification settings.

    ``options`` is a nested mapping. Recognised keys:

    * ``date_field.<index_id>``: field holding a monotonic date for results of
      that index. When set, new results are detected by date instead of by
      remembering result ids.
    * ``displays``: identifiers of the search pages allowed to create searches
      of this type.
    """

    id: str
    label: str
    enabled: bool = True
    is_default: bool = False
    options: Dict[str, Any] = field(default_factory=dict)
    notification_plugin: str = DEFAULT_NOTIFICATION_PLUGIN
    notification_configuration: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id or not self.id.strip():
            raise ValidationError("Saved search type must have an id")
        if not self.label or not self.label.strip():
            raise ValidationError("Saved search type must have a label")
        if not self.notification_plugin:
            raise ValidationError("Saved search type must have a notification plugin")

    def get_option(self, key: str, default: Any = None) -> Any:
        """Look up an option by dotted path, e.g. ``date_field.products``."""
        value: Any = self.options
        for part in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(part, _MISSING)
            if value is _MISSING:
                return default
        return value

    def set_option(self, key: str, value: Any) -> None:
        parts = key.split(".")
        target = self.options
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[parts[-1]] = value

    def date_field_for(self, index_id: Optional[str]) -> Optional[str]:
        if not index_id:
            return None
        date_field = self.get_option(f"date_field.{index_id}")
        return date_field or None

    def detection_mode_for(self, index_id: Optional[str]) -> DetectionMode:
        if self.date_field_for(index_id):
            return DetectionMode.DATE_FIELD
        return DetectionMode.RESULT_IDS

    @property
    def displays(self) -> List[str]:
        return list(self.get_option("displays", []) or [])


__all__ = [
    "SavedSearchType",
    "DetectionMode",
    "DEFAULT_NOTIFICATION_PLUGIN",
]
