"""Mapper between SavedSearchType domain entities and SavedSearchTypeTable rows."""

from __future__ import annotations

import copy

from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.infrastructure.persistence.models.saved_search_type_table import (
    SavedSearchTypeTable,
)


class SavedSearchTypeMapper:
    """Maps between SavedSearchType domain entities and SavedSearchTypeTable models."""

    @staticmethod
    def to_domain(table: SavedSearchTypeTable) -> SavedSearchType:
        return SavedSearchType(
            id=table.id,
            label=table.label,
            enabled=bool(table.enabled),
            is_default=bool(table.is_default),
            options=copy.deepcopy(table.options or {}),
            notification_plugin=table.notification_plugin,
            notification_configuration=copy.deepcopy(table.notification_configuration or {}),
        )

    @staticmethod
    def to_table(entity: SavedSearchType) -> SavedSearchTypeTable:
        return SavedSearchTypeTable(
            id=entity.id,
            label=entity.label,
            enabled=entity.enabled,
            is_default=entity.is_default,
            options=copy.deepcopy(entity.options),
            notification_plugin=entity.notification_plugin,
            notification_configuration=copy.deepcopy(entity.notification_configuration),
        )

    @staticmethod
    def update_table_from_domain(table: SavedSearchTypeTable, entity: SavedSearchType) -> None:
        # Nested JSON is replaced wholesale so the change is detected on flush
        table.label = entity.label
        table.enabled = entity.enabled
        table.is_default = entity.is_default
        table.options = copy.deepcopy(entity.options)
        table.notification_plugin = entity.notification_plugin
        table.notification_configuration = copy.deepcopy(entity.notification_configuration)


__all__ = ["SavedSearchTypeMapper"]
