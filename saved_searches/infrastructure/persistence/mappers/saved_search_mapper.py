"""
Mapper between SavedSearch domain entities and SavedSearchTable persistence models.

Handles bidirectional conversion with proper value object transformations.
Timestamps read back from databases without timezone support are treated as UTC.
"""

from __future__ import annotations

from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.utils.clock import ensure_utc
from saved_searches.domain.value_objects import EmailAddress, SavedSearchId, UserId
from saved_searches.infrastructure.persistence.models.saved_search_table import SavedSearchTable


class SavedSearchMapper:
    """Maps between SavedSearch domain entities and SavedSearchTable persistence models."""

    @staticmethod
    def to_domain(table: SavedSearchTable) -> SavedSearch:
        """Convert SavedSearchTable (persistence) to SavedSearch (domain entity)."""
        return SavedSearch(
            id=SavedSearchId(table.id),
            type_id=table.type_id,
            query_payload=table.query_payload,
            owner_id=UserId(table.owner_id) if table.owner_id else None,
            label=table.label,
            mail=EmailAddress(table.mail) if table.mail else None,
            index_id=table.index_id,
            status=bool(table.status),
            notify_interval=table.notify_interval,
            options=dict(table.options or {}),
            known_results_primed=bool(table.known_results_primed),
            created_at=ensure_utc(table.created_at),
            last_executed_at=ensure_utc(table.last_executed_at),
            next_execution_at=ensure_utc(table.next_execution_at),
        )

    @staticmethod
    def to_table(entity: SavedSearch) -> SavedSearchTable:
        """Convert SavedSearch (domain entity) to SavedSearchTable (persistence)."""
        return SavedSearchTable(
            id=entity.id.value,
            type_id=entity.type_id,
            owner_id=entity.owner_id.value if entity.owner_id else None,
            label=entity.label,
            mail=str(entity.mail) if entity.mail else None,
            index_id=entity.index_id,
            status=entity.status,
            query_payload=entity.query_payload,
            options=dict(entity.options),
            notify_interval=entity.notify_interval,
            known_results_primed=entity.known_results_primed,
            created_at=entity.created_at,
            last_executed_at=entity.last_executed_at,
            next_execution_at=entity.next_execution_at,
        )

    @staticmethod
    def update_table_from_domain(table: SavedSearchTable, entity: SavedSearch) -> None:
        """Update an existing SavedSearchTable in place from a domain entity."""
        table.type_id = entity.type_id
        table.owner_id = entity.owner_id.value if entity.owner_id else None
        table.label = entity.label
        table.mail = str(entity.mail) if entity.mail else None
        table.index_id = entity.index_id
        table.status = entity.status
        table.query_payload = entity.query_payload
        table.options = dict(entity.options)
        table.notify_interval = entity.notify_interval
        table.known_results_primed = entity.known_results_primed
        table.last_executed_at = entity.last_executed_at
        table.next_execution_at = entity.next_execution_at


__all__ = ["SavedSearchMapper"]
