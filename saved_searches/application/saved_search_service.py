"""Application layer orchestrator for saved search lifecycle workflows."""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import structlog

from saved_searches.domain.entities.results import ResultSet
from saved_searches.domain.entities.saved_search import DEFAULT_LABEL, SavedSearch
from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.domain.entities.search_query import SearchQuery
from saved_searches.domain.exceptions import (
    NotificationDeliveryError,
    SavedSearchNotFoundError,
    SavedSearchTypeDisabledError,
    SavedSearchTypeNotFoundError,
    SearchPageNotFoundError,
    ValidationError,
)
from saved_searches.domain.interfaces import INotificationPlugin
from saved_searches.domain.value_objects import EmailAddress, SavedSearchId, UserId

if TYPE_CHECKING:
    from saved_searches.application.dependencies.saved_search_dependencies import (
        SavedSearchDependencies,
    )


logger = structlog.get_logger(__name__)

_UNSET: Any = object()


def _email(value: Optional[str]) -> Optional[EmailAddress]:
    if not value:
        return None
    try:
        return EmailAddress(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class SavedSearchApplicationService:
    """Coordinates the lifecycle of saved searches.

    Creation, update and deletion each run their follow-up steps explicitly:

    - create: schedule, persist, prime known results, ask for activation
    - update: reschedule, persist, drop cached properties
    - delete: remove the searches and their known results in one transaction
    """

    def __init__(self, dependencies: SavedSearchDependencies) -> None:
        """Initialize with injected dependencies.

        Args:
            dependencies: All required services and repositories
        """
        self._deps = dependencies
        self._logger = structlog.get_logger(__name__)

    async def create_saved_search(
        self,
        query: SearchQuery,
        type_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        label: Optional[str] = None,
        mail: Optional[str] = None,
        notify_interval: int = -1,
        options: Optional[Dict[str, Any]] = None,
        executed_results: Optional[ResultSet] = None,
        owner_mail: Optional[str] = None,
    ) -> SavedSearch:
        """Create a new saved search.

        Args:
            query: The query to re-run
            type_id: Saved search type, the default type when omitted
            owner_id: Owning user, None for anonymous searches
            label: Label, derived from the query keywords when omitted
            mail: Address notifications are sent to
            notify_interval: Seconds between checks, -1 to never check
            options: Free-form options such as the search ``page``
            executed_results: Results of the query already executed while
                handling the current request, reused for priming
            owner_mail: Account address of a registered owner

        Returns:
            Created SavedSearch domain entity

        Raises:
            SavedSearchTypeNotFoundError: If the type does not exist
            ValidationError: If the saved search is invalid
        """
        search_type = await self._resolve_type(type_id)

        saved_search = SavedSearch(
            id=SavedSearchId.generate(),
            type_id=search_type.id,
            query_payload=query.serialize(),
            owner_id=UserId(owner_id) if owner_id else None,
            label=label.strip() if label and label.strip() else (query.original_keys() or DEFAULT_LABEL),
            index_id=query.index_id,
            notify_interval=notify_interval,
            options=dict(options or {}),
        )

        self._logger.info(
            "Creating saved search",
            saved_search_id=str(saved_search.id),
            type_id=search_type.id,
            anonymous=saved_search.is_anonymous,
            notify_interval=notify_interval,
        )

        plugin = self._plugin(search_type)
        saved_search.mail = _email(plugin.choose_mail(saved_search, mail, owner_mail))
        needs_activation = plugin.requires_activation(saved_search, owner_mail)
        if needs_activation:
            saved_search.status = False

        saved_search = await self._persist(saved_search)

        cache = self._deps.property_cache
        cache.remember_query(saved_search, query)
        if executed_results is not None:
            cache.remember_executed_results(saved_search.id, executed_results)
        await self._deps.new_results_check_service.prime_known_results(saved_search)

        if needs_activation:
            await self._send_activation(plugin, saved_search)

        self._logger.info(
            "Saved search created successfully",
            saved_search_id=str(saved_search.id),
            activated=saved_search.status,
        )

        return saved_search

    async def get_saved_search(self, saved_search_id: str) -> SavedSearch:
        """Get a saved search by ID.

        Raises:
            SavedSearchNotFoundError: If no such saved search exists
        """
        try:
            search_id = SavedSearchId(saved_search_id)
        except (TypeError, ValueError):
            raise SavedSearchNotFoundError(f"Saved search {saved_search_id} not found") from None

        saved_search = await self._deps.saved_search_repository.get_by_id(search_id)
        if saved_search is None:
            raise SavedSearchNotFoundError(f"Saved search {saved_search_id} not found")
        return saved_search

    async def get_authorized_saved_search(
        self,
        saved_search_id: str,
        operation: str,
        token: Optional[str],
    ) -> SavedSearch:
        """Get a saved search after checking the access token for ``operation``.

        Raises:
            SavedSearchNotFoundError: If no such saved search exists
            InvalidAccessTokenError: If the token does not match
        """
        saved_search = await self.get_saved_search(saved_search_id)
        self._deps.access_tokens.verify(saved_search.id, operation, token)
        return saved_search

    async def get_search_page(self, saved_search_id: str, token: Optional[str]) -> str:
        """Return the search page a saved search should be viewed on."""
        saved_search = await self.get_authorized_saved_search(saved_search_id, "view", token)
        page = saved_search.search_page
        if not page:
            raise SearchPageNotFoundError(
                f"Saved search {saved_search_id} has no search page"
            )
        return page

    async def list_owner_saved_searches(
        self,
        owner_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> List[SavedSearch]:
        return await self._deps.saved_search_repository.list_by_owner(
            UserId(owner_id), limit=limit, offset=offset
        )

    async def update_saved_search(
        self,
        saved_search_id: str,
        token: Optional[str],
        label: Optional[str] = None,
        mail: Any = _UNSET,
        notify_interval: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
        owner_mail: Optional[str] = None,
    ) -> SavedSearch:
        """Update a saved search.

        Changing the interval reschedules the search relative to its last
        check. Pass ``mail=None`` to remove the notification address. A new
        address the notification plugin does not trust deactivates the search
        until its activation link was followed. Waits for a running check of
        the search to finish first.
        """
        saved_search = await self.get_authorized_saved_search(saved_search_id, "edit", token)

        async with self._deps.search_lock.hold(saved_search.id, wait=True):
            saved_search = await self.get_saved_search(saved_search_id)
            plugin = None

            if label is not None:
                saved_search.rename(label)
            if mail is not _UNSET:
                previous = saved_search.mail
                plugin = self._plugin(await self._resolve_type(saved_search.type_id))
                saved_search.mail = _email(plugin.choose_mail(saved_search, mail, owner_mail))
                if (
                    saved_search.mail is None
                    or saved_search.mail == previous
                    or not plugin.requires_activation(saved_search, owner_mail)
                ):
                    plugin = None
                else:
                    saved_search.status = False
            if notify_interval is not None:
                saved_search.change_notify_interval(notify_interval)
            if options is not None:
                saved_search.options = dict(options)

            saved_search = await self._persist(saved_search)
            self._deps.property_cache.invalidate(saved_search.id)

        if plugin is not None:
            await self._send_activation(plugin, saved_search)

        self._logger.info(
            "Saved search updated",
            saved_search_id=saved_search_id,
            activated=saved_search.status,
            next_execution_at=saved_search.next_execution_at,
        )

        return saved_search

    async def activate_saved_search(self, saved_search_id: str, token: Optional[str]) -> SavedSearch:
        """Activate a saved search from its activation link."""
        saved_search = await self.get_authorized_saved_search(saved_search_id, "activate", token)

        async with self._deps.search_lock.hold(saved_search.id, wait=True):
            saved_search = await self.get_saved_search(saved_search_id)
            if not saved_search.activate():
                self._logger.debug("Saved search already active", saved_search_id=saved_search_id)
                return saved_search
            saved_search = await self._persist(saved_search)

        self._logger.info("Saved search activated", saved_search_id=saved_search_id)
        return saved_search

    async def delete_saved_search(self, saved_search_id: str, token: Optional[str]) -> bool:
        """Delete a saved search reached through a delete link."""
        saved_search = await self.get_authorized_saved_search(saved_search_id, "delete", token)
        deleted = await self.delete_saved_searches([saved_search.id])
        return deleted > 0

    async def delete_saved_searches(self, saved_search_ids: Sequence[SavedSearchId]) -> int:
        """Delete saved searches and everything remembered for them.

        The known results of all given searches are removed in the same
        transaction as the searches themselves. Running checks of any of the
        searches are waited for, and no new check starts until the deletion
        is done.
        """
        ids = list(dict.fromkeys(saved_search_ids))
        if not ids:
            return 0

        async with AsyncExitStack() as stack:
            for saved_search_id in sorted(ids, key=str):
                await stack.enter_async_context(
                    self._deps.search_lock.hold(saved_search_id, wait=True)
                )
            deleted = await self._deps.saved_search_repository.delete_many(ids)

        for saved_search_id in ids:
            self._deps.property_cache.invalidate(saved_search_id)
            self._deps.search_lock.discard(saved_search_id)

        self._logger.info("Saved searches deleted", requested=len(ids), deleted=deleted)
        return deleted

    async def ensure_default_type(self, type_id: str, label: str = "Default") -> SavedSearchType:
        """Create the default saved search type unless a default exists."""
        repository = self._deps.saved_search_type_repository
        default_type = await repository.get_default()
        if default_type is not None:
            return default_type

        existing = await repository.get_by_id(type_id)
        if existing is not None:
            existing.is_default = True
            return await repository.save(existing)

        default_type = SavedSearchType(id=type_id, label=label, is_default=True)
        self._logger.info("Creating default saved search type", type_id=type_id)
        return await repository.save(default_type)

    async def _resolve_type(self, type_id: Optional[str]) -> SavedSearchType:
        repository = self._deps.saved_search_type_repository
        if type_id:
            search_type = await repository.get_by_id(type_id)
        else:
            search_type = await repository.get_default()

        if search_type is None:
            raise SavedSearchTypeNotFoundError(
                f"Saved search type '{type_id}' does not exist"
                if type_id
                else "No default saved search type is configured"
            )
        if not search_type.enabled:
            raise SavedSearchTypeDisabledError(f"Saved search type '{search_type.id}' is disabled")
        return search_type

    def _plugin(self, search_type: SavedSearchType) -> INotificationPlugin:
        return self._deps.notification_plugins.create(
            search_type.notification_plugin,
            search_type.notification_configuration,
        )

    async def _send_activation(self, plugin: INotificationPlugin, saved_search: SavedSearch) -> None:
        try:
            await plugin.send_activation(saved_search)
        except NotificationDeliveryError as e:
            self._logger.error(
                "Failed to send activation mail",
                saved_search_id=str(saved_search.id),
                error=str(e),
            )

    async def _persist(self, saved_search: SavedSearch) -> SavedSearch:
        saved_search.refresh_next_execution()
        return await self._deps.saved_search_repository.save(saved_search)


__all__ = ["SavedSearchApplicationService"]
