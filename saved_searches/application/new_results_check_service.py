"""Application service re-running saved searches and reporting new results."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

import structlog

from saved_searches.domain.entities.results import (
    CheckStatus,
    DueCheckReport,
    NewResultsOutcome,
    ResultItem,
    ResultSet,
)
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.domain.entities.search_query import SearchQuery
from saved_searches.domain.exceptions import (
    ConfigurationError,
    NotificationDeliveryError,
    QueryDeserializationError,
    QueryExecutionError,
    SavedSearchTypeDisabledError,
)
from saved_searches.domain.interfaces import INotificationPlugin
from saved_searches.domain.utils.clock import utc_now

if TYPE_CHECKING:
    from saved_searches.application.dependencies.saved_search_dependencies import (
        NewResultsCheckDependencies,
    )


_Resolved = Tuple[SavedSearchType, SearchQuery, INotificationPlugin]


class NewResultsCheckService:
    """Detects new results of saved searches and dispatches notifications.

    Checks of different saved searches may run concurrently. For a single
    saved search at most one check (or priming) runs at a time; a second
    caller is turned away with a ``SKIPPED`` outcome instead of waiting. The
    search is read again once the lock is held, so a caller working from an
    outdated copy never reports a batch that was already reported.
    """

    def __init__(self, dependencies: NewResultsCheckDependencies) -> None:
        self._deps = dependencies
        self._logger = structlog.get_logger(__name__)

    async def check_for_new_results(
        self,
        search: SavedSearch,
        now: Optional[datetime] = None,
        only_if_due: bool = False,
    ) -> NewResultsOutcome:
        """Run one detection cycle for ``search``.

        Args:
            search: The saved search to check
            now: Time the check is considered to start at (defaults to now)
            only_if_due: Skip the search unless it is still due at ``now``

        Returns:
            Outcome describing what happened. Delivery failures are reported
            in the outcome rather than raised.
        """
        async with self._deps.search_lock.hold(search.id) as acquired:
            if not acquired:
                self._logger.info(
                    "Check already running for saved search, skipping",
                    saved_search_id=str(search.id),
                )
                return NewResultsOutcome(
                    search_id=search.id,
                    status=CheckStatus.SKIPPED,
                    reason="check_in_progress",
                )
            try:
                return await self._check_current(search, now or utc_now(), only_if_due)
            finally:
                self._deps.property_cache.invalidate(search.id)

    async def prime_known_results(
        self,
        search: SavedSearch,
        results: Optional[ResultSet] = None,
    ) -> NewResultsOutcome:
        """Remember the current results of a new search without notifying.

        Only searches detecting new results by id need this. When ``results``
        is not given, a result set remembered in the property cache is reused
        before falling back to executing the query. Any failure leaves the
        search unprimed; its next scheduled check primes it instead.
        """
        async with self._deps.search_lock.hold(search.id) as acquired:
            if not acquired:
                return NewResultsOutcome(
                    search_id=search.id,
                    status=CheckStatus.SKIPPED,
                    reason="check_in_progress",
                )
            try:
                resolved = await self._resolve(search)
                if isinstance(resolved, NewResultsOutcome):
                    return resolved
                search_type, query, _ = resolved

                if search_type.date_field_for(query.index_id):
                    # Date based detection compares against last_executed_at only.
                    return NewResultsOutcome(
                        search_id=search.id,
                        status=CheckStatus.SKIPPED,
                        reason="date_field_detection",
                    )

                return await self._prime(search, query, results=results)
            finally:
                self._deps.property_cache.invalidate(search.id)

    async def run_due_checks(
        self,
        now: Optional[datetime] = None,
        limit: int = 100,
    ) -> DueCheckReport:
        """Check every activated saved search whose next execution has come.

        Every check of the pass starts at the same ``now``. An error while
        checking one search is logged and never stops the pass.
        """
        now = now or utc_now()
        due_searches = await self._deps.saved_search_repository.list_due(now, limit=limit)
        report = DueCheckReport()

        self._logger.info("Running due saved search checks", due=len(due_searches))

        for search in due_searches:
            try:
                outcome = await self.check_for_new_results(search, now=now, only_if_due=True)
            except Exception as e:
                self._logger.exception(
                    "Unexpected error while checking saved search",
                    saved_search_id=str(search.id),
                    error=str(e),
                )
                outcome = NewResultsOutcome(
                    search_id=search.id,
                    status=CheckStatus.FAILED,
                    reason="unexpected_error",
                    error=str(e),
                )
            report.add(outcome)

        self._logger.info("Due saved search checks finished", **report.summary())
        return report

    async def _check_current(
        self,
        search: SavedSearch,
        started_at: datetime,
        only_if_due: bool,
    ) -> NewResultsOutcome:
        current = await self._deps.saved_search_repository.get_by_id(search.id)
        if current is None:
            return self._skipped(search, "deleted")
        if current.last_executed_at != search.last_executed_at:
            return self._skipped(search, "already_checked")
        if only_if_due and not current.is_due(started_at):
            return self._skipped(search, "not_due")
        return await self._check(current, started_at)

    async def _check(self, search: SavedSearch, started_at: datetime) -> NewResultsOutcome:
        resolved = await self._resolve(search)
        if isinstance(resolved, NewResultsOutcome):
            # Unusable searches come up again one interval later
            search.record_check(started_at)
            await self._persist(search)
            return resolved
        search_type, query, plugin = resolved

        date_field = search_type.date_field_for(query.index_id)
        if date_field is None and not search.known_results_primed:
            return await self._prime(search, query, checked_at=started_at)

        try:
            results = await self._deps.query_executor.execute(query)
        except QueryExecutionError as e:
            self._logger.warning(
                "Saved search query failed, will retry on next pass",
                saved_search_id=str(search.id),
                error=str(e),
            )
            return NewResultsOutcome(
                search_id=search.id,
                status=CheckStatus.FAILED,
                reason="query_execution_error",
                error=str(e),
            )

        new_results = await self._detect(search, results, date_field)

        search.record_check(started_at)
        if not await self._persist(search):
            return self._skipped(search, "deleted")

        if not new_results:
            self._logger.debug("No new results", saved_search_id=str(search.id))
            return NewResultsOutcome(search_id=search.id, status=CheckStatus.NO_NEW_RESULTS)

        if date_field is None:
            await self._deps.known_result_repository.add_known_item_ids(
                search.id, [item.item_id for item in new_results]
            )

        return await self._dispatch(search, plugin, new_results)

    async def _detect(
        self,
        search: SavedSearch,
        results: ResultSet,
        date_field: Optional[str],
    ) -> List[ResultItem]:
        detector = self._deps.detector
        if date_field:
            return detector.new_by_date(results, date_field, since=search.last_executed_at)

        known_item_ids = await self._deps.known_result_repository.get_known_item_ids(search.id)
        return detector.new_by_known_ids(results, known_item_ids)

    async def _dispatch(
        self,
        search: SavedSearch,
        plugin: INotificationPlugin,
        new_results: List[ResultItem],
    ) -> NewResultsOutcome:
        try:
            await plugin.notify(search, new_results)
        except NotificationDeliveryError as e:
            self._logger.error(
                "Failed to deliver new results notification",
                saved_search_id=str(search.id),
                plugin=plugin.plugin_id,
                new_results=len(new_results),
                error=str(e),
            )
            return NewResultsOutcome(
                search_id=search.id,
                status=CheckStatus.DELIVERY_FAILED,
                new_results=new_results,
                reason="notification_delivery_error",
                error=str(e),
            )

        self._logger.info(
            "New results notification sent",
            saved_search_id=str(search.id),
            plugin=plugin.plugin_id,
            new_results=len(new_results),
        )
        return NewResultsOutcome(
            search_id=search.id,
            status=CheckStatus.NOTIFIED,
            new_results=new_results,
        )

    async def _prime(
        self,
        search: SavedSearch,
        query: SearchQuery,
        checked_at: Optional[datetime] = None,
        results: Optional[ResultSet] = None,
    ) -> NewResultsOutcome:
        if results is None:
            results = self._deps.property_cache.pop_executed_results(search.id)
        if results is None:
            try:
                results = await self._deps.query_executor.execute(query)
            except QueryExecutionError as e:
                self._logger.warning(
                    "Could not prime known results",
                    saved_search_id=str(search.id),
                    error=str(e),
                )
                return NewResultsOutcome(
                    search_id=search.id,
                    status=CheckStatus.FAILED,
                    reason="query_execution_error",
                    error=str(e),
                )

        stored = await self._deps.known_result_repository.add_known_item_ids(
            search.id, results.item_ids
        )
        search.mark_primed()
        if checked_at is not None:
            search.record_check(checked_at)
        if not await self._persist(search):
            await self._deps.known_result_repository.delete_for_searches([search.id])
            return self._skipped(search, "deleted")

        self._logger.info(
            "Known results primed",
            saved_search_id=str(search.id),
            known_results=stored,
        )
        return NewResultsOutcome(search_id=search.id, status=CheckStatus.PRIMED)

    async def _resolve(self, search: SavedSearch) -> Union[_Resolved, NewResultsOutcome]:
        cache = self._deps.property_cache
        try:
            search_type = await cache.get_type(search)
            if not search_type.enabled:
                raise SavedSearchTypeDisabledError(
                    f"Saved search type '{search_type.id}' is disabled"
                )
            plugin = self._deps.notification_plugins.create(
                search_type.notification_plugin,
                search_type.notification_configuration,
            )
            query = cache.get_query(search)
        except ConfigurationError as e:
            self._logger.warning(
                "Saved search configuration is unusable, skipping",
                saved_search_id=str(search.id),
                type_id=search.type_id,
                error=str(e),
            )
            return NewResultsOutcome(
                search_id=search.id,
                status=CheckStatus.SKIPPED,
                reason="configuration_error",
                error=str(e),
            )
        except QueryDeserializationError as e:
            self._logger.warning(
                "Stored query of saved search cannot be restored, skipping",
                saved_search_id=str(search.id),
                error=str(e),
            )
            return NewResultsOutcome(
                search_id=search.id,
                status=CheckStatus.SKIPPED,
                reason="deserialization_error",
                error=str(e),
            )
        return search_type, query, plugin

    async def _persist(self, search: SavedSearch) -> bool:
        search.refresh_next_execution()
        if await self._deps.saved_search_repository.update(search):
            return True
        self._logger.info("Saved search was deleted during its check", saved_search_id=str(search.id))
        return False

    def _skipped(self, search: SavedSearch, reason: str) -> NewResultsOutcome:
        return NewResultsOutcome(search_id=search.id, status=CheckStatus.SKIPPED, reason=reason)


__all__ = ["NewResultsCheckService"]
