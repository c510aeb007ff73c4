"""Domain-layer service interfaces.

These abstractions define the stable contracts that the application layer relies on,
while infrastructure adapters provide concrete implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Dict, Hashable, List, Optional

from saved_searches.domain.entities.results import ResultItem, ResultSet
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.entities.search_query import SearchQuery


class IHealthCheck:
    """Health check interface mixin."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """Return health check details."""
        pass


class IQueryExecutor(IHealthCheck, ABC):
    """Runs stored queries against the search backend."""

    @abstractmethod
    async def execute(self, query: SearchQuery) -> ResultSet:
        """Execute a query.

        Raises:
            QueryExecutionError: On timeouts or backend failures.
        """
        pass


class IMailTransport(IHealthCheck, ABC):
    """Hands mails over for delivery."""

    @abstractmethod
    async def send_email(self, to: str, subject: str, body: str, is_html: bool = False) -> None:
        """Send one mail.

        Raises:
            MailDeliveryError: If the mail could not be handed over.
        """
        pass


class INotificationPlugin(ABC):
    """Tells the owner of a saved search about new results."""

    plugin_id: str = ""

    @abstractmethod
    async def notify(self, search: SavedSearch, new_results: List[ResultItem]) -> None:
        """Deliver one batch of new results.

        Raises:
            NotificationDeliveryError: If delivery failed.
        """
        pass

    def choose_mail(
        self,
        search: SavedSearch,
        requested: Optional[str],
        owner_mail: Optional[str] = None,
    ) -> Optional[str]:
        """Return the address notifications of ``search`` should go to.

        ``owner_mail`` is the account address of a registered owner, if known.
        """
        return requested or owner_mail

    def requires_activation(self, search: SavedSearch, owner_mail: Optional[str] = None) -> bool:
        """Whether a search must be confirmed before it is checked."""
        return False

    async def send_activation(self, search: SavedSearch) -> None:
        """Ask the owner to confirm a newly created search."""
        return None


class INotificationPluginFactory(ABC):
    """Creates configured notification plugins by id."""

    @abstractmethod
    def create(self, plugin_id: str, configuration: Dict[str, Any]) -> INotificationPlugin:
        """Return the plugin registered as ``plugin_id``.

        Raises:
            UnknownNotificationPluginError: If no such plugin is registered.
        """
        pass


class ISearchLock(ABC):
    """Mutual exclusion of work on the same key."""

    @abstractmethod
    def hold(self, key: Hashable, wait: bool = False) -> AsyncContextManager[bool]:
        """Take the lock for ``key``.

        Without ``wait`` the context manager yields False right away when
        somebody else holds or waits for the lock. With ``wait`` it blocks
        until the lock is free and always yields True.
        """
        pass

    @abstractmethod
    def is_held(self, key: Hashable) -> bool:
        pass

    @abstractmethod
    def discard(self, key: Hashable) -> None:
        """Forget the lock of ``key`` if nobody holds it."""
        pass


__all__ = [
    "IHealthCheck",
    "IQueryExecutor",
    "IMailTransport",
    "INotificationPlugin",
    "INotificationPluginFactory",
    "ISearchLock",
]
