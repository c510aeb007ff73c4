"""E-mail notification plugin."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

import structlog

from saved_searches.domain.entities.results import ResultItem
from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.exceptions import MailDeliveryError, NotificationDeliveryError
from saved_searches.domain.interfaces import IMailTransport, INotificationPlugin
from saved_searches.domain.services.links import SavedSearchLinkBuilder
from saved_searches.infrastructure.notifications.tokens import replace_tokens

logger = structlog.get_logger(__name__)

DEFAULT_ACTIVATION_TITLE = "Activate your saved search at [site:name]"
DEFAULT_ACTIVATION_BODY = """A saved search on [site:name] with this e-mail address was created.
To activate this saved search, click the following link:

[activation_link]

If you didn't create this saved search, just ignore this mail and the saved search will be deleted.

--  [site:name] team"""

DEFAULT_NOTIFICATION_TITLE = "New results for your saved search at [site:name]"
DEFAULT_NOTIFICATION_BODY = """There are [search:result_count] new results for your saved search "[search:label]" on [site:name]:

[search:results]

View the search: [search:view_url]
To stop receiving these mails, delete the saved search: [search:delete_url]

--  [site:name] team"""


def default_configuration() -> Dict[str, Any]:
    return {
        "registered_choose_mail": False,
        "activate": {
            "send": True,
            "title": None,
            "body": None,
        },
        "notification": {
            "title": None,
            "body": None,
        },
    }


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def format_results(results: List[ResultItem]) -> str:
    lines = []
    for item in results:
        line = f"- {item.title}"
        if item.url:
            line += f" ({item.url})"
        lines.append(line)
    return "\n".join(lines)


class EmailNotification(INotificationPlugin):
    """Mails new results to the address stored on the saved search.

    Saved searches created anonymously, or by a registered owner for an
    address that is not their own, are only checked after the link in an
    activation mail was followed, unless ``activate.send`` is off.
    """

    plugin_id = "email"

    def __init__(
        self,
        configuration: Optional[Dict[str, Any]],
        transport: IMailTransport,
        links: SavedSearchLinkBuilder,
        site_name: str,
        site_url: str,
    ):
        self.configuration = _merge(default_configuration(), configuration or {})
        self._transport = transport
        self._links = links
        self._site_name = site_name
        self._site_url = site_url

    def choose_mail(
        self,
        search: SavedSearch,
        requested: Optional[str],
        owner_mail: Optional[str] = None,
    ) -> Optional[str]:
        # Registered owners are mailed at their account address unless the
        # type lets them enter another one.
        if search.is_anonymous or not owner_mail:
            return requested
        if self.configuration["registered_choose_mail"] and requested:
            return requested
        return owner_mail

    def requires_activation(self, search: SavedSearch, owner_mail: Optional[str] = None) -> bool:
        if not self.configuration["activate"]["send"]:
            return False
        if search.is_anonymous:
            return True
        return (
            search.mail is not None
            and owner_mail is not None
            and str(search.mail).lower() != owner_mail.strip().lower()
        )

    async def send_activation(self, search: SavedSearch) -> None:
        values = self._token_values(search)
        values["activation_link"] = self._links.activate_url(search)
        activate = self.configuration["activate"]
        await self._send(
            search,
            replace_tokens(activate["title"] or DEFAULT_ACTIVATION_TITLE, values),
            replace_tokens(activate["body"] or DEFAULT_ACTIVATION_BODY, values),
        )
        logger.info("Activation mail sent", saved_search_id=str(search.id))

    async def notify(self, search: SavedSearch, new_results: List[ResultItem]) -> None:
        values = self._token_values(search)
        values["search:results"] = format_results(new_results)
        values["search:result_count"] = str(len(new_results))
        notification = self.configuration["notification"]
        await self._send(
            search,
            replace_tokens(notification["title"] or DEFAULT_NOTIFICATION_TITLE, values),
            replace_tokens(notification["body"] or DEFAULT_NOTIFICATION_BODY, values),
        )

    def _token_values(self, search: SavedSearch) -> Dict[str, str]:
        return {
            "site:name": self._site_name,
            "site:url": self._site_url,
            "search:id": str(search.id),
            "search:label": search.label,
            "search:view_url": self._links.view_url(search),
            "search:edit_url": self._links.edit_url(search),
            "search:delete_url": self._links.delete_url(search),
            "user:mail": str(search.mail) if search.mail else "",
        }

    async def _send(self, search: SavedSearch, subject: str, body: str) -> None:
        if search.mail is None:
            raise NotificationDeliveryError(
                f"Saved search {search.id} has no e-mail address to notify"
            )
        try:
            await self._transport.send_email(str(search.mail), subject, body)
        except OSError as e:
            raise MailDeliveryError(f"Mail transport failed: {e}") from e


__all__ = [
    "EmailNotification",
    "default_configuration",
    "format_results",
    "DEFAULT_ACTIVATION_TITLE",
    "DEFAULT_ACTIVATION_BODY",
    "DEFAULT_NOTIFICATION_TITLE",
    "DEFAULT_NOTIFICATION_BODY",
]
