"""Absolute links to saved search operations, as used in notification mails."""

from __future__ import annotations

from urllib.parse import urlencode

from saved_searches.domain.entities.saved_search import SavedSearch
from saved_searches.domain.services.access_tokens import AccessTokenService

API_PREFIX = "/api/v1/saved-searches"


class SavedSearchLinkBuilder:
    """Build links to a saved search.

    Every link carries the access token for its operation unless
    ``with_token`` is False.
    """

    def __init__(self, site_url: str, tokens: AccessTokenService):
        self._site_url = site_url.rstrip("/")
        self._tokens = tokens

    def url(self, search: SavedSearch, operation: str = "view", *, with_token: bool = True) -> str:
        path = f"{API_PREFIX}/{search.id}"
        if operation == "activate":
            path += f"/{operation}"
        if with_token:
            query = urlencode({"token": self._tokens.get_token(search.id, operation)})
            return f"{self._site_url}{path}?{query}"
        return f"{self._site_url}{path}"

    def view_url(self, search: SavedSearch) -> str:
        return self.url(search, "view")

    def activate_url(self, search: SavedSearch) -> str:
        return self.url(search, "activate")

    def edit_url(self, search: SavedSearch) -> str:
        return self.url(search, "edit")

    def delete_url(self, search: SavedSearch) -> str:
        return self.url(search, "delete")


__all__ = ["SavedSearchLinkBuilder", "API_PREFIX"]
