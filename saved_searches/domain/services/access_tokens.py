"""Signed tokens granting access to a single saved search operation."""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Optional

from saved_searches.domain.exceptions import InvalidAccessTokenError, ValidationError
from saved_searches.domain.value_objects import SavedSearchId

OPERATIONS = ("view", "activate", "edit", "delete")


class AccessTokenService:
    """
    Generate and verify per-search access tokens.

    A token is the unpadded URL-safe base64 of
    HMAC-SHA256(hash_salt, "saved_search:<id>:<operation>"). It lets owners of
    anonymous saved searches reach them from links in notification mails.
    """

    def __init__(self, hash_salt: str):
        if not hash_salt:
            raise ValidationError("An access token salt is required")
        self._key = hash_salt.encode("utf-8")

    def get_token(self, search_id: SavedSearchId, operation: str = "view") -> str:
        if operation not in OPERATIONS:
            raise ValidationError(f"Unknown saved search operation: {operation}")
        message = f"saved_search:{search_id}:{operation}".encode("utf-8")
        digest = hmac.new(self._key, message, hashlib.sha256).digest()
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")

    def is_valid(self, search_id: SavedSearchId, operation: str, token: Optional[str]) -> bool:
        if not token:
            return False
        return hmac.compare_digest(self.get_token(search_id, operation), token)

    def verify(self, search_id: SavedSearchId, operation: str, token: Optional[str]) -> None:
        if not self.is_valid(search_id, operation, token):
            raise InvalidAccessTokenError(
                f"Access token is not valid for operation '{operation}'"
            )


__all__ = ["AccessTokenService", "OPERATIONS"]
