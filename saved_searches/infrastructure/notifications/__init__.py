"""Notification plugins for saved searches."""

from .email import EmailNotification
from .registry import NotificationPluginRegistry
from .tokens import replace_tokens

__all__ = ["EmailNotification", "NotificationPluginRegistry", "replace_tokens"]
