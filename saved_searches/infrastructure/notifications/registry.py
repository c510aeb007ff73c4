"""Registry resolving notification plugin ids to configured plugin instances."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

import structlog

from saved_searches.domain.exceptions import UnknownNotificationPluginError
from saved_searches.domain.interfaces import INotificationPlugin, INotificationPluginFactory

logger = structlog.get_logger(__name__)

PluginBuilder = Callable[[Dict[str, Any]], INotificationPlugin]


class NotificationPluginRegistry(INotificationPluginFactory):
    """Maps plugin ids to builders taking the type's plugin configuration."""

    def __init__(self):
        self._builders: Dict[str, PluginBuilder] = {}

    def register(self, plugin_id: str, builder: PluginBuilder) -> None:
        if plugin_id in self._builders:
            logger.warning("Replacing notification plugin", plugin_id=plugin_id)
        self._builders[plugin_id] = builder

    def create(self, plugin_id: str, configuration: Dict[str, Any]) -> INotificationPlugin:
        try:
            builder = self._builders[plugin_id]
        except KeyError:
            raise UnknownNotificationPluginError(
                f"Notification plugin '{plugin_id}' is not registered"
            ) from None
        return builder(configuration or {})

    @property
    def plugin_ids(self) -> List[str]:
        return sorted(self._builders)


__all__ = ["NotificationPluginRegistry", "PluginBuilder"]
