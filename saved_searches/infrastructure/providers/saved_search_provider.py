"""Saved search service provider utilities."""

from __future__ import annotations

import asyncio
from typing import Optional

from saved_searches.application.dependencies import (
    NewResultsCheckDependencies,
    SavedSearchDependencies,
)
from saved_searches.application.new_results_check_service import NewResultsCheckService
from saved_searches.application.property_cache import SavedSearchPropertyCache
from saved_searches.application.saved_search_service import SavedSearchApplicationService
from saved_searches.core.config import get_settings
from saved_searches.domain.interfaces import IMailTransport
from saved_searches.domain.services.access_tokens import AccessTokenService
from saved_searches.domain.services.links import SavedSearchLinkBuilder
from saved_searches.infrastructure.adapters import (
    HttpQueryExecutor,
    KeyedLockRegistry,
    LocalMailTransport,
    SmtpMailTransport,
)
from saved_searches.infrastructure.notifications import (
    EmailNotification,
    NotificationPluginRegistry,
)
from saved_searches.infrastructure.persistence.repositories.known_result_repository import (
    SQLKnownResultRepository,
)
from saved_searches.infrastructure.persistence.repositories.saved_search_repository import (
    SQLSavedSearchRepository,
)
from saved_searches.infrastructure.persistence.repositories.saved_search_type_repository import (
    SQLSavedSearchTypeRepository,
)
from saved_searches.services.periodic_check import PeriodicNewResultsCheck

_access_tokens: Optional[AccessTokenService] = None
_mail_transport: Optional[IMailTransport] = None
_notification_plugins: Optional[NotificationPluginRegistry] = None
_query_executor: Optional[HttpQueryExecutor] = None
_search_lock: Optional[KeyedLockRegistry] = None
_property_cache: Optional[SavedSearchPropertyCache] = None
_check_service: Optional[NewResultsCheckService] = None
_saved_search_service: Optional[SavedSearchApplicationService] = None
_periodic_check: Optional[PeriodicNewResultsCheck] = None

_infrastructure_lock = asyncio.Lock()
_service_lock = asyncio.Lock()
_periodic_lock = asyncio.Lock()


def get_access_token_service() -> AccessTokenService:
    """Return the token service signing saved search links."""
    global _access_tokens
    if _access_tokens is None:
        _access_tokens = AccessTokenService(get_settings().HASH_SALT)
    return _access_tokens


def get_mail_transport() -> IMailTransport:
    """Return the SMTP transport when configured, otherwise the logging one."""
    global _mail_transport
    if _mail_transport is None:
        settings = get_settings()
        if settings.is_smtp_configured():
            _mail_transport = SmtpMailTransport(
                host=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                sender=settings.MAIL_FROM,
                username=settings.SMTP_USERNAME,
                password=settings.SMTP_PASSWORD,
                use_tls=settings.SMTP_USE_TLS,
                timeout=settings.SMTP_TIMEOUT,
            )
        else:
            _mail_transport = LocalMailTransport()
    return _mail_transport


def _build_notification_registry() -> NotificationPluginRegistry:
    settings = get_settings()
    links = SavedSearchLinkBuilder(settings.SITE_URL, get_access_token_service())
    transport = get_mail_transport()

    registry = NotificationPluginRegistry()
    registry.register(
        EmailNotification.plugin_id,
        lambda configuration: EmailNotification(
            configuration,
            transport=transport,
            links=links,
            site_name=settings.SITE_NAME,
            site_url=settings.SITE_URL,
        ),
    )
    return registry


async def _ensure_infrastructure() -> None:
    global _notification_plugins, _query_executor, _search_lock, _property_cache

    if _property_cache is not None:
        return

    async with _infrastructure_lock:
        if _property_cache is not None:
            return

        settings = get_settings()
        _notification_plugins = _build_notification_registry()
        _query_executor = HttpQueryExecutor(
            settings.SEARCH_BACKEND_URL, timeout=settings.SEARCH_BACKEND_TIMEOUT
        )
        _search_lock = KeyedLockRegistry()
        _property_cache = SavedSearchPropertyCache(SQLSavedSearchTypeRepository())


async def get_new_results_check_service() -> NewResultsCheckService:
    """Return the singleton new results check service."""
    global _check_service

    if _check_service is not None:
        return _check_service

    await _ensure_infrastructure()

    async with _service_lock:
        if _check_service is not None:
            return _check_service

        _check_service = NewResultsCheckService(
            NewResultsCheckDependencies(
                saved_search_repository=SQLSavedSearchRepository(),
                known_result_repository=SQLKnownResultRepository(),
                query_executor=_query_executor,
                notification_plugins=_notification_plugins,
                search_lock=_search_lock,
                property_cache=_property_cache,
            )
        )
        return _check_service


async def get_saved_search_service() -> SavedSearchApplicationService:
    """Return the singleton saved search application service."""
    global _saved_search_service

    if _saved_search_service is not None:
        return _saved_search_service

    check_service = await get_new_results_check_service()

    async with _service_lock:
        if _saved_search_service is not None:
            return _saved_search_service

        _saved_search_service = SavedSearchApplicationService(
            SavedSearchDependencies(
                saved_search_repository=SQLSavedSearchRepository(),
                saved_search_type_repository=SQLSavedSearchTypeRepository(),
                property_cache=_property_cache,
                new_results_check_service=check_service,
                notification_plugins=_notification_plugins,
                access_tokens=get_access_token_service(),
                search_lock=_search_lock,
            )
        )
        return _saved_search_service


async def get_periodic_check() -> PeriodicNewResultsCheck:
    """Return the background checker (not started)."""
    global _periodic_check

    if _periodic_check is not None:
        return _periodic_check

    check_service = await get_new_results_check_service()

    async with _periodic_lock:
        if _periodic_check is None:
            settings = get_settings()
            _periodic_check = PeriodicNewResultsCheck(
                check_service,
                interval_seconds=settings.CHECK_INTERVAL_SECONDS,
                batch_size=settings.CHECK_BATCH_SIZE,
            )
        return _periodic_check


async def reset_saved_search_services() -> None:
    """Stop background work and drop every cached instance."""
    global _access_tokens, _mail_transport, _notification_plugins, _query_executor
    global _search_lock, _property_cache, _check_service, _saved_search_service
    global _periodic_check

    async with _periodic_lock:
        if _periodic_check is not None:
            await _periodic_check.shutdown()
        _periodic_check = None

    async with _service_lock:
        _check_service = None
        _saved_search_service = None

    async with _infrastructure_lock:
        if _query_executor is not None:
            await _query_executor.close()
        _query_executor = None
        _notification_plugins = None
        _search_lock = None
        _property_cache = None
        _mail_transport = None
        _access_tokens = None


__all__ = [
    "get_access_token_service",
    "get_mail_transport",
    "get_new_results_check_service",
    "get_periodic_check",
    "get_saved_search_service",
    "reset_saved_search_services",
]
