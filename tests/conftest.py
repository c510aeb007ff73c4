"""Pytest fixtures for provider-based architecture."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator

os.environ.setdefault("HASH_SALT", "test-salt-that-is-long-enough-for-hmac-signing")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CHECKS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest

from saved_searches.core.config import Settings
from saved_searches.database.sqlmodel_engine import SQLModelDatabaseManager
from saved_searches.infrastructure.providers.database_provider import (
    reset_database_manager,
    set_database_manager,
)
from saved_searches.infrastructure.providers.saved_search_provider import (
    reset_saved_search_services,
)

TEST_HASH_SALT = os.environ["HASH_SALT"]


@pytest.fixture(autouse=True)
async def reset_provider_state() -> AsyncIterator[None]:
    """Ensure each test starts with clean provider singletons."""
    await reset_saved_search_services()
    await reset_database_manager()
    yield
    await reset_saved_search_services()
    await reset_database_manager()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        HASH_SALT=TEST_HASH_SALT,
        ENVIRONMENT="test",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        CHECKS_ENABLED=False,
        SITE_NAME="Example Site",
        SITE_URL="https://example.com",
    )


@pytest.fixture
async def db_manager(test_settings) -> AsyncIterator[SQLModelDatabaseManager]:
    """Provide an in-memory SQLite database with all tables created."""
    manager = SQLModelDatabaseManager(test_settings)
    await manager.initialize()
    await manager.create_tables()
    await set_database_manager(manager)
    try:
        yield manager
    finally:
        await reset_database_manager()
