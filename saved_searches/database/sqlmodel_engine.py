"""
Async SQLModel engine and session handling.

PostgreSQL runs on asyncpg; SQLite (tests, local development) on aiosqlite
with foreign keys switched on so known results follow their saved search.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import text
from sqlmodel import SQLModel

from saved_searches.core.config import Settings

logger = structlog.get_logger(__name__)

_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def async_database_url(url: str) -> str:
    """Rewrite a plain database URL to use the async driver for its dialect."""
    for prefix, async_prefix in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _redact(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


def _sqlite_foreign_keys_on(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def engine_options(url: str) -> Dict[str, Any]:
    if _is_sqlite(url):
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.endswith("://"):
            # Every session must share the single in-memory database
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "connect_args": {"server_settings": {"application_name": "saved-searches"}},
    }


class SQLModelDatabaseManager:
    """Owns the async engine and hands out transactional sessions."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.async_session_factory: Optional[async_sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None and self.async_session_factory is not None

    @property
    def database_url(self) -> str:
        return async_database_url(str(self.settings.DATABASE_URL))

    async def initialize(self) -> None:
        """Create the engine and verify the database answers."""
        if self.is_initialized:
            logger.warning("Database manager already initialized")
            return

        url = self.database_url
        engine = create_async_engine(url, echo=self.settings.DATABASE_ECHO, **engine_options(url))
        if _is_sqlite(url):
            event.listen(engine.sync_engine, "connect", _sqlite_foreign_keys_on)

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            await engine.dispose()
            logger.error("Database unreachable", database=_redact(url), error=str(e))
            raise

        self.engine = engine
        self.async_session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=True,
        )
        logger.info("Database manager initialized", database=_redact(url), dialect=engine.dialect.name)

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("Database manager not initialized")
        return self.engine

    async def create_tables(self) -> None:
        """Create missing tables. Deployed databases are managed by Alembic."""
        from saved_searches.infrastructure.persistence.models import (  # noqa: F401
            KnownResultTable,
            SavedSearchTable,
            SavedSearchTypeTable,
        )

        async with self._require_engine().begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Saved search tables ensured", tables=sorted(SQLModel.metadata.tables))

    async def drop_tables(self) -> None:
        """Drop every table. Only meant for tests."""
        async with self._require_engine().begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
        logger.warning("Saved search tables dropped")

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session committed when the block succeeds and rolled back otherwise.

        Usage:
            async with db_manager.get_session() as session:
                row = await session.get(SavedSearchTable, search_id)
        """
        if self.async_session_factory is None:
            raise RuntimeError("Database manager not initialized")

        session = self.async_session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> Dict[str, Any]:
        if self.engine is None:
            return {"status": "unhealthy", "error": "Database manager not initialized"}

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

        return {"status": "healthy", "dialect": self.engine.dialect.name}

    async def shutdown(self) -> None:
        """Dispose of the engine and its connections."""
        engine, self.engine, self.async_session_factory = self.engine, None, None
        if engine is None:
            return
        try:
            await engine.dispose()
            logger.info("Database manager shut down")
        except Exception as e:
            logger.error("Error while disposing database engine", error=str(e))


__all__ = ["SQLModelDatabaseManager", "async_database_url", "engine_options"]
