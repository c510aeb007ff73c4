"""Tests for database URL handling and SQLAlchemy error translation."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from saved_searches.database.error_handling import (
    DatabaseError,
    DatabaseUnavailableError,
    DuplicateRecordError,
    StatementFailedError,
    handle_database_errors,
)
from saved_searches.database.sqlmodel_engine import async_database_url, engine_options


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("postgres://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("sqlite:///./searches.db", "sqlite+aiosqlite:///./searches.db"),
        ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ],
)
def test_async_database_url(url, expected):
    assert async_database_url(url) == expected


def test_in_memory_sqlite_shares_one_connection():
    assert "poolclass" in engine_options("sqlite+aiosqlite:///:memory:")
    assert "poolclass" not in engine_options("sqlite+aiosqlite:///./searches.db")
    assert engine_options("postgresql+asyncpg://db/app")["pool_pre_ping"] is True


class FailingRepository:

    def __init__(self, error):
        self.error = error

    @handle_database_errors()
    async def save(self):
        raise self.error

    @handle_database_errors(reraise_as=StatementFailedError, context={"table": "saved_searches"})
    async def delete_many(self):
        raise self.error

    @handle_database_errors()
    async def count(self):
        return 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,expected",
    [
        (IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")), DuplicateRecordError),
        (OperationalError("SELECT 1", {}, Exception("connection refused")), DatabaseUnavailableError),
        (ProgrammingError("SELEC", {}, Exception("syntax error")), StatementFailedError),
    ],
)
async def test_errors_are_classified(error, expected):
    with pytest.raises(expected) as exc_info:
        await FailingRepository(error).save()

    assert isinstance(exc_info.value, DatabaseError)
    assert exc_info.value.original_error is error
    assert exc_info.value.operation == "FailingRepository.save"


@pytest.mark.asyncio
async def test_reraise_as_and_context():
    error = IntegrityError("DELETE", {}, Exception("constraint"))

    with pytest.raises(StatementFailedError) as exc_info:
        await FailingRepository(error).delete_many()

    assert exc_info.value.context == {"table": "saved_searches"}


@pytest.mark.asyncio
async def test_successful_calls_pass_through():
    assert await FailingRepository(None).count() == 3


@pytest.mark.asyncio
async def test_non_database_errors_are_untouched():
    with pytest.raises(ValueError):
        await FailingRepository(ValueError("bad input")).save()
