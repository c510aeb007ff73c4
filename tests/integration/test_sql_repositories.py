"""
Integration tests for the SQL repositories.

These tests run the repositories against an in-memory SQLite database
created from the SQLModel metadata.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from saved_searches.domain.entities.saved_search import NotifyInterval, SavedSearch
from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.domain.entities.search_query import SearchQuery
from saved_searches.domain.value_objects import EmailAddress, SavedSearchId, UserId
from saved_searches.infrastructure.persistence.repositories import (
    SQLKnownResultRepository,
    SQLSavedSearchRepository,
    SQLSavedSearchTypeRepository,
)

pytestmark = pytest.mark.integration

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_search(**overrides) -> SavedSearch:
    values = {
        "id": SavedSearchId.generate(),
        "type_id": "default",
        "query_payload": SearchQuery(index_id="jobs", keys="python").serialize(),
        "index_id": "jobs",
        "created_at": T0,
        "notify_interval": NotifyInterval.HOURLY,
    }
    values.update(overrides)
    search = SavedSearch(**values)
    search.refresh_next_execution()
    return search


@pytest.fixture
def searches(db_manager):
    return SQLSavedSearchRepository()


@pytest.fixture
def known_results(db_manager):
    return SQLKnownResultRepository()


@pytest.fixture
def types(db_manager):
    return SQLSavedSearchTypeRepository()


class TestSavedSearchRepository:

    @pytest.mark.asyncio
    async def test_save_and_load(self, searches):
        owner = UserId(uuid4())
        search = make_search(
            owner_id=owner,
            label="Python jobs",
            mail=EmailAddress("alice@example.com"),
            options={"page": "/search/jobs"},
        )

        await searches.save(search)
        loaded = await searches.get_by_id(search.id)

        assert loaded.id == search.id
        assert loaded.owner_id == owner
        assert loaded.label == "Python jobs"
        assert str(loaded.mail) == "alice@example.com"
        assert loaded.options == {"page": "/search/jobs"}
        assert loaded.created_at == T0
        assert loaded.next_execution_at == T0 + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_save_updates_existing_row(self, searches):
        search = make_search()
        await searches.save(search)

        search.record_check(T0 + timedelta(hours=2))
        search.mark_primed()
        search.status = False
        await searches.save(search)

        loaded = await searches.get_by_id(search.id)
        assert loaded.last_executed_at == T0 + timedelta(hours=2)
        assert loaded.next_execution_at == T0 + timedelta(hours=3)
        assert loaded.known_results_primed is True
        assert loaded.status is False

    @pytest.mark.asyncio
    async def test_update_never_inserts(self, searches):
        search = make_search()

        assert await searches.update(search) is False
        assert await searches.get_by_id(search.id) is None

        await searches.save(search)
        search.record_check(T0 + timedelta(hours=2))
        assert await searches.update(search) is True

        loaded = await searches.get_by_id(search.id)
        assert loaded.last_executed_at == T0 + timedelta(hours=2)
        assert loaded.next_execution_at == T0 + timedelta(hours=3)

    @pytest.mark.asyncio
    async def test_missing_search(self, searches):
        assert await searches.get_by_id(SavedSearchId.generate()) is None

    @pytest.mark.asyncio
    async def test_list_due_orders_by_next_execution(self, searches):
        # Arrange
        late = make_search(last_executed_at=T0 - timedelta(minutes=30))
        early = make_search(last_executed_at=T0 - timedelta(hours=3))
        future = make_search(last_executed_at=T0 + timedelta(minutes=30))
        never = make_search(notify_interval=NotifyInterval.NEVER)
        inactive = make_search(status=False, last_executed_at=T0 - timedelta(hours=3))
        for search in (late, early, future, never, inactive):
            await searches.save(search)

        # Act
        due = await searches.list_due(T0 + timedelta(hours=1))
        limited = await searches.list_due(T0 + timedelta(hours=1), limit=1)

        # Assert
        assert [search.id for search in due] == [early.id, late.id]
        assert [search.id for search in limited] == [early.id]

    @pytest.mark.asyncio
    async def test_list_by_owner(self, searches):
        owner = UserId(uuid4())
        older = make_search(owner_id=owner, created_at=T0)
        newer = make_search(owner_id=owner, created_at=T0 + timedelta(days=1))
        await searches.save(older)
        await searches.save(newer)
        await searches.save(make_search(owner_id=UserId(uuid4())))

        listed = await searches.list_by_owner(owner)

        assert [search.id for search in listed] == [newer.id, older.id]
        assert [search.id for search in await searches.list_by_owner(owner, limit=1, offset=1)] == [older.id]

    @pytest.mark.asyncio
    async def test_delete_many_removes_known_results(self, searches, known_results):
        # Arrange
        doomed = make_search()
        kept = make_search()
        await searches.save(doomed)
        await searches.save(kept)
        await known_results.add_known_item_ids(doomed.id, ["1", "2", "3", "4", "5"])
        await known_results.add_known_item_ids(kept.id, ["1", "2"])

        # Act
        deleted = await searches.delete_many([doomed.id, SavedSearchId.generate()])

        # Assert
        assert deleted == 1
        assert await searches.get_by_id(doomed.id) is None
        assert await known_results.count_for_search(doomed.id) == 0
        assert await known_results.get_known_item_ids(kept.id) == {"1", "2"}

    @pytest.mark.asyncio
    async def test_delete_nothing(self, searches):
        assert await searches.delete_many([]) == 0


class TestKnownResultRepository:

    @pytest.mark.asyncio
    async def test_add_returns_only_new_ids(self, searches, known_results):
        search = make_search()
        await searches.save(search)

        assert await known_results.add_known_item_ids(search.id, ["A", "B", "A"]) == 2
        assert await known_results.add_known_item_ids(search.id, ["B", "C"]) == 1
        assert await known_results.add_known_item_ids(search.id, []) == 0

        assert await known_results.get_known_item_ids(search.id) == {"A", "B", "C"}

    @pytest.mark.asyncio
    async def test_large_batches_are_chunked(self, searches, known_results):
        search = make_search()
        await searches.save(search)
        item_ids = [str(number) for number in range(1000)]

        assert await known_results.add_known_item_ids(search.id, item_ids) == 1000
        assert await known_results.count_for_search(search.id) == 1000

    @pytest.mark.asyncio
    async def test_delete_for_searches(self, searches, known_results):
        first = make_search()
        second = make_search()
        await searches.save(first)
        await searches.save(second)
        await known_results.add_known_item_ids(first.id, ["A"])
        await known_results.add_known_item_ids(second.id, ["A", "B"])

        assert await known_results.delete_for_searches([first.id, second.id]) == 3
        assert await known_results.delete_for_searches([]) == 0


class TestSavedSearchTypeRepository:

    @pytest.mark.asyncio
    async def test_save_and_load(self, types):
        search_type = SavedSearchType(
            id="jobs",
            label="Jobs",
            options={"date_field": {"jobs": "created"}},
            notification_configuration={"activate": {"send": False}},
        )

        await types.save(search_type)
        loaded = await types.get_by_id("jobs")

        assert loaded.label == "Jobs"
        assert loaded.get_option("date_field.jobs") == "created"
        assert loaded.notification_plugin == "email"
        assert loaded.notification_configuration == {"activate": {"send": False}}
        assert await types.get_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_only_one_default_type(self, types):
        await types.save(SavedSearchType(id="first", label="First", is_default=True))
        await types.save(SavedSearchType(id="second", label="Second", is_default=True))

        default = await types.get_default()

        assert default.id == "second"
        assert (await types.get_by_id("first")).is_default is False

    @pytest.mark.asyncio
    async def test_list_enabled_only(self, types):
        await types.save(SavedSearchType(id="a", label="A"))
        await types.save(SavedSearchType(id="b", label="B", enabled=False))

        assert [t.id for t in await types.list_all()] == ["a", "b"]
        assert [t.id for t in await types.list_all(enabled_only=True)] == ["a"]
