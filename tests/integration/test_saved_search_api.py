"""
Integration tests for the saved search HTTP API.

The application services are built from in-memory mocks and injected
through FastAPI dependency overrides.
"""

from uuid import uuid4

import httpx
import pytest

from saved_searches.api.dependencies import (
    get_new_results_check_service,
    get_saved_search_service,
)
from saved_searches.application.dependencies import (
    NewResultsCheckDependencies,
    SavedSearchDependencies,
)
from saved_searches.application.new_results_check_service import NewResultsCheckService
from saved_searches.application.property_cache import SavedSearchPropertyCache
from saved_searches.application.saved_search_service import SavedSearchApplicationService
from saved_searches.core.config import Settings, get_settings
from saved_searches.domain.entities.saved_search_type import SavedSearchType
from saved_searches.domain.services.access_tokens import AccessTokenService
from saved_searches.domain.value_objects import SavedSearchId
from saved_searches.infrastructure.adapters.keyed_lock import KeyedLockRegistry
from saved_searches.main import create_app
from tests.mocks.mock_repositories import (
    MockKnownResultRepository,
    MockSavedSearchRepository,
    MockSavedSearchTypeRepository,
)
from tests.mocks.mock_services import (
    MockNotificationPlugin,
    MockNotificationPluginFactory,
    MockQueryExecutor,
    make_results,
)

pytestmark = pytest.mark.integration

SALT = "api-test-salt-with-at-least-32-characters"
QUERY = {"index_id": "jobs", "keys": "python developer"}


class ApiHarness:
    """Wires mock-backed services into a fresh application."""

    def __init__(self, manual_checks: bool = True):
        self.type_repository = MockSavedSearchTypeRepository(
            SavedSearchType(id="default", label="Default", is_default=True),
            SavedSearchType(id="disabled", label="Disabled", enabled=False),
        )
        self.known_results = MockKnownResultRepository()
        self.search_repository = MockSavedSearchRepository(self.known_results)
        self.executor = MockQueryExecutor(make_results("A", "B"), make_results("A", "B", "C"))
        self.plugin = MockNotificationPlugin(activation_required=True)
        self.tokens = AccessTokenService(SALT)
        plugins = MockNotificationPluginFactory(self.plugin)
        lock = KeyedLockRegistry()
        cache = SavedSearchPropertyCache(self.type_repository)

        self.check_service = NewResultsCheckService(
            NewResultsCheckDependencies(
                saved_search_repository=self.search_repository,
                known_result_repository=self.known_results,
                query_executor=self.executor,
                notification_plugins=plugins,
                search_lock=lock,
                property_cache=cache,
            )
        )
        self.service = SavedSearchApplicationService(
            SavedSearchDependencies(
                saved_search_repository=self.search_repository,
                saved_search_type_repository=self.type_repository,
                property_cache=cache,
                new_results_check_service=self.check_service,
                notification_plugins=plugins,
                access_tokens=self.tokens,
                search_lock=lock,
            )
        )

        self.app = create_app()
        self.app.dependency_overrides[get_saved_search_service] = lambda: self.service
        self.app.dependency_overrides[get_new_results_check_service] = lambda: self.check_service
        self.settings = Settings(HASH_SALT=SALT, ENVIRONMENT="test", MANUAL_CHECKS_ENABLED=manual_checks)
        self.app.dependency_overrides[get_settings] = lambda: self.settings

    def token(self, search_id: str, operation: str) -> str:
        return self.tokens.get_token(SavedSearchId(search_id), operation)


@pytest.fixture
def harness():
    return ApiHarness()


@pytest.fixture
async def client(harness):
    transport = httpx.ASGITransport(app=harness.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def create(client, **overrides) -> dict:
    payload = {"query": QUERY, "owner_id": str(uuid4()), "notify_interval": 86400}
    payload.update(overrides)
    response = await client.post("/api/v1/saved-searches", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateSavedSearch:

    @pytest.mark.asyncio
    async def test_create_owned_search(self, client, harness):
        body = await create(client, options={"page": "/search/jobs?keys=python"})

        assert body["status"] is True
        assert body["label"] == "python developer"
        assert body["type_id"] == "default"
        assert body["query"]["index_id"] == "jobs"
        assert body["next_execution_at"] is not None
        assert harness.known_results.known[SavedSearchId(body["id"])] == {"A", "B"}

    @pytest.mark.asyncio
    async def test_create_anonymous_search_sends_activation(self, client, harness):
        body = await create(client, owner_id=None, mail="alice@example.com")

        assert body["status"] is False
        assert body["mail"] == "alice@example.com"
        assert [str(search.id) for search in harness.plugin.activations] == [body["id"]]

    @pytest.mark.asyncio
    async def test_create_uses_owner_account_address(self, client, harness):
        body = await create(client, owner_mail="owner@example.com")

        assert body["mail"] == "owner@example.com"
        assert body["status"] is True

    @pytest.mark.asyncio
    async def test_create_with_executed_results(self, client, harness):
        body = await create(client, executed_results=[{"id": "X"}, {"id": "Y", "fields": {"title": "Y"}}])

        assert harness.executor.execution_count == 0
        assert harness.known_results.known[SavedSearchId(body["id"])] == {"X", "Y"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"query": {"keys": "no index"}},
            {"query": QUERY, "mail": "not-an-address"},
            {"query": QUERY, "notify_interval": -5},
        ],
    )
    async def test_invalid_payload(self, client, payload):
        response = await client.post("/api/v1/saved-searches", json=payload)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_type(self, client):
        response = await client.post("/api/v1/saved-searches", json={"query": QUERY, "type_id": "missing"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_disabled_type(self, client):
        response = await client.post("/api/v1/saved-searches", json={"query": QUERY, "type_id": "disabled"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Service configuration error"


class TestTokenProtectedOperations:

    @pytest.mark.asyncio
    async def test_view_redirects_to_search_page(self, client, harness):
        body = await create(client, options={"page": "/search/jobs?keys=python"})

        response = await client.get(
            f"/api/v1/saved-searches/{body['id']}",
            params={"token": harness.token(body["id"], "view")},
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/search/jobs?keys=python"

    @pytest.mark.asyncio
    async def test_view_without_page(self, client, harness):
        body = await create(client)

        response = await client.get(
            f"/api/v1/saved-searches/{body['id']}",
            params={"token": harness.token(body["id"], "view")},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_bad_token_is_forbidden(self, client, harness):
        body = await create(client, options={"page": "/search/jobs"})

        missing = await client.get(f"/api/v1/saved-searches/{body['id']}")
        wrong = await client.get(
            f"/api/v1/saved-searches/{body['id']}",
            params={"token": harness.token(body["id"], "delete")},
        )

        assert missing.status_code == 403
        assert wrong.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_search(self, client):
        response = await client.get(f"/api/v1/saved-searches/{uuid4()}", params={"token": "x"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_activate(self, client, harness):
        body = await create(client, owner_id=None, mail="alice@example.com")

        response = await client.get(
            f"/api/v1/saved-searches/{body['id']}/activate",
            params={"token": harness.token(body["id"], "activate")},
        )

        assert response.status_code == 200
        assert response.json()["status"] is True

    @pytest.mark.asyncio
    async def test_update(self, client, harness):
        body = await create(client, mail="alice@example.com")

        response = await client.patch(
            f"/api/v1/saved-searches/{body['id']}",
            params={"token": harness.token(body["id"], "edit")},
            json={"label": "Renamed", "notify_interval": -1},
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["label"] == "Renamed"
        assert updated["mail"] == "alice@example.com"
        assert updated["next_execution_at"] is None

    @pytest.mark.asyncio
    async def test_update_clears_mail(self, client, harness):
        body = await create(client, mail="alice@example.com")

        response = await client.patch(
            f"/api/v1/saved-searches/{body['id']}",
            params={"token": harness.token(body["id"], "edit")},
            json={"mail": None},
        )

        assert response.json()["mail"] is None

    @pytest.mark.asyncio
    async def test_delete(self, client, harness):
        body = await create(client)
        search_id = SavedSearchId(body["id"])

        response = await client.delete(
            f"/api/v1/saved-searches/{body['id']}",
            params={"token": harness.token(body["id"], "delete")},
        )

        assert response.status_code == 204
        assert await harness.search_repository.get_by_id(search_id) is None
        assert search_id not in harness.known_results.known


class TestDueChecks:

    @pytest.mark.asyncio
    async def test_due_search_is_notified_once(self, client, harness):
        body = await create(client, notify_interval=0)

        first = await client.post("/api/v1/saved-searches/checks")
        second = await client.post("/api/v1/saved-searches/checks", params={"limit": 10})

        assert first.status_code == 200
        report = first.json()
        assert report["checked"] == 1
        assert report["summary"]["notified"] == 1
        assert report["outcomes"][0]["search_id"] == body["id"]
        assert report["outcomes"][0]["new_results"] == 1
        assert harness.plugin.notifications == [(SavedSearchId(body["id"]), ["C"])]

        assert second.json()["summary"]["no_new_results"] == 1
        assert len(harness.plugin.notifications) == 1

    @pytest.mark.asyncio
    async def test_limit_is_validated(self, client):
        response = await client.post("/api/v1/saved-searches/checks", params={"limit": 0})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_manual_checks_are_off_unless_enabled(self):
        harness = ApiHarness(manual_checks=False)
        transport = httpx.ASGITransport(app=harness.app)

        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            body = await create(client, notify_interval=0)
            response = await client.post("/api/v1/saved-searches/checks")

        assert response.status_code == 404
        assert harness.plugin.notifications == []
        assert harness.executor.execution_count == 1
        assert Settings(HASH_SALT=SALT).MANUAL_CHECKS_ENABLED is False
        assert SavedSearchId(body["id"]) in harness.search_repository.searches


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
