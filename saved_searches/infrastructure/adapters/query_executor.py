"""HTTP search backend adapter executing stored queries."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import structlog

from saved_searches.domain.entities.results import ResultItem, ResultSet
from saved_searches.domain.entities.search_query import SearchQuery
from saved_searches.domain.exceptions import QueryExecutionError
from saved_searches.domain.interfaces import IQueryExecutor

logger = structlog.get_logger(__name__)


class HttpQueryExecutor(IQueryExecutor):
    """Runs queries through the search backend's JSON API.

    Request: ``POST {base_url}/indexes/{index_id}/search`` with the query as
    JSON. Response: ``{"results": [{"id": "...", "fields": {...}}], "total": n}``.
    Any transport, status or format problem surfaces as QueryExecutionError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def check_health(self) -> Dict[str, Any]:
        try:
            response = await self._get_client().get("/health")
            response.raise_for_status()
            return {"status": "healthy", "service": "HttpQueryExecutor", "base_url": self.base_url}
        except httpx.HTTPError as e:
            return {"status": "unhealthy", "service": "HttpQueryExecutor", "error": str(e)}

    async def execute(self, query: SearchQuery) -> ResultSet:
        path = f"/indexes/{quote(query.index_id, safe='')}/search"

        try:
            response = await self._get_client().post(path, json=query.to_dict())
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise QueryExecutionError(f"Search backend timed out for index {query.index_id}") from e
        except httpx.HTTPStatusError as e:
            raise QueryExecutionError(
                f"Search backend returned {e.response.status_code} for index {query.index_id}"
            ) from e
        except httpx.RequestError as e:
            raise QueryExecutionError(f"Search backend request failed: {e}") from e
        except ValueError as e:
            raise QueryExecutionError("Search backend returned invalid JSON") from e

        results = self._parse_results(payload)
        logger.debug(
            "Query executed",
            index_id=query.index_id,
            results=len(results),
        )
        return results

    @staticmethod
    def _parse_results(payload: Any) -> ResultSet:
        if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
            raise QueryExecutionError("Search backend response has no result list")

        items: List[ResultItem] = []
        for raw in payload["results"]:
            if not isinstance(raw, dict) or raw.get("id") is None:
                raise QueryExecutionError("Search backend returned a result without id")
            fields = raw.get("fields") or {}
            if not isinstance(fields, dict):
                raise QueryExecutionError("Search backend returned malformed result fields")
            items.append(ResultItem(item_id=str(raw["id"]), fields=fields))

        total = payload.get("total")
        return ResultSet(items=items, total=total if isinstance(total, int) else None)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


__all__ = ["HttpQueryExecutor"]
