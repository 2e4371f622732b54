"""Shared test fixtures for the search gateway test suite.

No live cluster is needed: the shared Elasticsearch client is replaced by a
mock whose coroutine methods return canned engine responses.
"""

from collections.abc import AsyncGenerator, Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from search_gateway.main import app


def search_response(
    hits: list[dict[str, Any]] | None = None,
    total: int | None = None,
    took: int = 3,
) -> dict[str, Any]:
    """Build a minimal ``_search`` response body."""
    hits = hits or []
    return {
        "took": took,
        "timed_out": False,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "hits": hits,
        },
    }


def hit(doc_id: str, source: dict[str, Any]) -> dict[str, Any]:
    return {"_index": "properties", "_id": doc_id, "_score": 1.0, "_source": source}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def es_client() -> Iterator[MagicMock]:
    """Mocked AsyncElasticsearch installed as the shared client."""
    client = MagicMock(name="AsyncElasticsearch")
    client.indices.exists = AsyncMock(return_value=True)
    client.indices.create = AsyncMock(return_value={"acknowledged": True, "index": "properties"})
    client.indices.delete = AsyncMock(return_value={"acknowledged": True})
    client.indices.refresh = AsyncMock(return_value={"_shards": {"failed": 0}})
    client.index = AsyncMock(return_value={"_id": "generated-id", "result": "created"})
    client.search = AsyncMock(return_value=search_response())
    client.info = AsyncMock(return_value={"version": {"number": "8.13.0"}})
    client.close = AsyncMock()

    with patch("search_gateway.core.elasticsearch._client", client):
        yield client


@pytest.fixture
async def client(es_client: MagicMock) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
