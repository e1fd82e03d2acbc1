"""Tests for the REST API.

Follows the e2e server test pattern: the app lifespan is entered manually
(ASGITransport doesn't trigger it) and requests go through an in-process
httpx client. The graph behind the app talks to the fake Logseq server.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from logseq_mcp import __version__
from logseq_mcp.clients.logseq import LogseqClient
from logseq_mcp.server.config import ServerConfig
from logseq_mcp.server.rest.app import create_app
from logseq_mcp.server.rest.middleware import request_subject
from logseq_mcp.service import LogseqGraph

from tests.conftest import build_rich_graph, make_config
from tests.fake_logseq import API_URL

BASE = "/api/v1"


async def _serve(transport: httpx.AsyncBaseTransport) -> AsyncIterator[AsyncClient]:
    config = make_config()
    graph = LogseqGraph(config, LogseqClient(config, transport=transport))
    app = create_app(ServerConfig(logseq=config, mode="rest"), logseq_graph=graph)

    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c


@pytest.fixture
async def rest_fake():
    return build_rich_graph()


@pytest.fixture
async def client(rest_fake) -> AsyncIterator[AsyncClient]:
    async for c in _serve(rest_fake.transport()):
        yield c


@pytest.fixture
async def offline_client() -> AsyncIterator[AsyncClient]:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async for c in _serve(httpx.MockTransport(refuse)):
        yield c


# ============================================================================
# Health & Status
# ============================================================================


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        r = await client.get(f"{BASE}/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__
        assert data["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_status(self, client: AsyncClient):
        r = await client.get(f"{BASE}/status")
        assert r.status_code == 200
        data = r.json()
        assert data["mode"] == "rest"
        assert data["api_url"] == API_URL
        assert data["graph_name"] == "test-graph"

    @pytest.mark.asyncio
    async def test_health_without_logseq(self, offline_client: AsyncClient):
        r = await offline_client.get(f"{BASE}/health")
        assert r.status_code == 200

    @pytest.mark.asyncio
    async def test_status_without_logseq(self, offline_client: AsyncClient):
        r = await offline_client.get(f"{BASE}/status")
        assert r.status_code == 503
        assert r.json()["error"] == "unreachable"


# ============================================================================
# Pages, blocks, search
# ============================================================================


class TestPages:
    @pytest.mark.asyncio
    async def test_get_page(self, client: AsyncClient):
        r = await client.get(f"{BASE}/pages/Rust", params={"include_children": "true"})
        assert r.status_code == 200
        data = r.json()
        assert data["original_name"] == "Rust"
        assert len(data["children"]) == 2

    @pytest.mark.asyncio
    async def test_missing_page(self, client: AsyncClient):
        r = await client.get(f"{BASE}/pages/Nope")
        assert r.status_code == 404
        assert r.json() == {
            "error": "not_found",
            "detail": "Page not found: Nope",
            "type": "Page",
            "id": "Nope",
        }

    @pytest.mark.asyncio
    async def test_backlinks(self, client: AsyncClient):
        r = await client.get(f"{BASE}/pages/Rust/backlinks")
        data = r.json()
        assert [b["source_page"]["original_name"] for b in data["backlinks"]] == [
            "Python",
            "Jan 1st, 2025",
        ]

    @pytest.mark.asyncio
    async def test_backlinks_of_missing_page(self, client: AsyncClient):
        r = await client.get(f"{BASE}/pages/Nope/backlinks")
        assert r.status_code == 200
        assert r.json() == {"page": "Nope", "backlinks": None}

    @pytest.mark.asyncio
    async def test_related(self, client: AsyncClient):
        r = await client.get(f"{BASE}/pages/Notes/related")
        data = r.json()
        assert [p["page"]["original_name"] for p in data["related_pages"]] == ["Python"]

    @pytest.mark.asyncio
    async def test_related_depth_bounds(self, client: AsyncClient):
        r = await client.get(f"{BASE}/pages/Notes/related", params={"depth": 4})
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_block(self, client: AsyncClient, rest_fake):
        uuid = next(b["uuid"] for b in rest_fake.blocks.values() if b["content"] == "Just me")
        r = await client.get(f"{BASE}/blocks/{uuid}")
        assert r.status_code == 200
        assert r.json()["content"] == "Just me"

    @pytest.mark.asyncio
    async def test_missing_block(self, client: AsyncClient):
        r = await client.get(f"{BASE}/blocks/missing-uuid")
        assert r.status_code == 404
        assert r.json()["type"] == "Block"

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient):
        r = await client.get(f"{BASE}/search", params={"q": "Python", "limit": 3})
        data = r.json()
        assert data["query"] == "Python"
        assert data["total"] == 3
        assert len(data["results"]) == 3

    @pytest.mark.asyncio
    async def test_properties(self, client: AsyncClient):
        r = await client.get(f"{BASE}/properties/status", params={"value": "done"})
        data = r.json()
        assert data["total"] == 1
        assert data["results"][0]["properties"] == {"status": "done"}

    @pytest.mark.asyncio
    async def test_invalid_property_key(self, client: AsyncClient):
        r = await client.get(f"{BASE}/properties/bad key", params={"value": "x"})
        assert r.status_code == 422
        assert r.json()["error"] == "invalid_input"


# ============================================================================
# Graph traversal and context
# ============================================================================


class TestGraph:
    @pytest.mark.asyncio
    async def test_info(self, client: AsyncClient):
        r = await client.get(f"{BASE}/graph/info")
        assert r.json()["name"] == "test-graph"

    @pytest.mark.asyncio
    async def test_info_when_no_graph_open(self, client: AsyncClient, rest_fake):
        rest_fake.graph = None
        r = await client.get(f"{BASE}/graph/info")
        assert r.status_code == 502
        assert r.json()["error"] == "remote"

    @pytest.mark.asyncio
    async def test_network(self, client: AsyncClient):
        r = await client.get(f"{BASE}/graph/network/Root Page")
        assert r.status_code == 404

        r = await client.get(f"{BASE}/graph/network/Python", params={"max_depth": 1})
        data = r.json()
        assert data["concept"] == "Python"
        assert {n["depth"] for n in data["nodes"]} == {0, 1}

    @pytest.mark.asyncio
    async def test_network_depth_bounds(self, client: AsyncClient):
        r = await client.get(f"{BASE}/graph/network/Python", params={"max_depth": 5})
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_relationship(self, client: AsyncClient):
        r = await client.post(
            f"{BASE}/graph/relationship",
            json={
                "topic_a": "Python",
                "topic_b": "Memory Safety",
                "relationship_type": "connected-within",
                "max_distance": 2,
            },
        )
        data = r.json()
        assert data["connected"] is True
        assert data["query"]["max_distance"] == 2

    @pytest.mark.asyncio
    async def test_unknown_relationship(self, client: AsyncClient):
        r = await client.post(
            f"{BASE}/graph/relationship",
            json={"topic_a": "Python", "topic_b": "Rust", "relationship_type": "sibling"},
        )
        assert r.status_code == 422
        assert r.json()["error"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_context(self, client: AsyncClient):
        r = await client.post(f"{BASE}/graph/context", json={"topic": "Python", "max_blocks": 1})
        data = r.json()
        assert data["summary"]["total_blocks"] == 1
        assert len(data["direct_blocks"]) == 1
        assert data["temporal_context"] == {"is_journal": False}

    @pytest.mark.asyncio
    async def test_query_context(self, client: AsyncClient):
        r = await client.post(
            f"{BASE}/graph/query-context", json={"query": "Tell me about [[Rust]]"}
        )
        data = r.json()
        assert data["extracted_topics"] == ["Rust"]
        assert data["summary"]["total_topics"] == 1


# ============================================================================
# Journals
# ============================================================================


class TestJournals:
    @pytest.mark.asyncio
    async def test_date_range(self, client: AsyncClient):
        r = await client.get(
            f"{BASE}/journals", params={"start": 20250101, "end": 20250102, "search_term": "book"}
        )
        data = r.json()
        assert [e["date"] for e in data["entries"]] == [20250102]

    @pytest.mark.asyncio
    async def test_reversed_range(self, client: AsyncClient):
        r = await client.get(f"{BASE}/journals", params={"start": 20250102, "end": 20250101})
        assert r.status_code == 422
        assert "Start date" in r.json()["detail"]

    @pytest.mark.asyncio
    async def test_evolution(self, client: AsyncClient):
        r = await client.get(
            f"{BASE}/journals/evolution/Python", params={"group_by": "month"}
        )
        data = r.json()
        assert list(data["grouped_timeline"]) == ["202501"]

    @pytest.mark.asyncio
    async def test_timeline(self, client: AsyncClient):
        r = await client.get(f"{BASE}/journals/timeline/Memory Safety")
        data = r.json()
        assert data["timeline"][0]["date"] == 20250102


# ============================================================================
# Request logging
# ============================================================================


MIDDLEWARE_LOGGER = "logseq_mcp.server.rest.middleware"


class TestRequestLogging:
    def test_subject_from_path_params(self):
        request = Request({"type": "http", "path_params": {"page_name": "Rust"}})
        assert request_subject(request) == "page_name=Rust"

    def test_no_subject(self):
        assert request_subject(Request({"type": "http", "path_params": {}})) is None
        assert request_subject(Request({"type": "http"})) is None

    @pytest.mark.asyncio
    async def test_page_request_is_logged(self, client: AsyncClient, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        await client.get(f"{BASE}/pages/Rust")

        records = [r for r in caplog.records if r.name == MIDDLEWARE_LOGGER]
        assert records
        message = records[-1].getMessage()
        assert f"GET {BASE}/pages/Rust" in message
        assert "-> 200" in message
        assert records[-1].levelno == logging.INFO

    @pytest.mark.asyncio
    async def test_upstream_failure_logged_as_warning(self, offline_client: AsyncClient, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        await offline_client.get(f"{BASE}/status")

        records = [r for r in caplog.records if r.name == MIDDLEWARE_LOGGER]
        assert records[-1].levelno == logging.WARNING
        assert "-> 503" in records[-1].getMessage()
