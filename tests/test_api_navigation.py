"""Tests for navigation API endpoints."""

from dataclasses import replace
from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient
from docmap.config import Config, SiteConfig
from docmap.server import create_app


@pytest.fixture
def client(test_config: Config, aiohttp_client) -> TestClient:
    """Create test client with configured app."""
    app = create_app(test_config)
    return aiohttp_client(app)


class TestGetNavigation:
    """Tests for GET /api/navigation."""

    @pytest.mark.asyncio
    async def test__nested_route__returns_active_path(self, client) -> None:
        """Return the normalized model for the requested route."""
        test_client = await client
        response = await test_client.get("/api/navigation", params={"route": "/docs/guides/deploy"})

        assert response.status == 200
        data = await response.json()
        assert [item["name"] for item in data["activePath"]] == ["docs", "guides", "deploy"]
        assert data["activeType"] == "doc"
        assert data["activeIndex"] == 2
        assert [item["name"] for item in data["topLevelNavbarItems"]] == [
            "index",
            "docs",
            "blog",
            "github",
        ]

    @pytest.mark.asyncio
    async def test__missing_route__defaults_to_root(self, client) -> None:
        """Normalize for the root route without a query."""
        test_client = await client
        response = await test_client.get("/api/navigation")

        data = await response.json()
        assert [item["name"] for item in data["activePath"]] == ["index"]
        assert data["activeType"] == "page"

    @pytest.mark.asyncio
    async def test__route_without_slash__normalized(self, client) -> None:
        """Prefix relative routes with a slash."""
        test_client = await client
        response = await test_client.get("/api/navigation", params={"route": "blog"})

        data = await response.json()
        assert [item["name"] for item in data["activePath"]] == ["blog"]

    @pytest.mark.asyncio
    async def test__unknown_route__empty_active_path(self, client) -> None:
        """Return the full model with nothing active."""
        test_client = await client
        response = await test_client.get("/api/navigation", params={"route": "/nope"})

        assert response.status == 200
        data = await response.json()
        assert data["activePath"] == []
        assert len(data["flatDocsDirectories"]) == 4

    @pytest.mark.asyncio
    async def test__response__has_etag_and_cache_control(self, client) -> None:
        """Return caching headers."""
        test_client = await client
        response = await test_client.get("/api/navigation")

        assert response.headers["ETag"].startswith('"')
        assert response.headers["Cache-Control"] == "private, max-age=60"

    @pytest.mark.asyncio
    async def test__matching_etag__returns_304(self, client) -> None:
        """Return 304 when the client already has the response."""
        test_client = await client
        first = await test_client.get("/api/navigation", params={"route": "/blog"})
        etag = first.headers["ETag"]

        response = await test_client.get(
            "/api/navigation",
            params={"route": "/blog"},
            headers={"If-None-Match": etag},
        )

        assert response.status == 304

    @pytest.mark.asyncio
    async def test__different_route__different_etag(self, client) -> None:
        """Vary the ETag with the requested route."""
        test_client = await client
        blog = await test_client.get("/api/navigation", params={"route": "/blog"})
        api = await test_client.get("/api/navigation", params={"route": "/docs/api"})

        assert blog.headers["ETag"] != api.headers["ETag"]


class TestPageMapErrors:
    """Tests for page-map failures."""

    @pytest.mark.asyncio
    async def test__missing_page_map__returns_500(
        self,
        tmp_path: Path,
        test_config: Config,
        aiohttp_client,
    ) -> None:
        """Report a missing page map as a server error."""
        config = replace(test_config, site=SiteConfig(page_map=tmp_path / "missing.json"))
        client = await aiohttp_client(create_app(config))

        response = await client.get("/api/navigation")

        assert response.status == 500
        data = await response.json()
        assert "Page map not found" in data["error"]

    @pytest.mark.asyncio
    async def test__invalid_page_map__returns_500(
        self,
        page_map_file: Path,
        test_config: Config,
        aiohttp_client,
    ) -> None:
        """Report a malformed page map as a server error."""
        page_map_file.write_text('{"not": "a list"}', encoding="utf-8")
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/api/navbar")

        assert response.status == 500
        data = await response.json()
        assert "must be a list" in data["error"]


class TestGetNavbar:
    """Tests for GET /api/navbar."""

    @pytest.mark.asyncio
    async def test__route__returns_entries(self, client) -> None:
        """Return navbar entries with the active one marked."""
        test_client = await client
        response = await test_client.get("/api/navbar", params={"route": "/docs/api"})

        assert response.status == 200
        data = await response.json()
        assert [(e["title"], e["href"], e["active"]) for e in data["items"]] == [
            ("Home", "/", False),
            ("Documentation", "/docs/getting-started", True),
            ("Blog", "/blog", False),
            ("GitHub", "https://github.com/example/docmap", False),
        ]


class TestGetPagination:
    """Tests for GET /api/pagination."""

    @pytest.mark.asyncio
    async def test__doc_route__returns_neighbours(self, client) -> None:
        """Return previous and next docs."""
        test_client = await client
        response = await test_client.get("/api/pagination", params={"route": "/docs/guides/install"})

        assert response.status == 200
        data = await response.json()
        assert data["prev"]["route"] == "/docs/getting-started"
        assert data["next"]["route"] == "/docs/guides/deploy"

    @pytest.mark.asyncio
    async def test__page_route__returns_nothing(self, client) -> None:
        """Return empty links outside the docs."""
        test_client = await client
        response = await test_client.get("/api/pagination", params={"route": "/blog"})

        data = await response.json()
        assert data == {"prev": None, "next": None}
