"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest
from docmap.config import (
    CacheConfig,
    Config,
    LiveReloadConfig,
    ServerConfig,
    SiteConfig,
)
from docmap.core.page_map import PageMapElement, merge_meta, parse_page_map
from docmap.core.types import PageTheme

# A small site: a hidden-free navbar with a docs section, a blog page and an
# external link. Meta keys decide order and titles.
SITE_PAGE_MAP: list[dict[str, Any]] = [
    {
        "data": {
            "index": {"type": "page", "title": "Home"},
            "docs": {"type": "page", "title": "Documentation"},
            "blog": {"type": "page", "title": "Blog"},
            "github": {
                "title": "GitHub",
                "type": "page",
                "href": "https://github.com/example/docmap",
                "newWindow": True,
            },
        },
    },
    {"name": "blog", "route": "/blog", "frontMatter": {"title": "Blog"}},
    {
        "name": "docs",
        "route": "/docs",
        "children": [
            {
                "data": {
                    "getting-started": "Getting Started",
                    "guides": {"title": "Guides"},
                    "--- ref": {"type": "separator", "title": "Reference"},
                    "api": "API",
                },
            },
            {"name": "api", "route": "/docs/api", "frontMatter": {"title": "API Reference"}},
            {
                "name": "getting-started",
                "route": "/docs/getting-started",
                "frontMatter": {"title": "Start"},
            },
            {
                "name": "guides",
                "route": "/docs/guides",
                "children": [
                    {
                        "name": "install",
                        "route": "/docs/guides/install",
                        "frontMatter": {"title": "Install"},
                    },
                    {
                        "name": "deploy",
                        "route": "/docs/guides/deploy",
                        "frontMatter": {"title": "Deploy", "sidebarTitle": "Deploying"},
                    },
                ],
            },
        ],
    },
    {"name": "index", "route": "/", "frontMatter": {"title": "Welcome"}},
]


@pytest.fixture
def site_page_map() -> list[PageMapElement]:
    """Parsed sample site page map with meta ordering applied."""
    return merge_meta(parse_page_map(SITE_PAGE_MAP))


@pytest.fixture
def page_map_file(tmp_path: Path) -> Path:
    """Write the sample site page map to a JSON file."""
    path = tmp_path / "page-map.json"
    path.write_text(json.dumps(SITE_PAGE_MAP), encoding="utf-8")
    return path


@pytest.fixture
def test_config(page_map_file: Path) -> Config:
    """Create a test configuration pointing at the sample page map."""
    return Config(
        server=ServerConfig(),
        site=SiteConfig(page_map=page_map_file),
        theme=PageTheme(),
        cache=CacheConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
