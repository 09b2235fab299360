"""Navigation API endpoints.

Serves the normalized navigation model, navbar entries and pagination
for a requested route, given as the ``route`` query parameter.
"""

import json
import logging
from collections.abc import Callable
from hashlib import md5
from typing import Any

from aiohttp import web

from docmap.app_keys import loader_key, verbose_key
from docmap.core.normalize import NormalizationResult, to_url_path
from docmap.core.page_map import PageMapError
from docmap.core.types import URLPath
from docmap.navigation import build_navbar, get_pagination

logger = logging.getLogger(__name__)


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navbar", get_navbar),
        web.get("/api/pagination", get_pagination_links),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    return _respond(request, lambda result, route: result.to_dict())


async def get_navbar(request: web.Request) -> web.Response:
    return _respond(
        request,
        lambda result, route: {"items": build_navbar(result, route)},
    )


async def get_pagination_links(request: web.Request) -> web.Response:
    return _respond(request, lambda result, route: get_pagination(result).to_dict())


def _respond(
    request: web.Request,
    build: Callable[[NormalizationResult, URLPath], Any],
) -> web.Response:
    route = _requested_route(request)
    loader = request.app[loader_key]

    try:
        result = loader.normalize(route)
    except (FileNotFoundError, PageMapError) as e:
        logger.error(f"Failed to load page map: {e}")
        return web.json_response({"error": str(e)}, status=500)

    if request.app[verbose_key]:
        logger.info(
            f"Normalized {route}: active={result.active_type} "
            f"docs={len(result.flat_docs_directories)} navbar={len(result.top_level_navbar_items)}",
        )

    body = json.dumps(build(result, route))
    etag = _compute_etag(body)

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    return web.Response(
        text=body,
        content_type="application/json",
        headers={"ETag": etag, "Cache-Control": "private, max-age=60"},
    )


def _requested_route(request: web.Request) -> URLPath:
    return to_url_path(request.query.get("route", "/"))


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for revalidation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
