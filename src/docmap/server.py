"""aiohttp server for docmap.

Application factory and route registration for the navigation API.
"""

from aiohttp import web

from docmap.api.config import create_config_routes
from docmap.api.navigation import create_navigation_routes
from docmap.app_keys import live_reload_enabled_key, loader_key, verbose_key
from docmap.config import Config
from docmap.core.cache import NormalizationCache
from docmap.live import LiveReloadManager
from docmap.live.reload import create_live_reload_routes
from docmap.loader import PageMapLoader

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)


def create_app(config: Config, *, verbose: bool = False) -> web.Application:
    """Build the navigation API application.

    Args:
        config: Loaded docmap configuration
        verbose: Log every normalized request at info level

    Returns:
        Application serving the navigation and config endpoints
    """
    app = web.Application()

    cache = NormalizationCache(config.cache.max_entries) if config.cache.enabled else None
    loader = PageMapLoader(config.site.page_map, cache, theme=config.theme)

    app[loader_key] = loader
    app[verbose_key] = verbose
    app[live_reload_enabled_key] = config.live_reload.enabled

    app.router.add_routes(create_config_routes())
    app.router.add_routes(create_navigation_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(config.site.page_map, loader=loader)
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Begin watching the page map."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop watching and close client sockets."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config, *, verbose: bool = False) -> None:
    """Serve the navigation API until interrupted."""
    app = create_app(config, verbose=verbose)
    web.run_app(app, host=config.server.host, port=config.server.port)
