"""Application keys for type-safe app configuration access."""

from aiohttp import web

from docmap.loader import PageMapLoader

loader_key = web.AppKey("loader", PageMapLoader)
verbose_key = web.AppKey("verbose", bool)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
