"""WebSocket-based live reload for development mode.

Watches the page-map file and notifies connected clients via WebSocket
so they refetch navigation after the content build rewrites it.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import weakref
from pathlib import Path
from typing import TYPE_CHECKING

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

if TYPE_CHECKING:
    from docmap.loader import PageMapLoader

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and page-map watching for live reload."""

    def __init__(self, page_map_path: Path, *, loader: PageMapLoader | None = None) -> None:
        """Initialize the live reload manager.

        Args:
            page_map_path: Page-map file to watch
            loader: PageMapLoader to invalidate on changes
        """
        self._page_map_path = page_map_path
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None
        self._loader = loader

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watch_task
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch the page-map directory and react to page-map changes."""
        async for changes in awatch(self._page_map_path.parent):
            if self._is_page_map_changed(changes):
                logger.info(f"Page map changed: {self._page_map_path}")
                await self.notify_changed()

    def _is_page_map_changed(self, changes: set[tuple[Change, str]]) -> bool:
        """Check whether a watch batch touched the page-map file."""
        target = self._page_map_path.resolve()
        for change_type, path_str in changes:
            if change_type == Change.deleted:
                continue
            if Path(path_str).resolve() == target:
                return True
        return False

    async def notify_changed(self) -> None:
        """Invalidate the loader and tell clients to reload."""
        if self._loader is not None:
            self._loader.invalidate()
        await self._broadcast_reload()

    async def _broadcast_reload(self) -> None:
        """Broadcast reload event to all connected clients."""
        if not self._connections:
            return

        message = json.dumps({"type": "reload"})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client went away mid-send, the WeakSet drops it
                logger.debug("Live reload client disconnected during broadcast")


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket."""
    return [web.get("/ws/live-reload", manager.handle_websocket)]
