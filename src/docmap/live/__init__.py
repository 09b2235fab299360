"""Live reload support."""

from docmap.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
