"""Page-map loading with mtime invalidation.

Reads the page-map JSON produced by the content build and normalizes it
per requested route, reusing parsed data and cached results until the
file changes.
"""

import logging
from pathlib import Path

from docmap.core.cache import NormalizationCache, compute_page_map_digest
from docmap.core.meta import DEFAULT_PAGE_THEME, merge_theme
from docmap.core.normalize import NormalizationResult, normalize_pages
from docmap.core.page_map import PageMapElement, page_map_from_text
from docmap.core.types import PageTheme, URLPath

logger = logging.getLogger(__name__)


class PageMapLoader:
    """Loads a page-map file and serves normalization results.

    The parsed page map is kept until the file mtime changes or
    invalidate() is called.
    """

    def __init__(
        self,
        path: Path,
        cache: NormalizationCache | None = None,
        *,
        theme: PageTheme | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            path: Path to the page-map JSON file
            cache: Optional cache for normalization results
            theme: Site theme overrides applied over DEFAULT_PAGE_THEME
        """
        self._path = path
        self._cache = cache
        self._theme = merge_theme(DEFAULT_PAGE_THEME, theme)
        self._page_map: list[PageMapElement] | None = None
        self._digest: str | None = None
        self._mtime: float | None = None

    @property
    def path(self) -> Path:
        """Page-map file path."""
        return self._path

    @property
    def theme(self) -> PageTheme:
        """Theme every normalization starts from."""
        return self._theme

    @property
    def digest(self) -> str:
        """Digest of the currently loaded page map."""
        _, digest = self._load()
        return digest

    def load(self) -> list[PageMapElement]:
        """Return the parsed page map, reloading it if the file changed.

        Raises:
            FileNotFoundError: If the page-map file doesn't exist
            PageMapError: If the file is not a valid page map
        """
        page_map, _ = self._load()
        return page_map

    def _load(self) -> tuple[list[PageMapElement], str]:
        """Return the parsed page map together with the digest it was parsed from."""
        if not self._path.exists():
            raise FileNotFoundError(f"Page map not found: {self._path}")

        mtime = self._path.stat().st_mtime
        if self._page_map is not None and self._digest is not None and mtime == self._mtime:
            return self._page_map, self._digest

        text = self._path.read_text(encoding="utf-8")
        page_map = page_map_from_text(text)
        digest = compute_page_map_digest(text)

        if self._cache is not None and self._digest is not None and digest != self._digest:
            self._cache.invalidate(self._digest)

        logger.debug(f"Loaded page map from {self._path}")
        self._page_map = page_map
        self._digest = digest
        self._mtime = mtime
        return page_map, digest

    def normalize(self, route: URLPath) -> NormalizationResult:
        """Normalize the page map for a route.

        Args:
            route: Requested route (e.g., "/docs/guide")

        Returns:
            NormalizationResult, possibly shared with earlier calls
        """
        page_map, digest = self._load()

        if self._cache is not None:
            cached = self._cache.get(digest, route)
            if cached is not None:
                return cached

        result = normalize_pages(page_map, route, page_theme_context=self._theme)
        if self._cache is not None:
            self._cache.set(digest, route, result)
        return result

    def invalidate(self) -> None:
        """Drop the parsed page map and its cached results."""
        if self._cache is not None and self._digest is not None:
            self._cache.invalidate(self._digest)
        self._page_map = None
        self._digest = None
        self._mtime = None
