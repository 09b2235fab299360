"""In-memory cache of normalization results.

Normalization is a pure function of the page map and the requested
route, so results are keyed by a digest of the page-map source and the
route. A changed page map yields a new digest and never hits stale entries.
"""

import hashlib
import logging
from collections import OrderedDict

from docmap.core.normalize import NormalizationResult

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


def compute_page_map_digest(source: str) -> str:
    """Compute a content hash of page-map source text.

    Args:
        source: Raw page-map JSON text

    Returns:
        SHA-256 hex digest
    """
    return hashlib.sha256(source.encode()).hexdigest()


class NormalizationCache:
    """Bounded cache of NormalizationResult by (page-map digest, route).

    The least recently used entry is evicted once max_entries is exceeded.
    Cached results are shared between requests and must not be mutated.
    """

    def __init__(self, max_entries: int = 256) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of cached results
        """
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._entries: OrderedDict[CacheKey, NormalizationResult] = OrderedDict()

    @property
    def max_entries(self) -> int:
        """Maximum number of cached results."""
        return self._max_entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, digest: str, route: str) -> NormalizationResult | None:
        """Retrieve a cached result.

        Args:
            digest: Page-map digest
            route: Requested route

        Returns:
            Cached result, or None on a miss
        """
        key = (digest, route)
        result = self._entries.get(key)
        if result is None:
            return None
        self._entries.move_to_end(key)
        logger.debug(f"Cache hit for {route}")
        return result

    def set(self, digest: str, route: str, result: NormalizationResult) -> None:
        """Store a result, evicting the oldest entry when full."""
        key = (digest, route)
        self._entries[key] = result
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, digest: str) -> None:
        """Remove all entries computed from one page map."""
        for key in [key for key in self._entries if key[0] == digest]:
            del self._entries[key]

    def clear(self) -> None:
        """Remove all cached entries."""
        self._entries.clear()
