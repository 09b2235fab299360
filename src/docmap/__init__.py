"""docmap - navigation models for documentation sites."""

from docmap.core.normalize import (
    DocsItem,
    Item,
    NormalizationResult,
    PageItem,
    find_first_route,
    normalize_pages,
)
from docmap.core.page_map import PageMapError, load_page_map, parse_page_map

__version__ = "0.1.0"

__all__ = [
    "DocsItem",
    "Item",
    "NormalizationResult",
    "PageItem",
    "PageMapError",
    "find_first_route",
    "load_page_map",
    "normalize_pages",
    "parse_page_map",
]
