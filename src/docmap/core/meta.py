"""Meta resolution.

Merges the three configuration sources of a page-map node into one
effective configuration. Precedence per field, highest first:

    display:  front matter > node meta > wildcard fallback
    theme:    merged field by field, fallback -> node meta -> front matter
    others:   node meta > wildcard fallback (front matter has no say)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar, cast

from docmap.core.page_map import FrontMatter, MenuItemEntry, MetaEntry, PageMapNode
from docmap.core.types import DOC, SEPARATOR, Display, ItemType, PageTheme

DEFAULT_PAGE_THEME: PageTheme = {
    "breadcrumb": True,
    "collapsed": False,
    "footer": True,
    "layout": "default",
    "navbar": True,
    "pagination": True,
    "sidebar": True,
    "timestamp": True,
    "toc": True,
    "typesetting": "default",
}

T = TypeVar("T")

_EMPTY_META = MetaEntry()
_EMPTY_FRONT_MATTER = FrontMatter()


def merge_theme(*sources: PageTheme | None) -> PageTheme:
    """Shallow-merge theme records, later sources winning per field."""
    merged: dict[str, object] = {}
    for source in sources:
        if source:
            merged.update(source)
    return cast(PageTheme, merged)


@dataclass(frozen=True)
class EffectiveConfig:
    """Resolved configuration of one page-map node."""

    type: ItemType = DOC
    title: str | None = None
    display: Display | None = None
    theme: PageTheme | None = None
    href: str | None = None
    new_window: bool | None = None
    items: dict[str, MenuItemEntry] | None = None


def resolve_meta(
    node_meta: MetaEntry | None,
    fallback_meta: MetaEntry | None,
    front_matter: FrontMatter | None,
) -> EffectiveConfig:
    """Resolve the effective configuration of a node.

    Args:
        node_meta: Meta entry named after the node, if any
        fallback_meta: Wildcard entry of the parent meta, if any
        front_matter: Front matter of the node, if it is content-bearing

    Returns:
        EffectiveConfig with the partial merged theme
    """
    node = node_meta or _EMPTY_META
    fallback = fallback_meta or _EMPTY_META
    matter = front_matter or _EMPTY_FRONT_MATTER

    return EffectiveConfig(
        type=_first(node.type, fallback.type) or DOC,
        title=_first(node.title, fallback.title),
        display=_first(matter.display, node.display, fallback.display),
        theme=merge_theme(fallback.theme, node.theme, matter.theme),
        href=_first(node.href, fallback.href),
        new_window=_first(node.new_window, fallback.new_window),
        items=_first(node.items, fallback.items),
    )


def resolve_title(config: EffectiveConfig, node: PageMapNode) -> str | None:
    """Pick the display title of a node.

    Separators only ever use an explicit meta title.
    """
    if config.title:
        return config.title
    if config.type == SEPARATOR:
        return None
    matter = node.front_matter or _EMPTY_FRONT_MATTER
    return matter.sidebar_title or matter.title or node.name


def _first(*values: T | None) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None
