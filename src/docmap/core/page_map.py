"""Page-map input model.

The page map is the ordered tree produced by the content loader: an
optional meta node first, then folders and content files in source order.
Raw JSON-shaped data is validated once here; everything downstream works
with typed nodes and never re-checks shapes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, cast

from docmap.core.types import (
    DISPLAYS,
    ITEM_TYPES,
    THEME_KEYS,
    WILDCARD,
    Display,
    ItemType,
    PageTheme,
)

logger = logging.getLogger(__name__)


class PageMapError(ValueError):
    """Raised when page-map input cannot be interpreted at all."""


@dataclass(frozen=True)
class FrontMatter:
    """Authored metadata of a content file."""

    title: str | None = None
    sidebar_title: str | None = None
    display: Display | None = None
    theme: PageTheme | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MenuItemEntry:
    """One entry of a menu's dropdown items."""

    title: str
    href: str | None = None
    new_window: bool | None = None


@dataclass(frozen=True)
class MetaEntry:
    """Configuration for one sibling (or all siblings via the wildcard)."""

    title: str | None = None
    type: ItemType | None = None
    display: Display | None = None
    theme: PageTheme | None = None
    href: str | None = None
    new_window: bool | None = None
    items: dict[str, MenuItemEntry] | None = None


@dataclass(frozen=True)
class MetaNode:
    """Per-folder meta overrides keyed by sibling name."""

    data: dict[str, MetaEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class PageMapNode:
    """Folder, content file, or meta-synthesized link in the page map.

    ``children`` is None for leaves. ``front_matter`` is None for nodes that
    carry no content of their own (plain folders, external links).
    """

    name: str
    route: str = ""
    children: list[PageMapElement] | None = None
    front_matter: FrontMatter | None = None
    href: str | None = None
    new_window: bool | None = None

    @property
    def has_children(self) -> bool:
        return self.children is not None

    @property
    def is_content(self) -> bool:
        return self.front_matter is not None


PageMapElement = MetaNode | PageMapNode


def split_meta(elements: list[PageMapElement]) -> tuple[MetaNode, list[PageMapNode]]:
    """Separate the leading meta node from the content nodes.

    Returns:
        The meta node (empty when absent) and the remaining nodes in order
    """
    if elements and isinstance(elements[0], MetaNode):
        meta = elements[0]
        rest = elements[1:]
    else:
        meta = MetaNode()
        rest = elements
    return meta, [node for node in rest if isinstance(node, PageMapNode)]


def parse_page_map(data: object) -> list[PageMapElement]:
    """Build typed page-map nodes from JSON-shaped data.

    Args:
        data: List of ``{"data": {...}}`` meta nodes and
            ``{"name", "route", "children"?, "frontMatter"?}`` nodes

    Returns:
        Typed page map preserving source order

    Raises:
        PageMapError: If the structure cannot be interpreted
    """
    if not isinstance(data, list):
        raise PageMapError("page map must be a list")

    elements: list[PageMapElement] = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise PageMapError(f"page map entry {index} must be an object")
        if "data" in raw:
            if index != 0:
                logger.warning(f"Ignoring meta node at position {index}")
                continue
            elements.append(_parse_meta_node(raw["data"]))
        else:
            elements.append(_parse_node(raw))
    return elements


def _parse_node(raw: dict[str, Any]) -> PageMapNode:
    name = raw.get("name")
    if not isinstance(name, str):
        raise PageMapError("page map node requires a string name")

    route = raw.get("route", "")
    if not isinstance(route, str):
        logger.warning(f"Ignoring non-string route of {name!r}")
        route = ""

    children: list[PageMapElement] | None = None
    if "children" in raw:
        raw_children = raw["children"]
        if not isinstance(raw_children, list):
            raise PageMapError(f"children of {name!r} must be a list")
        children = parse_page_map(raw_children)

    front_matter: FrontMatter | None = None
    if "frontMatter" in raw:
        front_matter = _parse_front_matter(raw["frontMatter"])

    href = raw.get("href")
    new_window = raw.get("newWindow")
    return PageMapNode(
        name=name,
        route=route,
        children=children,
        front_matter=front_matter,
        href=href if isinstance(href, str) else None,
        new_window=new_window if isinstance(new_window, bool) else None,
    )


def _parse_front_matter(raw: object) -> FrontMatter:
    if not isinstance(raw, dict):
        return FrontMatter()

    known = {"title", "sidebarTitle", "display", "theme"}
    title = raw.get("title")
    sidebar_title = raw.get("sidebarTitle")
    return FrontMatter(
        title=title if isinstance(title, str) else None,
        sidebar_title=sidebar_title if isinstance(sidebar_title, str) else None,
        display=_parse_display(raw.get("display")),
        theme=_parse_theme(raw.get("theme")),
        extra={k: v for k, v in raw.items() if k not in known},
    )


def _parse_meta_node(raw: object) -> MetaNode:
    if not isinstance(raw, dict):
        logger.warning("Ignoring meta node that is not an object")
        return MetaNode()
    return MetaNode(data={str(key): _parse_meta_entry(value) for key, value in raw.items()})


def _parse_meta_entry(raw: object) -> MetaEntry:
    # "name": "Title" is shorthand for {"title": "Title"}
    if isinstance(raw, str):
        return MetaEntry(title=raw or None)
    if not isinstance(raw, dict):
        return MetaEntry()

    title = raw.get("title")
    item_type = raw.get("type")
    if item_type is not None and item_type not in ITEM_TYPES:
        logger.warning(f"Ignoring unknown meta type {item_type!r}")
        item_type = None
    href = raw.get("href")
    new_window = raw.get("newWindow")

    items: dict[str, MenuItemEntry] | None = None
    raw_items = raw.get("items")
    if isinstance(raw_items, dict):
        items = {}
        for key, value in raw_items.items():
            if isinstance(value, str):
                items[str(key)] = MenuItemEntry(title=value)
            elif isinstance(value, dict):
                item_href = value.get("href")
                item_new_window = value.get("newWindow")
                items[str(key)] = MenuItemEntry(
                    title=str(value.get("title", key)),
                    href=item_href if isinstance(item_href, str) else None,
                    new_window=item_new_window if isinstance(item_new_window, bool) else None,
                )

    return MetaEntry(
        title=title if isinstance(title, str) and title else None,
        type=cast(ItemType | None, item_type),
        display=_parse_display(raw.get("display")),
        theme=_parse_theme(raw.get("theme")),
        href=href if isinstance(href, str) else None,
        new_window=new_window if isinstance(new_window, bool) else None,
        items=items,
    )


def _parse_display(raw: object) -> Display | None:
    if raw is None:
        return None
    if raw not in DISPLAYS:
        logger.warning(f"Ignoring unknown display value {raw!r}")
        return None
    return cast(Display, raw)


def _parse_theme(raw: object) -> PageTheme | None:
    if not isinstance(raw, dict):
        return None
    return cast(PageTheme, {k: v for k, v in raw.items() if k in THEME_KEYS})


def merge_meta(elements: list[PageMapElement]) -> list[PageMapElement]:
    """Order each level by its meta keys and add meta-only entries.

    Nodes named in meta come first in meta key order, the rest keep their
    source order. Every meta key without a matching sibling becomes a
    placeholder node; the wildcard never does.

    Args:
        elements: Parsed page map

    Returns:
        New page map with the same meta node at the head of every level
    """
    meta, nodes = split_meta(elements)
    merged = [_merge_children(node) for node in nodes]
    by_name: dict[str, PageMapNode] = {}
    for node in merged:
        by_name.setdefault(node.name, node)

    ordered: list[PageMapElement] = []
    if elements and isinstance(elements[0], MetaNode):
        ordered.append(meta)

    placed: set[int] = set()
    for key, entry in meta.data.items():
        if key == WILDCARD:
            continue
        node = by_name.get(key)
        if node is not None:
            ordered.append(node)
            placed.add(id(node))
        else:
            logger.debug(f"Synthesizing page map entry for meta key {key!r}")
            ordered.append(PageMapNode(name=key, href=entry.href, new_window=entry.new_window))

    ordered.extend(node for node in merged if id(node) not in placed)
    return ordered


def _merge_children(node: PageMapNode) -> PageMapNode:
    if node.children is None:
        return node
    return replace(node, children=merge_meta(node.children))


def load_page_map(path: Path) -> list[PageMapElement]:
    """Load a page map from a JSON file.

    Args:
        path: Path to the page-map JSON file

    Returns:
        Parsed page map with meta ordering applied

    Raises:
        FileNotFoundError: If the file doesn't exist
        PageMapError: If the file is not a valid page map
    """
    if not path.exists():
        raise FileNotFoundError(f"Page map not found: {path}")
    return page_map_from_text(path.read_text(encoding="utf-8"))


def page_map_from_text(text: str) -> list[PageMapElement]:
    """Parse page-map JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PageMapError(f"Invalid page map JSON: {e}") from e
    return merge_meta(parse_page_map(data))
