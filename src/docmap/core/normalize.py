"""Page-tree normalization.

Turns a page map into the navigation model of one request: the full
sidebar tree, the docs-only tree, the flat pagination list and the navbar
entries, along with the active path leading to the requested route.

One pass over the tree builds every collection. Each level resolves its
nodes' meta, recurses into folders, then folds the child result into its
own accumulators, so active state bubbles up from the matched leaf.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict

from docmap.core.meta import (
    DEFAULT_PAGE_THEME,
    EffectiveConfig,
    merge_theme,
    resolve_meta,
    resolve_title,
)
from docmap.core.page_map import (
    FrontMatter,
    MenuItemEntry,
    PageMapElement,
    PageMapNode,
    split_meta,
)
from docmap.core.types import (
    CHILDREN,
    DOC,
    HIDDEN,
    MENU,
    PAGE,
    SEPARATOR,
    WILDCARD,
    Display,
    ItemType,
    PageTheme,
    URLPath,
)

_NAVBAR_TYPES = (PAGE, MENU)


class ItemDict(TypedDict):
    """Dictionary representation of a normalized item."""

    name: str
    route: str
    type: str
    title: NotRequired[str]
    display: NotRequired[str]
    theme: NotRequired[PageTheme]
    frontMatter: NotRequired[dict[str, Any]]
    href: NotRequired[str]
    newWindow: NotRequired[bool]
    children: NotRequired[list[ItemDict]]
    isUnderCurrentDocsTree: NotRequired[bool]
    firstChildRoute: NotRequired[str]
    items: NotRequired[dict[str, dict[str, Any]]]


@dataclass
class Item:
    """Normalized page-map node.

    The same node is materialized as up to three separate instances: the
    sidebar view, the navbar view (``PageItem``) and the docs view
    (``DocsItem``). They share resolved fields but own their ``children``.
    """

    name: str
    route: str
    type: ItemType
    title: str | None = None
    display: Display | None = None
    theme: PageTheme | None = None
    front_matter: FrontMatter | None = None
    href: str | None = None
    new_window: bool | None = None
    children: list[Item] | None = None
    is_under_current_docs_tree: bool | None = None
    first_child_route: str | None = None
    items: dict[str, MenuItemEntry] | None = None

    @property
    def is_content(self) -> bool:
        """Whether the node has content of its own."""
        return self.front_matter is not None

    def to_dict(self, *, include_children: bool = True) -> ItemDict:
        """Convert to dictionary for JSON serialization."""
        result: ItemDict = {"name": self.name, "route": self.route, "type": self.type}
        if self.title is not None:
            result["title"] = self.title
        if self.display is not None:
            result["display"] = self.display
        if self.theme is not None:
            result["theme"] = self.theme
        if self.front_matter is not None:
            result["frontMatter"] = _front_matter_to_dict(self.front_matter)
        if self.href is not None:
            result["href"] = self.href
        if self.new_window is not None:
            result["newWindow"] = self.new_window
        if self.children is not None and include_children:
            result["children"] = [child.to_dict() for child in self.children]
        if self.is_under_current_docs_tree is not None:
            result["isUnderCurrentDocsTree"] = self.is_under_current_docs_tree
        if self.first_child_route is not None:
            result["firstChildRoute"] = self.first_child_route
        if self.items is not None:
            result["items"] = {
                key: _menu_entry_to_dict(entry) for key, entry in self.items.items()
            }
        return result


# Navbar-facing and docs-facing views share the Item shape
PageItem = Item
DocsItem = Item


class NormalizationResultDict(TypedDict):
    """Dictionary representation of a normalization result."""

    activeType: str | None
    activeIndex: int
    activeThemeContext: PageTheme
    activePath: list[ItemDict]
    directories: list[ItemDict]
    docsDirectories: list[ItemDict]
    flatDocsDirectories: list[ItemDict]
    topLevelNavbarItems: list[ItemDict]


@dataclass
class NormalizationResult:
    """Navigation model of one page-map level for one requested route."""

    active_type: ItemType | None = None
    active_index: int = 0
    active_theme_context: PageTheme = field(default_factory=lambda: PageTheme())
    active_path: list[Item] = field(default_factory=list)
    directories: list[Item] = field(default_factory=list)
    docs_directories: list[DocsItem] = field(default_factory=list)
    flat_docs_directories: list[DocsItem] = field(default_factory=list)
    top_level_navbar_items: list[PageItem] = field(default_factory=list)

    @property
    def active_item(self) -> Item | None:
        """The item whose route matched, if any."""
        return self.active_path[-1] if self.active_path else None

    def to_dict(self) -> NormalizationResultDict:
        """Convert to dictionary for JSON serialization.

        Active path entries are serialized without their subtrees.
        """
        return {
            "activeType": self.active_type,
            "activeIndex": self.active_index,
            "activeThemeContext": self.active_theme_context,
            "activePath": [item.to_dict(include_children=False) for item in self.active_path],
            "directories": [item.to_dict() for item in self.directories],
            "docsDirectories": [item.to_dict() for item in self.docs_directories],
            "flatDocsDirectories": [item.to_dict() for item in self.flat_docs_directories],
            "topLevelNavbarItems": [item.to_dict() for item in self.top_level_navbar_items],
        }


def find_first_route(items: list[DocsItem]) -> str | None:
    """Return the route of the first routable item, depth-first.

    Args:
        items: Normalized docs items in document order

    Returns:
        First non-empty route, or None if the subtree has none
    """
    for item in items:
        if item.route:
            return item.route
        if item.children:
            route = find_first_route(item.children)
            if route:
                return route
    return None


def to_url_path(route: str) -> URLPath:
    """Prefix a requested route with a slash if it lacks one."""
    return URLPath(route if route.startswith("/") else f"/{route}")


def normalize_pages(
    page_map: list[PageMapElement],
    route: str,
    docs_root: str = "",
    under_current_docs_root: bool = False,
    page_theme_context: PageTheme | None = None,
) -> NormalizationResult:
    """Normalize a page map for the requested route.

    Args:
        page_map: Page-map level, optionally led by its meta node
        route: Requested route (e.g., "/docs/guide")
        docs_root: Route of the navigation root the level belongs to
        under_current_docs_root: Whether an ancestor is under the active docs root
        page_theme_context: Theme inherited from ancestors (default: DEFAULT_PAGE_THEME)

    Returns:
        NormalizationResult with all collections in source order
    """
    if page_theme_context is None:
        page_theme_context = DEFAULT_PAGE_THEME
    result, _ = _normalize_level(
        page_map, route, docs_root, under_current_docs_root, page_theme_context
    )
    # Transparent folders are filtered per level below, this covers the top
    result.active_path = [item for item in result.active_path if item.display != CHILDREN]
    return result


def _normalize_level(
    page_map: list[PageMapElement],
    route: str,
    docs_root: str,
    under_current_docs_root: bool,
    page_theme_context: PageTheme,
) -> tuple[NormalizationResult, bool]:
    """Normalize one level; the flag tells whether the route matched inside it."""
    meta, nodes = split_meta(page_map)
    fallback_meta = meta.data.get(WILDCARD)

    directories: list[Item] = []
    docs_directories: list[DocsItem] = []
    flat_docs_directories: list[DocsItem] = []
    top_level_navbar_items: list[PageItem] = []

    matched = False
    active_type = fallback_meta.type if fallback_meta else None
    active_index = 0
    active_theme_context = merge_theme(
        page_theme_context, fallback_meta.theme if fallback_meta else None
    )
    active_path: list[Item] = []

    for node in nodes:
        config = resolve_meta(meta.data.get(node.name), fallback_meta, node.front_matter)
        item_type = config.type
        display = config.display
        theme = merge_theme(page_theme_context, config.theme)

        is_current_docs_tree = route.startswith(docs_root)

        child_result: NormalizationResult | None = None
        child_matched = False
        if node.children is not None:
            child_result, child_matched = _normalize_level(
                node.children,
                route,
                node.route if item_type in _NAVBAR_TYPES else docs_root,
                under_current_docs_root or is_current_docs_tree,
                theme,
            )

        title = resolve_title(config, node)
        item_children: list[Item] = []
        docs_children: list[DocsItem] = []
        page_children: list[PageItem] = []
        has_children = child_result is not None
        item = _make_item(node, config, title, theme, item_children if has_children else None)
        docs_item = _make_item(node, config, title, theme, docs_children if has_children else None)
        page_item = _make_item(node, config, title, theme, page_children if has_children else None)

        docs_item.is_under_current_docs_tree = is_current_docs_tree
        if item_type == SEPARATOR:
            item.is_under_current_docs_tree = is_current_docs_tree

        if node.route == route:
            matched = True
            active_path = [item]
            active_type = item_type
            # An index page may share its folder's route, a descendant match
            # below then overwrites this one
            active_theme_context = merge_theme(active_theme_context, theme)
            if item_type in _NAVBAR_TYPES:
                active_index = len(top_level_navbar_items)
            elif item_type == DOC:
                active_index = len(flat_docs_directories)

        is_hidden = display == HIDDEN

        if child_result is not None:
            if child_matched:
                matched = True
                active_theme_context = child_result.active_theme_context
                active_type = child_result.active_type
                if is_hidden:
                    continue
                active_path = [
                    item,
                    # Folders showing only their children are not on the path
                    *(child for child in child_result.active_path if child.display != CHILDREN),
                ]
                if active_type in _NAVBAR_TYPES:
                    active_index = len(top_level_navbar_items) + child_result.active_index
                elif active_type == DOC:
                    active_index = len(flat_docs_directories) + child_result.active_index
                    if _occupies_pagination_slot(item):
                        active_index += 1

            if item_type in _NAVBAR_TYPES:
                page_children.extend(child_result.directories)
                docs_directories.extend(child_result.docs_directories)
                if not is_hidden:
                    # A navbar entry with nested docs links to its first page
                    if child_result.flat_docs_directories:
                        first_route = find_first_route(child_result.flat_docs_directories)
                        if first_route:
                            page_item.first_child_route = first_route
                        top_level_navbar_items.append(page_item)
                    elif node.is_content:
                        top_level_navbar_items.append(page_item)
            elif item_type == DOC:
                docs_children.extend(child_result.docs_directories)
                if not is_hidden and _occupies_pagination_slot(item):
                    flat_docs_directories.append(docs_item)

            flat_docs_directories.extend(child_result.flat_docs_directories)
            item_children.extend(child_result.directories)
        else:
            if is_hidden:
                continue
            if item_type in _NAVBAR_TYPES:
                top_level_navbar_items.append(page_item)
            elif item_type == DOC and item.href is None and node.route:
                # External links and route-less placeholders are not paginated
                flat_docs_directories.append(docs_item)

        if is_hidden:
            continue

        if item_type == DOC and display == CHILDREN:
            # Elide the folder, its children take its place
            directories.extend(docs_children)
            docs_directories.extend(docs_children)
        else:
            directories.append(item)

        if item_type in _NAVBAR_TYPES:
            docs_directories.append(page_item)
        elif item_type == DOC:
            if display != CHILDREN:
                docs_directories.append(docs_item)
        elif item_type == SEPARATOR:
            docs_directories.append(item)

    result = NormalizationResult(
        active_type=active_type,
        active_index=active_index,
        active_theme_context=active_theme_context,
        active_path=active_path,
        directories=directories,
        docs_directories=docs_directories,
        flat_docs_directories=flat_docs_directories,
        top_level_navbar_items=top_level_navbar_items,
    )
    return result, matched


def _make_item(
    node: PageMapNode,
    config: EffectiveConfig,
    title: str | None,
    theme: PageTheme,
    children: list[Item] | None,
) -> Item:
    return Item(
        name=node.name,
        route=node.route,
        type=config.type,
        title=title,
        display=config.display,
        theme=theme,
        front_matter=node.front_matter,
        href=node.href if node.href is not None else config.href,
        new_window=node.new_window if node.new_window is not None else config.new_window,
        children=children,
        items=config.items if config.type == MENU else None,
    )


def _occupies_pagination_slot(item: Item) -> bool:
    return item.type == DOC and item.is_content and item.display != CHILDREN


def _front_matter_to_dict(front_matter: FrontMatter) -> dict[str, Any]:
    result: dict[str, Any] = dict(front_matter.extra)
    if front_matter.title is not None:
        result["title"] = front_matter.title
    if front_matter.sidebar_title is not None:
        result["sidebarTitle"] = front_matter.sidebar_title
    if front_matter.display is not None:
        result["display"] = front_matter.display
    if front_matter.theme is not None:
        result["theme"] = front_matter.theme
    return result


def _menu_entry_to_dict(entry: MenuItemEntry) -> dict[str, Any]:
    result: dict[str, Any] = {"title": entry.title}
    if entry.href is not None:
        result["href"] = entry.href
    if entry.new_window is not None:
        result["newWindow"] = entry.new_window
    return result
