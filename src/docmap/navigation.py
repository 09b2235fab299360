"""Navigation helpers for rendering layers.

Small pure functions over a NormalizationResult: navbar links, menu
dropdown entries, prev/next pagination and sidebar folder state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TypedDict

from docmap.core.normalize import DocsItem, Item, ItemDict, NormalizationResult, PageItem
from docmap.core.types import DOC, HIDDEN, MENU


class NavbarEntryDict(TypedDict):
    """Dictionary representation of a navbar entry."""

    title: str | None
    type: str
    href: str
    active: bool
    newWindow: bool
    items: list[ItemDict]


def navbar_href(item: PageItem) -> str:
    """Resolve the link target of a navbar entry.

    Folders link to themselves when they have content, otherwise to their
    first nested page.
    """
    href = item.href or item.route or "#"
    if item.children is not None:
        target = item.route if item.is_content else item.first_child_route
        href = target or href
    return href


def is_navbar_active(item: PageItem, active_route: str) -> bool:
    """Whether the active route is the entry itself or below it."""
    if not item.route:
        return False
    return item.route == active_route or active_route.startswith(item.route + "/")


def resolve_menu_items(item: PageItem) -> list[Item]:
    """Expand a menu entry into its dropdown items.

    Each configured key maps to the child of the same name. Keys without a
    child get a placeholder routed below the menu.

    Args:
        item: Navbar entry of type "menu"

    Returns:
        Items in configuration order, empty for non-menu entries
    """
    if item.type != MENU or not item.items:
        return []

    routes = {child.name: child for child in item.children or []}
    resolved: list[Item] = []
    for key, entry in item.items.items():
        child = routes.get(key)
        if child is None:
            child = Item(name=key, route=f"{item.route}/{key}", type=DOC)
        resolved.append(
            replace(
                child,
                title=entry.title,
                href=entry.href if entry.href is not None else child.href,
                new_window=entry.new_window if entry.new_window is not None else child.new_window,
            ),
        )
    return resolved


def build_navbar(result: NormalizationResult, active_route: str) -> list[NavbarEntryDict]:
    """Build navbar entries for JSON serialization.

    Hidden entries are skipped.
    """
    entries: list[NavbarEntryDict] = []
    for item in result.top_level_navbar_items:
        if item.display == HIDDEN:
            continue
        active = not item.new_window and is_navbar_active(item, active_route)
        entries.append(
            {
                "title": item.title,
                "type": item.type,
                "href": "#" if item.type == MENU else navbar_href(item),
                "active": active,
                "newWindow": bool(item.new_window),
                "items": [child.to_dict(include_children=False) for child in resolve_menu_items(item)],
            },
        )
    return entries


@dataclass(frozen=True)
class Pagination:
    """Previous and next pages around the active page."""

    prev: DocsItem | None = None
    next: DocsItem | None = None

    def to_dict(self) -> dict[str, ItemDict | None]:
        """Convert to dictionary for JSON serialization."""
        return {
            "prev": self.prev.to_dict(include_children=False) if self.prev else None,
            "next": self.next.to_dict(include_children=False) if self.next else None,
        }


def get_pagination(result: NormalizationResult) -> Pagination:
    """Find the neighbours of the active doc page in the flat docs list.

    Returns an empty Pagination when nothing matched, the active item is not
    a listed doc page, or the active theme turns pagination off.
    """
    if result.active_item is None or result.active_type != DOC:
        return Pagination()
    if not result.active_theme_context.get("pagination", True):
        return Pagination()

    flat = result.flat_docs_directories
    index = result.active_index
    if not 0 <= index < len(flat) or flat[index].route != result.active_item.route:
        return Pagination()

    prev = flat[index - 1] if index > 0 else None
    following = flat[index + 1] if index + 1 < len(flat) else None
    return Pagination(prev=prev, next=following)


class TreeState:
    """Expand/collapse state of sidebar folders, keyed by route.

    Owned by the rendering layer; one instance per client session.
    """

    __slots__ = ("_state",)

    def __init__(self, state: dict[str, bool] | None = None) -> None:
        self._state: dict[str, bool] = dict(state or {})

    def get(self, route: str) -> bool | None:
        """Return the explicit state of a folder, None if never toggled."""
        return self._state.get(route)

    def set(self, route: str, is_open: bool) -> None:
        """Record an explicit open/closed state."""
        self._state[route] = is_open

    def forget(self, route: str) -> None:
        """Drop the explicit state of a folder."""
        self._state.pop(route, None)

    def sync(
        self,
        item: Item,
        route: str,
        focused_route: str = "",
        *,
        auto_collapse: bool = False,
    ) -> None:
        """Keep folders containing the active or focused route open.

        With auto_collapse, folders that contain neither lose their state.
        """
        active_inside = _contains_route(item, route)
        focused_inside = bool(focused_route) and focused_route.startswith(item.route + "/")
        if auto_collapse:
            if active_inside and focused_inside:
                self._state[item.route] = True
            else:
                self._state.pop(item.route, None)
        elif active_inside or focused_inside:
            self._state[item.route] = True


def is_folder_open(
    item: Item,
    route: str,
    level: int,
    tree_state: TreeState,
    *,
    focused_route: str = "",
    default_menu_collapse_level: int = 2,
) -> bool:
    """Decide whether a sidebar folder renders expanded.

    An explicit state wins (a focused descendant still forces it open).
    Otherwise a folder is open when it contains the active or focused route,
    a folder whose theme sets ``collapsed`` stays closed, and the rest open
    up to the default collapse level.
    """
    focused_inside = bool(focused_route) and focused_route.startswith(item.route + "/")
    explicit = tree_state.get(item.route)
    if explicit is not None:
        return explicit or focused_inside

    if _contains_route(item, route) or focused_inside:
        return True
    if item.theme and item.theme.get("collapsed"):
        return False
    return level < default_menu_collapse_level


def _contains_route(item: Item, route: str) -> bool:
    if not item.route:
        return False
    route = route.split("#", 1)[0]
    return route in (item.route, item.route + "/") or route.startswith(item.route + "/")
