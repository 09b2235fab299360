"""Core type definitions."""

from typing import Literal, NewType, TypedDict

# Requested route (e.g., "/docs", "/docs/guide"), always with a leading slash
URLPath = NewType("URLPath", str)

ItemType = Literal["doc", "page", "menu", "separator"]
Display = Literal["normal", "hidden", "children"]

DOC: ItemType = "doc"
PAGE: ItemType = "page"
MENU: ItemType = "menu"
SEPARATOR: ItemType = "separator"

ITEM_TYPES: frozenset[str] = frozenset({DOC, PAGE, MENU, SEPARATOR})

NORMAL: Display = "normal"
HIDDEN: Display = "hidden"
CHILDREN: Display = "children"

DISPLAYS: frozenset[str] = frozenset({NORMAL, HIDDEN, CHILDREN})

# Meta key whose entry applies to every sibling
WILDCARD = "*"


class PageTheme(TypedDict, total=False):
    """Per-page layout switches, inherited down the page map."""

    breadcrumb: bool
    collapsed: bool
    footer: bool
    layout: str
    navbar: bool
    pagination: bool
    sidebar: bool
    timestamp: bool
    toc: bool
    typesetting: str


THEME_KEYS: frozenset[str] = frozenset(PageTheme.__annotations__)
