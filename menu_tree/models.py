from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

MENU = "menu"
SUBMENU = "submenu"
NODE_KINDS = {MENU, SUBMENU}

BEFORE = "before"
AFTER = "after"
INSIDE = "inside"
DROP_POSITIONS = {BEFORE, AFTER, INSIDE}

DEFAULT_SUBMENU_STYLE = "fullScreen"
DEFAULT_SUBMENU_LAYOUT = "grid"

NAV_ROUTE = "route"
NAV_URL = "url"
NAV_NONE = "none"


def new_key() -> str:
    return uuid4().hex


@dataclass
class TreeNode:
    """Editor-side wrapper around one persisted menu item.

    `data` holds the item mapping without its `submenu.items`; those live in
    `children` while the tree is being edited. `key` only exists for the
    lifetime of one editing session.
    """

    key: str
    data: dict[str, Any]
    children: list["TreeNode"] = field(default_factory=list)
    level: int = 0

    @property
    def kind(self) -> str:
        return SUBMENU if isinstance(self.data.get("submenu"), dict) else MENU

    @property
    def title(self) -> str:
        return str(self.data.get("title") or "")

    @property
    def menu_id(self) -> str | None:
        value = self.data.get("menu_id")
        return str(value) if value else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "kind": self.kind,
            "level": self.level,
            "data": self.data,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(frozen=True)
class NavigationTarget:
    kind: str  # "route" | "url" | "none"
    route: str | None = None
    url: str | None = None
    args: dict[str, Any] | None = None


def navigation_of(item: dict[str, Any]) -> NavigationTarget:
    """Read the navigation triple of a menu item as a tagged record."""
    route = item.get("route")
    if isinstance(route, str) and route.strip():
        args = item.get("routeArgs")
        return NavigationTarget(kind=NAV_ROUTE, route=route, args=dict(args) if isinstance(args, dict) else None)
    url = item.get("url")
    if isinstance(url, str) and url.strip():
        return NavigationTarget(kind=NAV_URL, url=url)
    return NavigationTarget(kind=NAV_NONE)
