from __future__ import annotations

from collections import Counter
from typing import Any

from .models import MENU, NAV_NONE, SUBMENU, TreeNode, navigation_of
from .query import iter_nodes


def structure_warnings(tree: list[TreeNode]) -> list[dict[str, Any]]:
    """Advisory findings about the tree; none of them block editing or saving."""
    warnings: list[dict[str, Any]] = []

    def walk(items: list[TreeNode], trail: list[str]):
        for node in items:
            label = node.title or "(untitled)"
            path = " / ".join(trail + [label])
            if not node.title.strip():
                warnings.append({"type": "missing_title", "key": node.key, "path": path})
            if node.kind == MENU and node.children:
                warnings.append({"type": "menu_with_children", "key": node.key, "path": path})
            if node.kind == SUBMENU and node.children and navigation_of(node.data).kind != NAV_NONE:
                warnings.append({"type": "container_with_navigation", "key": node.key, "path": path})
            walk(node.children, trail + [label])

    walk(tree, [])

    counts = Counter(node.menu_id for node in iter_nodes(tree) if node.menu_id)
    for menu_id, count in sorted(counts.items()):
        if count > 1:
            warnings.append({"type": "duplicate_menu_id", "menu_id": menu_id, "count": count})
    return warnings
