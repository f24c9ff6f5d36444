from __future__ import annotations

import copy
import logging
from typing import Any

from .codec import assign_missing_ids, build_tree, flatten
from .dragdrop import DragDropController, DropOutcome
from .identifiers import generate_menu_id
from .models import DEFAULT_SUBMENU_LAYOUT, DEFAULT_SUBMENU_STYLE, MENU, NODE_KINDS, SUBMENU, TreeNode, new_key
from .mutator import append_root, duplicate_subtree, remove, update_data
from .query import all_ids, find_by_key
from .validation import structure_warnings

logger = logging.getLogger(__name__)

NEW_MENU_TITLE = "Item Menu Baru"
NEW_SUBMENU_TITLE = "Submenu Baru"
DEFAULT_ICON = "📱"
DEFAULT_TEXT_SIZE = 11.0

CHILD_ON_LEAF_WARNING = (
    "Only submenu items can contain other items. Convert this item to a submenu first."
)


def _new_item(kind: str, menu_id: str) -> dict[str, Any]:
    if kind == SUBMENU:
        return {
            "menu_id": menu_id,
            "iconUrl": DEFAULT_ICON,
            "title": NEW_SUBMENU_TITLE,
            "textSize": DEFAULT_TEXT_SIZE,
            "submenu": {
                "id": f"submenu_{menu_id}",
                "submenuTitle": NEW_SUBMENU_TITLE,
                "submenuStyle": DEFAULT_SUBMENU_STYLE,
                "submenuLayout": DEFAULT_SUBMENU_LAYOUT,
            },
        }
    return {
        "menu_id": menu_id,
        "iconUrl": DEFAULT_ICON,
        "title": NEW_MENU_TITLE,
        "textSize": DEFAULT_TEXT_SIZE,
        "route": "/product",
    }


class MenuTreeEditor:
    """One editing session over a menu widget's items.

    Every command is a no-op for keys that no longer exist; drag targets can
    vanish between hover and release.
    """

    def __init__(self, items: list[dict[str, Any]] | None = None) -> None:
        self.tree: list[TreeNode] = []
        self.expanded: set[str] = set()
        self.warning: str | None = None
        self.drag = DragDropController()
        self._baseline: list[dict[str, Any]] = []
        self.open(items or [])

    def open(self, items: list[dict[str, Any]]) -> None:
        processed = assign_missing_ids(items)
        self.tree = build_tree(processed)
        self.expanded = set()
        self.warning = None
        self.drag.on_cancel()
        self._baseline = flatten(self.tree)

    def close(self) -> None:
        self.tree = []
        self.expanded = set()
        self.drag.on_cancel()

    # Commands

    def _make_node(self, kind: str, level: int) -> TreeNode:
        if kind not in NODE_KINDS:
            raise ValueError(f"Invalid node kind: {kind!r}")
        title = NEW_SUBMENU_TITLE if kind == SUBMENU else NEW_MENU_TITLE
        menu_id = generate_menu_id(title, all_ids(self.tree))
        return TreeNode(key=new_key(), data=_new_item(kind, menu_id), level=level)

    def add_root_node(self, kind: str = MENU) -> str:
        node = self._make_node(kind, 0)
        self.tree = append_root(self.tree, node)
        self.warning = None
        return node.key

    def add_child_node(self, parent_key: str, kind: str = MENU) -> str | None:
        parent = find_by_key(self.tree, parent_key)
        if parent is None:
            return None
        if parent.kind != SUBMENU:
            self.warning = CHILD_ON_LEAF_WARNING
            return None
        node = self._make_node(kind, parent.level + 1)
        parent.children.append(node)
        self.expanded.add(parent_key)
        self.warning = None
        return node.key

    def remove_node(self, key: str) -> None:
        self.tree = remove(self.tree, key)
        self.expanded.discard(key)

    def duplicate_node(self, key: str) -> str | None:
        self.tree, new_key_ = duplicate_subtree(self.tree, key)
        return new_key_

    def update_node(self, key: str, fields: dict[str, Any]) -> TreeNode | None:
        self.tree = update_data(self.tree, key, fields)
        return find_by_key(self.tree, key)

    def toggle_expanded(self, key: str) -> bool:
        if key in self.expanded:
            self.expanded.discard(key)
        elif find_by_key(self.tree, key) is not None:
            self.expanded.add(key)
        return key in self.expanded

    # Pointer events

    def press(self, key: str) -> bool:
        node = find_by_key(self.tree, key)
        if node is None:
            return False
        self.drag.on_press_start(node)
        return self.drag.dragging

    def hover(self, key: str, pointer_y: float, row_height: float) -> str | None:
        node = find_by_key(self.tree, key)
        if node is None:
            return None
        return self.drag.on_hover(node, pointer_y, row_height)

    def hover_root(self) -> None:
        self.drag.on_hover_root()

    def release(self, key: str | None = None) -> DropOutcome:
        node = None
        if key is not None:
            node = find_by_key(self.tree, key)
            if node is None:
                self.drag.on_cancel()
                return DropOutcome(tree=self.tree)
        outcome = self.drag.on_release(self.tree, node)
        self.tree = outcome.tree
        self.warning = outcome.warning
        return outcome

    def cancel_drag(self) -> None:
        self.drag.on_cancel()

    # Results

    def commit(self, items: list[dict[str, Any]] | None = None) -> list[dict[str, Any]]:
        """Flatten the tree and record it as saved.

        Pass `items` when they were already flattened and persisted, so the
        baseline matches exactly what was written.
        """
        if items is None:
            items = flatten(self.tree)
        self._baseline = copy.deepcopy(items)
        logger.info("Committed %d top-level menu items", len(items))
        return items

    def has_unsaved_changes(self) -> bool:
        return flatten(self.tree) != self._baseline

    def warnings(self) -> list[dict[str, Any]]:
        return structure_warnings(self.tree)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tree": [node.to_dict() for node in self.tree],
            "expanded": sorted(self.expanded),
            "dragging": self.drag.dragging,
            "warning": self.warning,
            "warnings": self.warnings(),
            "unsaved": self.has_unsaved_changes(),
        }
