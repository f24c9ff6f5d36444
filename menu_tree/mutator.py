from __future__ import annotations

import copy
import logging
from typing import Any

from .identifiers import generate_menu_id
from .models import BEFORE, DEFAULT_SUBMENU_LAYOUT, DROP_POSITIONS, INSIDE, TreeNode, new_key
from .query import all_ids, find_by_key, find_with_parent

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"


def clone_tree(tree: list[TreeNode]) -> list[TreeNode]:
    """Deep copy a tree; children lists are spliced in place by the mutators."""
    return copy.deepcopy(list(tree))


def renumber_levels(node: TreeNode, new_level: int) -> TreeNode:
    return TreeNode(
        key=node.key,
        data=node.data,
        children=[renumber_levels(child, new_level + 1) for child in node.children],
        level=new_level,
    )


def _filter_key(nodes: list[TreeNode], key: str) -> list[TreeNode]:
    kept: list[TreeNode] = []
    for node in nodes:
        if node.key == key:
            continue
        node.children = _filter_key(node.children, key)
        kept.append(node)
    return kept


def remove(tree: list[TreeNode], key: str | None) -> list[TreeNode]:
    updated = clone_tree(tree)
    if not key:
        return updated
    return _filter_key(updated, key)


def insert(tree: list[TreeNode], target_key: str | None, position: str, node: TreeNode) -> list[TreeNode]:
    """Place `node` before/after the target or as its first child.

    Dropping a node onto itself and unknown targets leave the tree as it was.
    """
    if position not in DROP_POSITIONS:
        raise ValueError(f"Invalid drop position: {position!r}")
    updated = clone_tree(tree)
    if not target_key or target_key == node.key:
        return updated
    location = find_with_parent(updated, target_key)
    if location is None:
        return updated

    moved = copy.deepcopy(node)
    target = location.node
    if position == INSIDE:
        target.children.insert(0, renumber_levels(moved, target.level + 1))
    else:
        index = location.index if position == BEFORE else location.index + 1
        location.container.insert(index, renumber_levels(moved, target.level))
    return updated


def append_root(tree: list[TreeNode], node: TreeNode) -> list[TreeNode]:
    updated = clone_tree(tree)
    updated.append(renumber_levels(copy.deepcopy(node), 0))
    return updated


def _clone_subtree(node: TreeNode, existing_ids: set[str], *, is_root: bool) -> TreeNode:
    data = copy.deepcopy(node.data)
    title = node.title
    if is_root:
        title = f"{title}{COPY_SUFFIX}".strip()
        data["title"] = title

    menu_id = generate_menu_id(title, existing_ids)
    existing_ids.add(menu_id)
    data["menu_id"] = menu_id

    submenu = data.get("submenu")
    if isinstance(submenu, dict):
        submenu["id"] = f"submenu_{menu_id}"
        if is_root and submenu.get("submenuTitle"):
            submenu["submenuTitle"] = f"{submenu['submenuTitle']}{COPY_SUFFIX}"
            if data.get("submenuTitle"):
                data["submenuTitle"] = submenu["submenuTitle"]

    return TreeNode(
        key=new_key(),
        data=data,
        children=[_clone_subtree(child, existing_ids, is_root=False) for child in node.children],
        level=node.level,
    )


def duplicate_subtree(tree: list[TreeNode], key: str | None) -> tuple[list[TreeNode], str | None]:
    """Clone a node with its whole subtree and place the copy right after it."""
    updated = clone_tree(tree)
    location = find_with_parent(updated, key)
    if location is None:
        return updated, None
    existing_ids = all_ids(updated)
    clone = _clone_subtree(location.node, existing_ids, is_root=True)
    location.container.insert(location.index + 1, clone)
    logger.debug("Duplicated %s as %s", location.node.menu_id, clone.menu_id)
    return updated, clone.key


def _normalize_submenu(data: dict[str, Any]) -> None:
    submenu = data.get("submenu")
    if not isinstance(submenu, dict):
        return
    # Child items are edited through the tree, never through the form fields.
    submenu.pop("items", None)
    if submenu.get("submenuStyle") == "bottomSheet":
        submenu["submenuLayout"] = DEFAULT_SUBMENU_LAYOUT


def update_data(tree: list[TreeNode], key: str | None, fields: dict[str, Any]) -> list[TreeNode]:
    """Merge form fields into a node's item; a None value deletes the field."""
    updated = clone_tree(tree)
    node = find_by_key(updated, key)
    if node is None:
        return updated
    for name, value in (fields or {}).items():
        if value is None:
            node.data.pop(name, None)
        elif name == "submenu" and isinstance(value, dict) and isinstance(node.data.get("submenu"), dict):
            node.data["submenu"].update(copy.deepcopy(value))
        else:
            node.data[name] = copy.deepcopy(value)
    _normalize_submenu(node.data)
    return updated
