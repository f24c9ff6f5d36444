from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Iterator

from .identifiers import generate_menu_id
from .models import DEFAULT_SUBMENU_LAYOUT, DEFAULT_SUBMENU_STYLE, TreeNode, new_key

logger = logging.getLogger(__name__)


def _submenu_of(item: dict[str, Any]) -> dict[str, Any] | None:
    submenu = item.get("submenu")
    return submenu if isinstance(submenu, dict) else None


def _child_items(item: dict[str, Any]) -> list[dict[str, Any]]:
    submenu = _submenu_of(item)
    items = submenu.get("items") if submenu else None
    if not isinstance(items, list):
        return []
    return [child for child in items if isinstance(child, dict)]


def _walk_items(items: Iterable[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    for item in items:
        yield item
        yield from _walk_items(_child_items(item))


def assign_missing_ids(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Return a copy of `items` where every item carries a `menu_id`.

    Older configurations were saved before menu ids existed. Ids already in
    the input are reserved first, then missing ones are minted in input order
    so earlier siblings keep their natural id.
    """
    processed = copy.deepcopy(list(items or []))
    existing_ids = {str(item["menu_id"]) for item in _walk_items(processed) if item.get("menu_id")}
    generated = 0
    for item in _walk_items(processed):
        if item.get("menu_id"):
            continue
        menu_id = generate_menu_id(str(item.get("title") or ""), existing_ids)
        item["menu_id"] = menu_id
        existing_ids.add(menu_id)
        generated += 1
        logger.debug("Generated menu id for %r: %s", item.get("title"), menu_id)
    if generated:
        logger.info("Backward compatibility: generated %d menu ids for existing items", generated)
    return processed


def build_tree(items: Iterable[dict[str, Any]], level: int = 0) -> list[TreeNode]:
    tree: list[TreeNode] = []
    for item in items or []:
        data = copy.deepcopy(item)
        submenu = _submenu_of(data)
        if submenu is not None:
            submenu.pop("items", None)
        tree.append(
            TreeNode(
                key=new_key(),
                data=data,
                children=build_tree(_child_items(item), level + 1),
                level=level,
            )
        )
    return tree


def _refresh_submenu(node: TreeNode, items: list[dict[str, Any]]) -> dict[str, Any]:
    data = node.data
    existing = _submenu_of(data) or {}
    submenu = dict(existing)
    submenu["id"] = existing.get("id") or f"submenu_{node.menu_id or node.key}"
    submenu["submenuTitle"] = existing.get("submenuTitle") or data.get("submenuTitle") or node.title or "Submenu"
    submenu["submenuStyle"] = existing.get("submenuStyle") or data.get("submenuStyle") or DEFAULT_SUBMENU_STYLE
    submenu["submenuLayout"] = existing.get("submenuLayout") or data.get("submenuLayout") or DEFAULT_SUBMENU_LAYOUT
    submenu["items"] = items
    return submenu


def flatten(nodes: Iterable[TreeNode]) -> list[dict[str, Any]]:
    """Convert editor nodes back into persisted menu items (keys are dropped)."""
    result: list[dict[str, Any]] = []
    for node in nodes:
        item = copy.deepcopy(node.data)
        if node.children:
            item["submenu"] = _refresh_submenu(node, flatten(node.children))
        elif _submenu_of(item) is not None:
            # An emptied container keeps its settings.
            item["submenu"]["items"] = []
        result.append(item)
    return result
