from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .models import TreeNode


@dataclass
class NodeLocation:
    node: TreeNode
    container: list[TreeNode]  # the exact list holding `node` (root list included)
    index: int


def iter_nodes(tree: Iterable[TreeNode]) -> Iterator[TreeNode]:
    for node in tree:
        yield node
        yield from iter_nodes(node.children)


def find_by_key(tree: Iterable[TreeNode], key: str | None) -> TreeNode | None:
    if not key:
        return None
    for node in iter_nodes(tree):
        if node.key == key:
            return node
    return None


def find_with_parent(tree: list[TreeNode], key: str | None) -> NodeLocation | None:
    if not key:
        return None
    for index, node in enumerate(tree):
        if node.key == key:
            return NodeLocation(node=node, container=tree, index=index)
        found = find_with_parent(node.children, key)
        if found:
            return found
    return None


def all_ids(tree: Iterable[TreeNode]) -> set[str]:
    return {node.menu_id for node in iter_nodes(tree) if node.menu_id}


def is_descendant(tree: Iterable[TreeNode], ancestor_key: str, key: str) -> bool:
    """True when `key` sits somewhere below `ancestor_key` (not the node itself)."""
    ancestor = find_by_key(tree, ancestor_key)
    if ancestor is None:
        return False
    return find_by_key(ancestor.children, key) is not None
