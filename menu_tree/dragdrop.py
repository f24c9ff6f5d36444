from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field

from .models import AFTER, BEFORE, INSIDE, TreeNode
from .mutator import append_root, insert, remove
from .query import find_by_key, is_descendant

logger = logging.getLogger(__name__)

BEFORE_FRACTION = 0.25
AFTER_FRACTION = 0.75


def position_for_fraction(fraction: float) -> str:
    """Map the pointer's vertical position within a row to a drop position."""
    if fraction < BEFORE_FRACTION:
        return BEFORE
    if fraction > AFTER_FRACTION:
        return AFTER
    return INSIDE


@dataclass
class DragState:
    dragging: bool = False
    dragged_key: str | None = None
    drag_over_key: str | None = None  # None while over the root drop zone
    drag_over_position: str | None = None


@dataclass
class DropOutcome:
    tree: list[TreeNode] = field(default_factory=list)
    moved: bool = False
    warning: str | None = None


class DragDropController:
    """Turns press/hover/release pointer events into a single tree move."""

    def __init__(self) -> None:
        self.state = DragState()

    @property
    def dragging(self) -> bool:
        return self.state.dragging

    def on_press_start(self, node: TreeNode) -> None:
        if self.state.dragging:
            return
        self.state = DragState(dragging=True, dragged_key=node.key)

    def on_hover(self, node: TreeNode, pointer_y: float, row_height: float) -> str | None:
        if not self.state.dragging or node.key == self.state.dragged_key:
            return None
        fraction = pointer_y / row_height if row_height > 0 else 0.5
        position = position_for_fraction(fraction)
        self.state.drag_over_key = node.key
        self.state.drag_over_position = position
        return position

    def on_hover_root(self) -> None:
        if not self.state.dragging:
            return
        self.state.drag_over_key = None
        self.state.drag_over_position = AFTER

    def on_cancel(self) -> None:
        self.state = DragState()

    def on_release(self, tree: list[TreeNode], node: TreeNode | None = None) -> DropOutcome:
        """Apply the pending move; `node` is None when released outside every row."""
        state = self.state
        self.on_cancel()
        if not state.dragging or not state.dragged_key:
            return DropOutcome(tree=tree)

        dragged = find_by_key(tree, state.dragged_key)
        if dragged is None:
            return DropOutcome(tree=tree)
        # Snapshot before removal: remove() drops the subtree from the working copy.
        snapshot = copy.deepcopy(dragged)

        if node is None or node.key == state.dragged_key:
            updated = append_root(remove(tree, state.dragged_key), snapshot)
            logger.debug("Moved %s to root", dragged.menu_id)
            return DropOutcome(tree=updated, moved=True)

        if state.drag_over_position is None:
            return DropOutcome(tree=tree)
        if find_by_key(tree, node.key) is None:
            return DropOutcome(tree=tree)
        if is_descendant(tree, state.dragged_key, node.key):
            logger.info("Rejected drop of %s into its own descendant %s", dragged.menu_id, node.menu_id)
            return DropOutcome(tree=tree, warning="A menu cannot be moved into one of its own sub-items.")

        updated = insert(remove(tree, state.dragged_key), node.key, state.drag_over_position, snapshot)
        logger.debug("Moved %s %s %s", dragged.menu_id, state.drag_over_position, node.menu_id)
        return DropOutcome(tree=updated, moved=True)
