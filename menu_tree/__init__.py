from .codec import assign_missing_ids, build_tree, flatten
from .editor import MenuTreeEditor
from .identifiers import generate_menu_id
from .models import TreeNode
from .storage import MenuStorage

__all__ = [
    "MenuStorage",
    "MenuTreeEditor",
    "TreeNode",
    "assign_missing_ids",
    "build_tree",
    "flatten",
    "generate_menu_id",
]
