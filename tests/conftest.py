import copy

import pytest

from menu_tree.codec import build_tree

SAMPLE_ITEMS = [
    {
        "menu_id": "menu_pulsa",
        "iconUrl": "📱",
        "title": "Pulsa",
        "submenu": {
            "id": "pulsa_submenu",
            "submenuTitle": "Pilih Provider",
            "submenuStyle": "fullScreen",
            "submenuLayout": "grid",
            "items": [
                {"menu_id": "menu_telkomsel", "iconUrl": "📱", "title": "Telkomsel", "route": "/pulsa/telkomsel"},
                {"menu_id": "menu_xl", "iconUrl": "📱", "title": "XL", "route": "/pulsa/xl"},
            ],
        },
    },
    {
        "menu_id": "menu_kartu_kredit",
        "iconUrl": "💳",
        "title": "Kartu Kredit",
        "route": "/credit-card",
        "routeArgs": {"category": "credit"},
    },
]


def leaf(title, menu_id=None):
    return {"menu_id": menu_id or f"menu_{title.lower()}", "iconUrl": "📱", "title": title, "route": f"/{title.lower()}"}


def container(title, children=(), menu_id=None):
    return {
        "menu_id": menu_id or f"menu_{title.lower()}",
        "iconUrl": "📱",
        "title": title,
        "submenu": {
            "id": f"submenu_{title.lower()}",
            "submenuTitle": title,
            "submenuStyle": "fullScreen",
            "submenuLayout": "grid",
            "items": list(children),
        },
    }


def titles(nodes):
    return [node.title for node in nodes]


def by_title(nodes, title):
    for node in nodes:
        if node.title == title:
            return node
        found = by_title(node.children, title)
        if found:
            return found
    return None


def assert_levels(nodes, level=0):
    for node in nodes:
        assert node.level == level, f"{node.title} at level {node.level}, expected {level}"
        assert_levels(node.children, level + 1)


@pytest.fixture(name="sample_items")
def sample_items_fixture():
    return copy.deepcopy(SAMPLE_ITEMS)


@pytest.fixture(name="sample_tree")
def sample_tree_fixture(sample_items):
    return build_tree(sample_items)
