import json

import pytest

from menu_tree.storage import MenuStorage


def _screen_config(items):
    return {
        "screens": {
            "home": {
                "widgets": [
                    {"id": "title", "instanceId": "title_1", "title": {"text": "Welcome"}},
                    {"id": "pulsa", "instanceId": "pulsa_1", "items": items},
                ]
            }
        },
        "navigation": {"menuStyle": 2},
    }


@pytest.fixture(name="json_config")
def json_config_fixture(tmp_path, sample_items):
    path = tmp_path / "screen_config.json"
    path.write_text(json.dumps(_screen_config(sample_items), ensure_ascii=False), encoding="utf-8")
    return path


YAML_CONFIG = """\
# remote screen configuration
screens:
  home:
    widgets:
      - id: pulsa
        instanceId: pulsa_1
        items:
          - menu_id: menu_pulsa
            title: 'Pulsa'  # keep quotes
            route: /pulsa
"""


def test_load_items_by_instance_id(json_config, sample_items):
    assert MenuStorage(json_config).load_items("pulsa_1") == sample_items


def test_load_items_falls_back_to_widget_id(json_config, sample_items):
    assert MenuStorage(json_config).load_items("pulsa") == sample_items


def test_unknown_widget_raises_key_error(json_config):
    with pytest.raises(KeyError):
        MenuStorage(json_config).load_items("nope")


def test_missing_file_has_no_widgets(tmp_path):
    with pytest.raises(KeyError):
        MenuStorage(tmp_path / "absent.json").load_items("pulsa_1")


def test_non_mapping_root_is_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TypeError):
        MenuStorage(path).load()


def test_unreadable_file_is_rejected(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        MenuStorage(path).load()


def test_save_items_writes_widget_and_backup(json_config):
    storage = MenuStorage(json_config)
    new_items = [{"menu_id": "menu_xl", "title": "XL", "route": "/xl"}]
    backup = storage.save_items("pulsa_1", new_items)

    assert backup is not None and backup.exists()
    assert json.loads(backup.read_text(encoding="utf-8"))["screens"]["home"]["widgets"][1]["items"][0]["title"] == "Pulsa"
    saved = json.loads(json_config.read_text(encoding="utf-8"))
    assert saved["screens"]["home"]["widgets"][1]["items"] == new_items
    assert saved["navigation"] == {"menuStyle": 2}


def test_save_without_backup(json_config):
    assert MenuStorage(json_config, backup=False).save_items("pulsa_1", []) is None
    assert list(json_config.parent.glob("*.bak-*")) == []


def test_yaml_round_trip_keeps_comments(tmp_path):
    path = tmp_path / "screen_config.yml"
    path.write_text(YAML_CONFIG, encoding="utf-8")
    storage = MenuStorage(path, backup=False)

    items = storage.load_items("pulsa_1")
    assert items == [{"menu_id": "menu_pulsa", "title": "Pulsa", "route": "/pulsa"}]
    assert type(items[0]) is dict

    items[0]["title"] = "Pulsa Murah"
    storage.save_items("pulsa_1", items)
    text = path.read_text(encoding="utf-8")
    assert "# remote screen configuration" in text
    assert "Pulsa Murah" in text
    assert storage.load_items("pulsa_1")[0]["title"] == "Pulsa Murah"


def test_back_to_back_saves_keep_separate_backups(json_config):
    storage = MenuStorage(json_config)
    first = storage.save_items("pulsa_1", [])
    second = storage.save_items("pulsa_1", [{"menu_id": "menu_xl", "title": "XL", "route": "/xl"}])
    assert first != second
    assert len(list(json_config.parent.glob("*.bak-*"))) == 2
    assert json.loads(second.read_text(encoding="utf-8"))["screens"]["home"]["widgets"][1]["items"] == []
