from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from shutil import copy2
from typing import Any, Iterator

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

logger = logging.getLogger(__name__)

yaml = YAML()
yaml.preserve_quotes = True
yaml.indent(mapping=2, sequence=4, offset=2)
yaml.width = 4096

YAML_SUFFIXES = {".yml", ".yaml"}


def _now_stamp() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S-%f")


def _plain(value: Any) -> Any:
    """Strip ruamel round-trip containers down to plain dicts and lists."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _iter_mappings(value: Any) -> Iterator[dict[str, Any]]:
    if isinstance(value, dict):
        yield value
        for child in value.values():
            yield from _iter_mappings(child)
    elif isinstance(value, list):
        for child in value:
            yield from _iter_mappings(child)


class MenuStorage:
    """Reads and writes menu widget items inside a screen configuration file.

    `.yml`/`.yaml` files go through ruamel's round-trip loader so comments and
    quoting survive a save; anything else is treated as JSON.
    """

    def __init__(self, path: Path, *, backup: bool = True, backup_keep: int = 5) -> None:
        self.path = path
        self.backup = backup
        self.backup_keep = backup_keep

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in YAML_SUFFIXES

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return CommentedMap() if self.is_yaml else {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                if self.is_yaml:
                    data = yaml.load(handle)
                else:
                    data = json.load(handle)
        except Exception as exc:
            raise ValueError(f"Failed to read {self.path.name}: {exc}") from exc
        if data is None:
            data = CommentedMap() if self.is_yaml else {}
        if not isinstance(data, dict):
            raise TypeError(f"{self.path.name} must contain a mapping at the top level.")
        return data

    def find_widget(self, config: dict[str, Any], instance_id: str) -> dict[str, Any]:
        fallback = None
        for mapping in _iter_mappings(config):
            if mapping.get("instanceId") == instance_id:
                return mapping
            if fallback is None and mapping.get("id") == instance_id and "items" in mapping:
                fallback = mapping
        if fallback is not None:
            return fallback
        raise KeyError(f"No menu widget with id {instance_id!r} in {self.path.name}.")

    def load_items(self, instance_id: str) -> list[dict[str, Any]]:
        widget = self.find_widget(self.load(), instance_id)
        items = widget.get("items") or []
        if not isinstance(items, list):
            raise TypeError(f"Widget {instance_id!r} has non-list items.")
        return [_plain(item) for item in items if isinstance(item, dict)]

    def save_items(self, instance_id: str, items: list[dict[str, Any]]) -> Path | None:
        config = self.load()
        widget = self.find_widget(config, instance_id)
        widget["items"] = items
        backup_path = self._backup_file()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            if self.is_yaml:
                yaml.dump(config, handle)
            else:
                json.dump(config, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
        logger.info("Saved %d menu items for %s to %s", len(items), instance_id, self.path)
        return backup_path

    def _backup_file(self) -> Path | None:
        if not self.backup or not self.path.exists():
            return None
        backup_path = self.path.with_name(f"{self.path.name}.bak-{_now_stamp()}")
        copy2(self.path, backup_path)

        # Keep only the most recent backups.
        backups = sorted(
            self.path.parent.glob(f"{self.path.name}.bak-*"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        for old in backups[self.backup_keep:]:
            try:
                old.unlink()
            except OSError:
                pass
        return backup_path
