# Run locally with: pip install -e . && python app.py
from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from flask import Flask, jsonify, request

from menu_tree.codec import flatten
from menu_tree.editor import MenuTreeEditor
from menu_tree.models import MENU, NODE_KINDS
from menu_tree.storage import MenuStorage

app = Flask(__name__)

CONFIG_FILENAME = "screen_config.json"


def _resolve_config_path() -> Path:
    """Resolve the screen configuration path, honoring an optional environment override."""
    env_path = os.environ.get("MENU_CONFIG_PATH") or os.environ.get("SCREEN_CONFIG_PATH")
    if env_path:
        candidate = Path(env_path)
        return candidate if candidate.is_absolute() else Path.cwd() / candidate
    return Path.cwd() / CONFIG_FILENAME


def _env_flag(name: str, default: str = "1") -> bool:
    return str(os.environ.get(name, default)).strip().lower() not in {"0", "false", "no", "off"}


app.config.setdefault("MENU_CONFIG_PATH", _resolve_config_path())
app.config.setdefault("MENU_BACKUP", _env_flag("MENU_BACKUP"))
app.config.setdefault("MENU_BACKUP_KEEP", int(os.environ.get("MENU_BACKUP_KEEP", "5")))

SESSIONS_LOCK = threading.RLock()
SESSIONS: dict[str, MenuTreeEditor] = {}

DRAG_EVENTS = {"press", "hover", "hover_root", "release", "cancel"}


def _json_error(message: str, status: int = 400, **extra: Any):
    payload: dict[str, Any] = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def _storage() -> MenuStorage:
    return MenuStorage(
        Path(app.config["MENU_CONFIG_PATH"]),
        backup=bool(app.config["MENU_BACKUP"]),
        backup_keep=int(app.config["MENU_BACKUP_KEEP"]),
    )


@contextmanager
def _locked_session(instance_id: str) -> Iterator[MenuTreeEditor | None]:
    # Editors are not thread safe; hold the lock for the whole request.
    with SESSIONS_LOCK:
        yield SESSIONS.get(instance_id)


def _no_session(instance_id: str):
    return _json_error(f"No open editor for {instance_id!r}.", 404)


def _payload() -> dict[str, Any] | None:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    return payload if isinstance(payload, dict) else None


def _snapshot(editor: MenuTreeEditor, **extra: Any):
    body = editor.to_dict()
    body.update(extra)
    return jsonify(body)


@app.route("/health", methods=["GET"])
def healthcheck():
    path = Path(app.config["MENU_CONFIG_PATH"])
    with SESSIONS_LOCK:
        open_sessions = sorted(SESSIONS)
    return jsonify({
        "status": "ok",
        "config_path": str(path),
        "exists": path.exists(),
        "sessions": open_sessions,
    })


@app.route("/api/menus/<instance_id>/open", methods=["POST"])
def api_open(instance_id: str):
    try:
        items = _storage().load_items(instance_id)
    except KeyError as exc:
        return _json_error(str(exc.args[0]), 404)
    except (ValueError, TypeError) as exc:
        return _json_error(str(exc), 500)
    editor = MenuTreeEditor(items)
    with SESSIONS_LOCK:
        SESSIONS[instance_id] = editor
        app.logger.info("Opened menu editor for %s (%d items)", instance_id, len(items))
        return _snapshot(editor)


@app.route("/api/menus/<instance_id>", methods=["GET"])
def api_get_menu(instance_id: str):
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        return _snapshot(editor)


@app.route("/api/menus/<instance_id>/nodes", methods=["POST"])
def api_add_node(instance_id: str):
    payload = _payload()
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        if payload is None:
            return _json_error("Expected a JSON object.", 400)
        kind = payload.get("kind") or MENU
        if kind not in NODE_KINDS:
            return _json_error(f"Invalid node kind: {kind}", 400)
        parent_key = payload.get("parent_key")
        if parent_key:
            new_key = editor.add_child_node(str(parent_key), kind)
        else:
            new_key = editor.add_root_node(kind)
        return _snapshot(editor, key=new_key)


@app.route("/api/menus/<instance_id>/nodes/<key>", methods=["PATCH"])
def api_update_node(instance_id: str, key: str):
    payload = _payload()
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        if payload is None:
            return _json_error("Expected a JSON object.", 400)
        fields = payload.get("fields", payload)
        if not isinstance(fields, dict):
            return _json_error("Expected `fields` to be a JSON object.", 400)
        editor.update_node(key, fields)
        return _snapshot(editor)


@app.route("/api/menus/<instance_id>/nodes/<key>", methods=["DELETE"])
def api_delete_node(instance_id: str, key: str):
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        editor.remove_node(key)
        return _snapshot(editor)


@app.route("/api/menus/<instance_id>/nodes/<key>/duplicate", methods=["POST"])
def api_duplicate_node(instance_id: str, key: str):
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        new_key = editor.duplicate_node(key)
        return _snapshot(editor, key=new_key)


@app.route("/api/menus/<instance_id>/nodes/<key>/toggle", methods=["POST"])
def api_toggle_node(instance_id: str, key: str):
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        editor.toggle_expanded(key)
        return _snapshot(editor)


@app.route("/api/menus/<instance_id>/drag", methods=["POST"])
def api_drag(instance_id: str):
    payload = _payload()
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        if payload is None:
            return _json_error("Expected a JSON object.", 400)
        event = payload.get("event")
        if event not in DRAG_EVENTS:
            return _json_error(f"Invalid drag event: {event}", 400)

        key = payload.get("key")
        extra: dict[str, Any] = {}
        if event == "press":
            if not key:
                return _json_error("`key` is required for press.", 400)
            editor.press(str(key))
        elif event == "hover":
            if not key:
                return _json_error("`key` is required for hover.", 400)
            try:
                pointer_y = float(payload.get("pointer_y", 0))
                row_height = float(payload.get("row_height", 1))
            except (TypeError, ValueError):
                return _json_error("`pointer_y` and `row_height` must be numbers.", 400)
            extra["position"] = editor.hover(str(key), pointer_y, row_height)
        elif event == "hover_root":
            editor.hover_root()
        elif event == "release":
            outcome = editor.release(str(key) if key else None)
            extra["moved"] = outcome.moved
        else:
            editor.cancel_drag()
        return _snapshot(editor, **extra)


@app.route("/api/menus/<instance_id>/commit", methods=["POST"])
def api_commit(instance_id: str):
    with _locked_session(instance_id) as editor:
        if editor is None:
            return _no_session(instance_id)
        items = flatten(editor.tree)
        try:
            backup_path = _storage().save_items(instance_id, items)
        except KeyError as exc:
            return _json_error(str(exc.args[0]), 404)
        except (ValueError, TypeError) as exc:
            return _json_error(str(exc), 500)
        except OSError as exc:
            app.logger.error("Failed to save menu %s: %s", instance_id, exc)
            return _json_error(f"Failed to save menu: {exc}", 500)
        editor.commit(items)
    response: dict[str, Any] = {"status": "ok", "items": items}
    if backup_path:
        response["backup"] = str(backup_path)
    return jsonify(response)


@app.route("/api/menus/<instance_id>/close", methods=["POST"])
def api_close(instance_id: str):
    with SESSIONS_LOCK:
        editor = SESSIONS.pop(instance_id, None)
        if editor is None:
            return _no_session(instance_id)
        discarded = editor.has_unsaved_changes()
        editor.close()
    return jsonify({"status": "ok", "discarded_changes": discarded})


if __name__ == "__main__":
    app.run(debug=True)
