#!/usr/bin/env python3
"""
Kanban Task Files Server
------------------------
Serves the Kanban web UI and a JSON API backed by plain folders and files:
each column is a folder under the board root, each task a markdown file.

Usage:
    kanban-server -t ~/work/board -y
    python kanban_server.py --target ./kanban_data --open-browser=true

API:
    GET    /api/board            → { board }
    PUT    /api/board            → body { columns: [{id, title, wip_limit}] } → { board }
    GET    /api/tasks            → { folders: {column: [task]}, board }
    POST   /api/tasks            → body { title, description?, creator?, assigned_to?, tags?, status? } → task (201)
    PUT    /api/tasks/<id>       → partial body { title?, description?, creator?, assigned_to?, tags? } → task
    DELETE /api/tasks/<id>       → 204
    POST   /api/tasks/<id>/move  → body { folder } → task
    GET    /api/ui               → { show_task_editor, show_board_editor }
    GET    /api/theme            → { theme }

Every board or task request re-reads .workspace-kanban and reconciles the
folders before touching any task, so hand edits are always picked up.
"""

import logging
import sys
import webbrowser
from pathlib import Path
from typing import List, Optional

from flask import Flask, jsonify, request, send_from_directory, abort

from taskboard.config import validate_columns, write_config
from taskboard.errors import BadRequest, BoardError
from taskboard.reconcile import refresh_config
from taskboard.resolver import ConsoleResolver
from taskboard.schema import (
    BoardUpdate,
    BoardConfig,
    MoveTaskInput,
    NewTaskInput,
    UpdateTaskInput,
    is_valid_task_id,
    utc_now,
)
from taskboard.settings import ServerSettings, resolve_settings
from taskboard.store import TaskStore
from taskboard.theme import load_theme, theme_path, write_default_theme

logger = logging.getLogger("kanban")

BROWSER_MARKER = ".kanban-browser-opened"


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(settings: ServerSettings, resolver=None, clock=utc_now) -> Flask:
    """
    Build the Flask app for one board root.

    `resolver` answers orphan-folder and missing-config questions when
    `settings.auto_confirm` is off; it defaults to console prompts.
    """
    app = Flask(__name__, static_folder=None)
    app.json.sort_keys = False
    app.config["BOARD_SETTINGS"] = settings

    if resolver is None and not settings.auto_confirm:
        resolver = ConsoleResolver()
    store = TaskStore(settings.root_path, clock=clock)

    def refresh() -> BoardConfig:
        return refresh_config(settings.root_path, settings.auto_confirm, resolver, clock)

    def body():
        return request.get_json(force=True, silent=True)

    def check_id(task_id: str) -> None:
        if not is_valid_task_id(task_id):
            raise BadRequest("invalid id")

    # ── Errors ───────────────────────────────────────────────────────────────

    @app.errorhandler(BoardError)
    def handle_board_error(e):
        if e.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {e}")
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(OSError)
    def handle_os_error(e):
        logger.error(f"{request.method} {request.path} filesystem error: {e}")
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(404)
    @app.errorhandler(405)
    def handle_not_found(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found"}), 404
        return "Not Found", 404

    # ── Board ────────────────────────────────────────────────────────────────

    @app.route("/api/board", methods=["GET"])
    def api_board():
        return jsonify({"board": refresh().to_dict()})

    @app.route("/api/board", methods=["PUT"])
    def api_board_update():
        refresh()
        update = BoardUpdate.from_dict(body())
        validate_columns(update.columns)
        write_config(settings.root_path, BoardConfig(columns=update.columns))
        return jsonify({"board": refresh().to_dict()})

    @app.route("/api/ui", methods=["GET"])
    def api_ui():
        return jsonify({
            "show_task_editor": settings.show_task_editor,
            "show_board_editor": settings.show_board_editor,
        })

    @app.route("/api/theme", methods=["GET"])
    def api_theme():
        return jsonify({"theme": load_theme(settings.root_path).to_dict()})

    # ── Tasks ────────────────────────────────────────────────────────────────

    @app.route("/api/tasks", methods=["GET"])
    def api_tasks():
        config = refresh()
        folders = store.list_all(config)
        return jsonify({
            "folders": {cid: [t.to_dict() for t in tasks] for cid, tasks in folders.items()},
            "board": config.to_dict(),
        })

    @app.route("/api/tasks", methods=["POST"])
    def api_create_task():
        config = refresh()
        task = store.create(NewTaskInput.from_dict(body()), config)
        return jsonify(task.to_dict()), 201

    @app.route("/api/tasks/<task_id>", methods=["PUT"])
    def api_update_task(task_id):
        check_id(task_id)
        config = refresh()
        task = store.update(task_id, UpdateTaskInput.from_dict(body()), config)
        return jsonify(task.to_dict())

    @app.route("/api/tasks/<task_id>", methods=["DELETE"])
    def api_delete_task(task_id):
        check_id(task_id)
        config = refresh()
        store.delete(task_id, config)
        return "", 204

    @app.route("/api/tasks/<task_id>/move", methods=["POST"])
    def api_move_task(task_id):
        check_id(task_id)
        config = refresh()
        move = MoveTaskInput.from_dict(body())
        task = store.move(task_id, move.folder, config)
        return jsonify(task.to_dict())

    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "root": str(settings.root_path),
            "auto_confirm": settings.auto_confirm,
        })

    # ── Static UI ────────────────────────────────────────────────────────────

    @app.route("/", defaults={"asset": "index.html"})
    @app.route("/<path:asset>")
    def static_asset(asset):
        if asset.startswith("api/"):
            abort(404)
        return send_from_directory(settings.web_dir, asset)

    return app


# ── Browser ──────────────────────────────────────────────────────────────────

def open_browser(root: Path, url: str, once: bool) -> bool:
    """Open `url` in the default browser. With `once`, only the first time per root."""
    marker = Path(root) / BROWSER_MARKER
    if once and marker.exists():
        return False
    if not webbrowser.open(url):
        logger.warning(f"Failed to open browser for {url}")
        return False
    if once:
        marker.write_text(url, encoding="utf-8")
    return True


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv: Optional[List[str]] = None) -> int:
    settings = resolve_settings(argv)

    logging.basicConfig(
        level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
        format="%(asctime)s [kanban] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    root = settings.root_path
    if settings.write_default_theme:
        try:
            if write_default_theme(root):
                logger.info(f"Created default theme file at {theme_path(root)}")
            else:
                logger.info(f"Theme file already exists at {theme_path(root)}")
        except OSError as e:
            logger.error(f"Failed to write theme: {e}")
            return 1

    resolver = None if settings.auto_confirm else ConsoleResolver()
    try:
        config = refresh_config(root, settings.auto_confirm, resolver)
    except (BoardError, OSError) as e:
        logger.error(str(e))
        return 1

    url = f"http://localhost:{settings.port}"
    print(f"""
╔═══════════════════════════════════════╗
║  Kanban Task Files Server             ║
╠═══════════════════════════════════════╣
║  URL:  {url:<31}║
║  Root: {str(root):<31}║
║  Cols: {len(config.columns):<31}║
╚═══════════════════════════════════════╝
""")

    if settings.open_browser:
        open_browser(root, url, settings.open_browser_once)

    app = create_app(settings, resolver=resolver)
    # One request at a time: handlers share the filesystem without locks
    app.run(host=settings.host, port=settings.port, debug=False, threaded=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
