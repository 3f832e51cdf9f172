# Kanban server — settings
# Defaults, overridden by a YAML settings file, then environment, then CLI flags.

import argparse
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "./kanban_data"
DEFAULT_PORT = 8787
WEB_DIR = Path(__file__).resolve().parent.parent / "web"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_bool(value) -> bool:
    """Parse true/1/yes/on and false/0/no/off (case-insensitive)."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Invalid boolean: {value}")


def _bool_arg(value: str) -> bool:
    try:
        return parse_bool(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


@dataclass
class ServerSettings:
    """Runtime settings for the kanban server."""

    root: str = DEFAULT_ROOT
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    # Create missing config and refuse orphan prompts instead of asking
    auto_confirm: bool = False

    # UI flags served by /api/ui
    show_task_editor: bool = True
    show_board_editor: bool = False

    # Startup conveniences
    write_default_theme: bool = False
    open_browser: bool = False
    open_browser_once: bool = True

    web_dir: str = str(WEB_DIR)
    log_level: str = "INFO"

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ServerSettings":
        """Load settings from a YAML file, falling back to defaults."""
        if not path:
            return cls()
        cfg_path = Path(path).expanduser()
        if not cfg_path.exists():
            logger.warning(f"Settings file not found: {cfg_path}, using defaults")
            return cls()
        try:
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top level is not a mapping")
            known = {f.name for f in fields(cls)}
            settings = cls(**{k: v for k, v in data.items() if k in known})
            for name in ("auto_confirm", "show_task_editor", "show_board_editor",
                         "write_default_theme", "open_browser", "open_browser_once"):
                setattr(settings, name, parse_bool(getattr(settings, name)))
            settings.port = int(settings.port)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            logger.warning(f"Invalid settings file {cfg_path}: {e}, using defaults")
            return cls()
        settings.root = str(settings.root)
        return settings

    def apply_env(self, environ=None) -> "ServerSettings":
        """KANBAN_ROOT and KANBAN_PORT override the file settings."""
        environ = os.environ if environ is None else environ
        if environ.get("KANBAN_ROOT"):
            self.root = environ["KANBAN_ROOT"]
        port = environ.get("KANBAN_PORT", "").strip()
        if port.isdigit():
            self.port = int(port)
        return self


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kanban-server",
        description="Kanban Task Files server",
        epilog=(
            "Environment: KANBAN_ROOT (default base directory), "
            "KANBAN_PORT (default 8787), KANBAN_SETTINGS (YAML settings file). "
            "The server reads .workspace-kanban for board structure and ensures folders exist."
        ),
    )
    parser.add_argument("-t", "--target", help="Base directory for task folders (default: ./kanban_data or KANBAN_ROOT)")
    parser.add_argument("-y", "--yes", action="store_true", default=None,
                        help="Create missing folders without prompting")
    parser.add_argument("--show-task-editor", type=_bool_arg, metavar="<bool>",
                        help="Show task editor on load (default: true)")
    parser.add_argument("--show-board-editor", type=_bool_arg, metavar="<bool>",
                        help="Show board editor on load (default: false)")
    parser.add_argument("--write-default-theme", action="store_true", default=None,
                        help="Create .kanban-theme.conf with default values")
    parser.add_argument("--open-browser", type=_bool_arg, metavar="<bool>",
                        help="Open default system browser on start (default: false)")
    parser.add_argument("--open-browser-once", type=_bool_arg, metavar="<bool>",
                        help="Open browser only once per target (default: true)")
    parser.add_argument("--host", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to bind (overrides KANBAN_PORT)")
    parser.add_argument("--settings", help="YAML settings file (overrides KANBAN_SETTINGS)")
    return parser


def resolve_settings(argv: Optional[List[str]] = None, environ=None) -> ServerSettings:
    """Defaults < settings file < environment < command line."""
    environ = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)

    settings = ServerSettings.load(args.settings or environ.get("KANBAN_SETTINGS"))
    settings.apply_env(environ)

    overrides = {
        "root": args.target,
        "auto_confirm": args.yes,
        "show_task_editor": args.show_task_editor,
        "show_board_editor": args.show_board_editor,
        "write_default_theme": args.write_default_theme,
        "open_browser": args.open_browser,
        "open_browser_once": args.open_browser_once,
        "host": args.host,
        "port": args.port,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value)
    return settings
