"""Theme file (.kanban-theme.conf): headline text and `color.<name>` overrides."""
import logging
from pathlib import Path

from .schema import ThemeSettings

logger = logging.getLogger(__name__)

THEME_FILE = ".kanban-theme.conf"

DEFAULT_THEME = """\
# Headline text shown in the app header
headline=Kanban Task Files

# Primary accent used for buttons
color.accent=#ff7a18
# Darker accent for hover states
color.accent_deep=#c24800
# Main text color
color.ink=#141414
# Muted text and secondary labels
color.muted=#4e4c48
# Card surface color
color.card=#ffffff
# Background gradient start/middle/end
color.bg_start=#fff4e6
color.bg_mid=#f7efe2
color.bg_end=#ece4d7
"""


def theme_path(root: Path) -> Path:
    return Path(root) / THEME_FILE


def load_theme(root: Path) -> ThemeSettings:
    """Read the theme file; a missing or unreadable file yields empty settings."""
    theme = ThemeSettings()
    path = theme_path(root)
    if not path.exists():
        return theme
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring unreadable theme file {path}: {e}")
        return theme

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#") or "=" not in trimmed:
            continue
        key, _, value = trimmed.partition("=")
        key, value = key.strip(), value.strip()
        if key.lower() == "headline":
            if value:
                theme.headline = value
            continue
        if key.startswith("color.") and value:
            theme.colors[key[len("color."):]] = value
    return theme


def write_default_theme(root: Path) -> bool:
    """Write the default theme unless one exists. Returns True if written."""
    path = theme_path(root)
    if path.exists():
        return False
    Path(root).mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_THEME, encoding="utf-8")
    return True
