"""
Board config file (.workspace-kanban).

One column per line:

    # comment
    backlog: Backlog
    in_progress: In Progress wip=3
    done

A line without ':' uses the whole text as id and title. Lines with an
invalid id are skipped; `wip=` is kept only when it is a positive integer.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional

from .errors import MissingConfig, NoValidColumns, ParseError, ValidationError
from .schema import BoardConfig, Column, is_valid_column_id

logger = logging.getLogger(__name__)

CONFIG_FILE = ".workspace-kanban"

DEFAULT_COLUMNS = [
    ("backlog", "Backlog"),
    ("planned", "Planned"),
    ("in_progress", "In Progress"),
    ("done", "Done"),
]

_WIP_VALUE_RE = re.compile(r"[0-9]+")


def config_path(root: Path) -> Path:
    return Path(root) / CONFIG_FILE


def default_config() -> BoardConfig:
    return BoardConfig(columns=[Column(id=i, title=t) for i, t in DEFAULT_COLUMNS])


def parse_config_line(line: str) -> Optional[Column]:
    """Parse one config line. Returns None for blanks, comments and bad ids."""
    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#"):
        return None
    if ":" in trimmed:
        id_part, _, title_part = trimmed.partition(":")
        id_part, title_part = id_part.strip(), title_part.strip()
    else:
        id_part = title_part = trimmed
    if not is_valid_column_id(id_part):
        return None

    title = title_part
    wip_limit = None
    if "wip=" in title_part:
        base_title, _, tail = title_part.partition("wip=")
        title = base_title.strip()
        tokens = tail.split()
        raw = tokens[0] if tokens else ""
        if _WIP_VALUE_RE.fullmatch(raw) and int(raw) > 0:
            wip_limit = int(raw)
    return Column(id=id_part, title=title or id_part, wip_limit=wip_limit)


def parse_config(text: str) -> List[Column]:
    columns = []
    for line in text.splitlines():
        column = parse_config_line(line)
        if column is not None:
            columns.append(column)
    return columns


def serialize_config(config: BoardConfig) -> str:
    lines = []
    for column in config.columns:
        if column.wip_limit and column.wip_limit > 0:
            lines.append(f"{column.id}: {column.title} wip={column.wip_limit}\n")
        else:
            lines.append(f"{column.id}: {column.title}\n")
    return "".join(lines)


def write_config(root: Path, config: BoardConfig) -> None:
    config_path(root).write_text(serialize_config(config), encoding="utf-8")
    logger.info(f"Board config written: {config_path(root)} ({len(config.columns)} columns)")


def validate_columns(columns: List[Column]) -> None:
    """
    Raise ValidationError unless `columns` is a non-empty set of unique,
    valid ids whose titles each fit on one config line.
    """
    if not columns:
        raise ValidationError("Board must have at least one column")
    seen = set()
    for column in columns:
        if not column.id:
            raise ValidationError("Column id cannot be empty")
        if not is_valid_column_id(column.id):
            raise ValidationError(f"Invalid column id: {column.id}")
        if "\n" in column.title or "\r" in column.title:
            raise ValidationError(f"Column title cannot contain line breaks: {column.id}")
        if column.id in seen:
            raise ValidationError(f"Duplicate column id: {column.id}")
        seen.add(column.id)


def load_config(root: Path, auto_confirm: bool, resolver=None) -> BoardConfig:
    """
    Read the board config under `root`.

    A missing file is created with the default columns when `auto_confirm`
    is set, otherwise only if the resolver confirms; declining raises
    MissingConfig.
    """
    path = config_path(root)
    if not path.exists():
        if not auto_confirm:
            if resolver is None or not resolver.confirm_create_config(Path(root), CONFIG_FILE):
                raise MissingConfig(f"Missing {CONFIG_FILE}")
        Path(root).mkdir(parents=True, exist_ok=True)
        write_config(root, default_config())

    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"{CONFIG_FILE} is not valid UTF-8: {e}") from e

    columns = parse_config(text)
    if not columns:
        raise NoValidColumns(f"No valid columns in {CONFIG_FILE}")
    return BoardConfig(columns=columns)
