"""
Task board schema.

A board is an ordered list of columns; each column is a folder under the
board root and each task is a markdown file inside one of those folders.

    <root>/.workspace-kanban        column list
    <root>/<column id>/<task id>.md task file

Column ids double as folder names and task ids double as file names, so
both are restricted to a small safe alphabet.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .errors import BadRequest

COLUMN_ID_RE = re.compile(r"[a-z0-9_-]+")
TASK_ID_RE = re.compile(r"[a-z0-9-]+")


def is_valid_column_id(value: str) -> bool:
    return bool(value) and COLUMN_ID_RE.fullmatch(value) is not None


def is_valid_task_id(value: str) -> bool:
    return bool(value) and TASK_ID_RE.fullmatch(value) is not None


def utc_now() -> str:
    """ISO-8601 UTC timestamp with microseconds (sorts as text)."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@dataclass
class Column:
    """One board column; `id` is also the folder name."""
    id: str
    title: str
    wip_limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "wip_limit": self.wip_limit}

    @classmethod
    def from_dict(cls, data: Any) -> "Column":
        """Deserialize a column from a request body. Type errors are BadRequest."""
        if not isinstance(data, dict):
            raise BadRequest("column must be an object")
        wip_limit = data.get("wip_limit")
        if wip_limit is not None:
            if isinstance(wip_limit, bool) or not isinstance(wip_limit, int) or wip_limit < 0:
                raise BadRequest("wip_limit must be a non-negative integer")
        return cls(
            id=_required_str(data, "id"),
            title=_required_str(data, "title"),
            wip_limit=wip_limit,
        )


@dataclass
class BoardConfig:
    """Ordered column list. Order is display order."""
    columns: List[Column] = field(default_factory=list)

    def column_ids(self) -> List[str]:
        return [c.id for c in self.columns]

    def has_column(self, column_id: str) -> bool:
        return any(c.id == column_id for c in self.columns)

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": [c.to_dict() for c in self.columns]}


@dataclass
class Task:
    """A task file. `folder` and `status` always name the column holding it."""
    id: str
    title: str = ""
    description: str = ""
    creator: str = ""
    assigned_to: str = ""
    created_at: str = ""
    updated_at: str = ""
    status: str = ""
    tags: List[str] = field(default_factory=list)
    folder: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "creator": self.creator,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "status": self.status,
            "tags": list(self.tags),
            "folder": self.folder,
        }


@dataclass
class ThemeSettings:
    headline: Optional[str] = None
    colors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"headline": self.headline, "colors": dict(self.colors)}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Request inputs
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _require_object(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise BadRequest("request body must be a JSON object")
    return data


def _required_str(data: Dict[str, Any], key: str) -> str:
    if key not in data:
        raise BadRequest(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise BadRequest(f"`{key}` must be a string")
    return value


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequest(f"`{key}` must be a string")
    return value


def _optional_tags(data: Dict[str, Any]) -> Optional[List[str]]:
    value = data.get("tags")
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise BadRequest("`tags` must be a list of strings")
    return list(value)


@dataclass
class NewTaskInput:
    title: str
    description: Optional[str] = None
    creator: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "NewTaskInput":
        data = _require_object(data)
        return cls(
            title=_required_str(data, "title"),
            description=_optional_str(data, "description"),
            creator=_optional_str(data, "creator"),
            assigned_to=_optional_str(data, "assigned_to"),
            tags=_optional_tags(data),
            status=_optional_str(data, "status"),
        )


@dataclass
class UpdateTaskInput:
    """Partial update: None means "leave unchanged"."""
    title: Optional[str] = None
    description: Optional[str] = None
    creator: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "UpdateTaskInput":
        data = _require_object(data)
        return cls(
            title=_optional_str(data, "title"),
            description=_optional_str(data, "description"),
            creator=_optional_str(data, "creator"),
            assigned_to=_optional_str(data, "assigned_to"),
            tags=_optional_tags(data),
        )


@dataclass
class MoveTaskInput:
    folder: str

    @classmethod
    def from_dict(cls, data: Any) -> "MoveTaskInput":
        data = _require_object(data)
        return cls(folder=_required_str(data, "folder"))


@dataclass
class BoardUpdate:
    columns: List[Column]

    @classmethod
    def from_dict(cls, data: Any) -> "BoardUpdate":
        data = _require_object(data)
        columns = data.get("columns")
        if not isinstance(columns, list):
            raise BadRequest("`columns` must be a list")
        return cls(columns=[Column.from_dict(c) for c in columns])
