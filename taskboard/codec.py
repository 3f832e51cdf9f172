"""
Task file format.

    creator: alice
    assigned_to: bob
    created_at: 2024-05-01T09:30:00.000000+00:00
    updated_at: 2024-05-02T10:00:00.000000+00:00
    status: backlog
    tags: auth, web
    title: Fix login bug

    Free-form description,
    any number of lines.

The header ends at the first blank line. The task id is the file name
without `.md`; it is never read from the header.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from .errors import ParseError
from .schema import Task

logger = logging.getLogger(__name__)

TASK_SUFFIX = ".md"


def _split_lines(text: str) -> list:
    """Split on \\n, dropping a trailing \\r per line and the final empty line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _split_tags(value: str) -> list:
    return [t.strip() for t in value.split(",") if t.strip()]


def decode(data: Union[str, bytes], folder: Optional[str] = None, task_id: str = "task") -> Task:
    """
    Parse task file contents.

    `folder` is the column physically holding the file. When given it wins
    over the header's `status`, so a stale status never misplaces a task.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"task {task_id} is not valid UTF-8: {e}") from e
    else:
        text = data

    header = {}
    body = []
    in_body = False
    for line in _split_lines(text):
        if in_body:
            body.append(line)
            continue
        if not line.strip():
            in_body = True
            continue
        if ":" in line:
            key, _, value = line.partition(":")
            header[key.strip()] = value.strip()

    status = header.get("status", "")
    if folder is not None:
        if status and status != folder:
            logger.debug(f"Task {task_id}: stale status '{status}', file is in '{folder}'")
        status = folder

    return Task(
        id=task_id,
        title=header.get("title", ""),
        description="\n".join(body),
        creator=header.get("creator", ""),
        assigned_to=header.get("assigned_to", ""),
        created_at=header.get("created_at", ""),
        updated_at=header.get("updated_at", ""),
        status=status,
        tags=_split_tags(header.get("tags", "")),
        folder=folder if folder is not None else status,
    )


def _header_value(value: str) -> str:
    return " ".join(value.splitlines())


def encode(task: Task) -> str:
    header = [
        ("creator", task.creator),
        ("assigned_to", task.assigned_to),
        ("created_at", task.created_at),
        ("updated_at", task.updated_at),
        ("status", task.status),
        ("tags", ", ".join(task.tags)),
        ("title", task.title),
    ]
    lines = [f"{key}: {_header_value(value)}" for key, value in header]
    return "\n".join(lines) + "\n\n" + task.description + "\n"


def read_task(path: Path, folder: str) -> Task:
    path = Path(path)
    return decode(path.read_bytes(), folder, task_id=path.stem)


def write_task(path: Path, task: Task) -> None:
    """Write a task file via a temp file and rename."""
    path = Path(path)
    tmp_file = path.with_name(path.name + ".tmp")
    tmp_file.write_text(encode(task), encoding="utf-8")
    tmp_file.replace(path)
