"""
Filesystem task repository.

Provides CRUD and move operations over task files. The store holds only the
board root and a clock; every call re-reads the directories, so edits made
by hand between requests are always picked up.

Task ids are board-wide: a task id may exist in at most one column folder.
"""
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .codec import TASK_SUFFIX, read_task, write_task
from .errors import Conflict, InvalidFolder, NotFound, ParseError
from .schema import BoardConfig, NewTaskInput, Task, UpdateTaskInput, utc_now

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """Lowercase ASCII slug; whitespace, '-' and '_' runs become one '-'."""
    out = []
    last_dash = False
    for ch in title.lower():
        if ch.isascii() and ch.isalnum():
            out.append(ch)
            last_dash = False
        elif ch.isspace() or ch in "-_":
            if not last_dash:
                out.append("-")
                last_dash = True
    slug = "".join(out).strip("-")
    return slug or "task"


class TaskStore:
    """Task files under a board root."""

    def __init__(self, root, clock: Callable[[], str] = utc_now):
        self.root = Path(root)
        self.clock = clock

    # ── Paths & lookup ───────────────────────────────────────────────────────

    def task_path(self, folder: str, task_id: str) -> Path:
        return self.root / folder / f"{task_id}{TASK_SUFFIX}"

    def exists_anywhere(self, task_id: str, config: BoardConfig) -> bool:
        return any(self.task_path(c.id, task_id).exists() for c in config.columns)

    def unique_slug(self, base: str, config: BoardConfig, exclude: Optional[str] = None) -> str:
        """
        First of `base`, `base-2`, `base-3`, ... not used in any column.
        `exclude` is the id of the task being renamed and counts as free.
        """
        candidate = base
        n = 2
        while candidate != exclude and self.exists_anywhere(candidate, config):
            candidate = f"{base}-{n}"
            n += 1
        return candidate

    def find_by_id(self, task_id: str, config: BoardConfig) -> Optional[Tuple[Path, str]]:
        """Return (path, folder) of the task file, searching columns in order."""
        for column in config.columns:
            path = self.task_path(column.id, task_id)
            if path.exists():
                return path, column.id
        return None

    def _require(self, task_id: str, config: BoardConfig) -> Tuple[Path, str]:
        found = self.find_by_id(task_id, config)
        if found is None:
            raise NotFound("task not found")
        return found

    def get(self, task_id: str, config: BoardConfig) -> Task:
        path, folder = self._require(task_id, config)
        return read_task(path, folder)

    # ── Mutations ────────────────────────────────────────────────────────────

    def create(self, data: NewTaskInput, config: BoardConfig) -> Task:
        """Write a new task into `data.status` if it is a column, else the first column."""
        if data.status and config.has_column(data.status):
            folder = data.status
        else:
            folder = config.columns[0].id
        task_id = self.unique_slug(slugify(data.title), config)
        now = self.clock()
        task = Task(
            id=task_id,
            title=data.title,
            description=data.description or "",
            creator=data.creator or "",
            assigned_to=data.assigned_to or "",
            created_at=now,
            updated_at=now,
            status=folder,
            tags=list(data.tags or []),
            folder=folder,
        )
        write_task(self.task_path(folder, task_id), task)
        logger.info(f"Task created: {folder}/{task_id}")
        return task

    def update(self, task_id: str, data: UpdateTaskInput, config: BoardConfig) -> Task:
        """
        Apply a partial update. A title whose slug differs from the id renames
        the file first; if that rename fails nothing else is written.
        """
        path, folder = self._require(task_id, config)
        task = read_task(path, folder)

        if data.title is not None:
            new_slug = slugify(data.title)
            if new_slug != task.id:
                final_slug = self.unique_slug(new_slug, config, exclude=task.id)
                if final_slug != task.id:
                    new_path = self.task_path(folder, final_slug)
                    path.rename(new_path)
                    logger.info(f"Task renamed: {folder}/{task.id} -> {final_slug}")
                    path = new_path
                    task.id = final_slug
            task.title = data.title

        if data.description is not None:
            task.description = data.description
        if data.creator is not None:
            task.creator = data.creator
        if data.assigned_to is not None:
            task.assigned_to = data.assigned_to
        if data.tags is not None:
            task.tags = list(data.tags)
        task.updated_at = self.clock()
        write_task(path, task)
        return task

    def move(self, task_id: str, target: str, config: BoardConfig) -> Task:
        """Move a task file to another column; never overwrites."""
        if not config.has_column(target):
            raise InvalidFolder("invalid folder")
        path, folder = self._require(task_id, config)
        target_path = self.task_path(target, task_id)
        if target_path.exists():
            raise Conflict("target file exists")

        task = read_task(path, folder)
        path.rename(target_path)
        task.folder = target
        task.status = target
        task.updated_at = self.clock()
        write_task(target_path, task)
        logger.info(f"Task moved: {task_id} {folder} -> {target}")
        return task

    def delete(self, task_id: str, config: BoardConfig) -> None:
        path, folder = self._require(task_id, config)
        path.unlink()
        logger.info(f"Task deleted: {folder}/{task_id}")

    # ── Listing ──────────────────────────────────────────────────────────────

    def list_all(self, config: BoardConfig) -> Dict[str, List[Task]]:
        """Tasks per column, in config order. Unreadable files are skipped."""
        folders: Dict[str, List[Task]] = {}
        for column in config.columns:
            tasks = []
            directory = self.root / column.id
            if directory.is_dir():
                for path in sorted(directory.iterdir()):
                    if not path.is_file() or path.suffix != TASK_SUFFIX:
                        continue
                    try:
                        tasks.append(read_task(path, column.id))
                    except (ParseError, OSError) as e:
                        logger.warning(f"Skipping unreadable task file {path}: {e}")
            folders[column.id] = tasks
        return folders
