"""
Folder reconciliation.

Keeps the directories under the board root in line with the board config:
every configured column gets a folder, and every other folder is disposed
of. Empty orphans are removed silently; orphans holding tasks are either
refused (auto-confirm mode) or handed to the resolver for a decision.

Runs on every config-dependent request, so it only ever looks at the
current directory listing.
"""
import logging
import shutil
from pathlib import Path
from typing import List

from .codec import TASK_SUFFIX, read_task, write_task
from .config import CONFIG_FILE, load_config
from .errors import Aborted, ParseError, UnresolvedOrphan
from .resolver import Action, Decision
from .schema import BoardConfig, utc_now

logger = logging.getLogger(__name__)

IGNORED_DIRS = {".git"}


def ensure_folders(root: Path, config: BoardConfig) -> None:
    root = Path(root)
    for column in config.columns:
        folder = root / column.id
        if not folder.is_dir():
            folder.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created column folder: {folder}")


def task_files(folder: Path) -> List[Path]:
    return sorted(p for p in Path(folder).iterdir() if p.is_file() and p.suffix == TASK_SUFFIX)


def find_orphans(root: Path, config: BoardConfig) -> List[Path]:
    allowed = set(config.column_ids())
    return sorted(
        entry for entry in Path(root).iterdir()
        if entry.is_dir() and entry.name not in IGNORED_DIRS and entry.name not in allowed
    )


def reconcile(root: Path, config: BoardConfig, auto_confirm: bool, resolver=None, clock=utc_now) -> None:
    """
    Create missing column folders and dispose of unconfigured ones.

    Raises UnresolvedOrphan when an orphan holds tasks and `auto_confirm`
    is set, Aborted when the resolver (or its absence) aborts.
    """
    root = Path(root)
    ensure_folders(root, config)

    for orphan in find_orphans(root, config):
        tasks = task_files(orphan)
        if not tasks:
            shutil.rmtree(orphan)
            logger.info(f"Removed empty unconfigured folder: {orphan.name}")
            continue
        if auto_confirm:
            raise UnresolvedOrphan(
                f"Folder '{orphan.name}' has tasks but is not in {CONFIG_FILE}; "
                f"run without -y to resolve"
            )
        if resolver is None:
            raise Aborted(f"Folder '{orphan.name}' has tasks and no resolver is available")
        decision = resolver.decide(orphan.name, len(tasks), list(config.columns))
        apply_decision(root, orphan, tasks, decision, config, clock)


def apply_decision(root: Path, orphan: Path, tasks: List[Path], decision: Decision,
                   config: BoardConfig, clock=utc_now) -> None:
    """
    Carry out `decision` one task file at a time; the orphan folder is
    removed only once every task file in it has been deleted or moved.
    A move checks every destination first and aborts before touching
    anything if one is taken.
    """
    if decision.action == Action.DELETE:
        for path in tasks:
            path.unlink()
        shutil.rmtree(orphan)
        logger.info(f"Deleted {len(tasks)} task(s) and folder '{orphan.name}'")
        return

    if decision.action == Action.MOVE:
        target = decision.target
        if not target or not config.has_column(target):
            raise Aborted(f"Invalid move target: {target}")
        target_dir = Path(root) / target
        target_dir.mkdir(parents=True, exist_ok=True)
        taken = [path.name for path in tasks if (target_dir / path.name).exists()]
        if taken:
            raise Aborted(
                f"Cannot move '{orphan.name}' to '{target}': {', '.join(taken)} already exist(s) there"
            )
        for path in tasks:
            dest = target_dir / path.name
            path.rename(dest)
            try:
                task = read_task(dest, target)
            except ParseError as e:
                logger.warning(f"Moved {dest} but could not rewrite its header: {e}")
                continue
            task.folder = target
            task.status = target
            task.updated_at = clock()
            write_task(dest, task)
        shutil.rmtree(orphan)
        logger.info(f"Moved {len(tasks)} task(s) from '{orphan.name}' to '{target}'")
        return

    raise Aborted(decision.reason or "Aborted")


def refresh_config(root: Path, auto_confirm: bool, resolver=None, clock=utc_now) -> BoardConfig:
    """Load the board config and reconcile folders against it."""
    config = load_config(root, auto_confirm, resolver)
    reconcile(root, config, auto_confirm, resolver, clock)
    return config
