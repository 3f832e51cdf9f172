"""
Operator decisions for the two interactive points of the board:

- creating a missing .workspace-kanban file
- disposing of a folder that still holds tasks but is no longer configured

ConsoleResolver prompts on stdin/stdout the way the server always has.
ScriptedResolver answers from a fixed table, for tests and unattended runs.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .schema import Column


class Action(Enum):
    DELETE = "delete"
    MOVE = "move"
    ABORT = "abort"


@dataclass
class Decision:
    """What to do with an orphan folder. `target` is set for MOVE."""
    action: Action
    target: Optional[str] = None
    reason: str = ""

    @classmethod
    def delete(cls) -> "Decision":
        return cls(Action.DELETE)

    @classmethod
    def move_to(cls, column_id: str) -> "Decision":
        return cls(Action.MOVE, target=column_id)

    @classmethod
    def abort(cls, reason: str = "") -> "Decision":
        return cls(Action.ABORT, reason=reason)


class ConsoleResolver:
    """Blocking prompts on the server console."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.read = read
        self.write = write

    def confirm_create_config(self, root: Path, filename: str) -> bool:
        self.write(f"Missing {filename} in {root}.")
        answer = self.read("Create default board file? [y/N] ").strip().lower()
        return answer in ("y", "yes")

    def decide(self, folder: str, task_count: int, columns: List[Column]) -> Decision:
        self.write(
            f"Folder '{folder}' is not in the board config "
            f"but contains {task_count} task(s)."
        )
        self.write("Choose action: [d]elete tasks, [m]ove tasks, [a]bort")
        answer = self.read("> ").strip().lower()
        if answer in ("d", "delete"):
            return Decision.delete()
        if answer in ("m", "move"):
            self.write("Move to which folder?")
            for index, column in enumerate(columns, start=1):
                self.write(f"  {index}) {column.title} ({column.id})")
            choice = self.read("> ").strip()
            idx = int(choice) if choice.isdigit() else 0
            if idx == 0 or idx > len(columns):
                return Decision.abort("Invalid move target")
            return Decision.move_to(columns[idx - 1].id)
        return Decision.abort()


class ScriptedResolver:
    """
    Answers from a fixed table instead of prompting.

    `decisions` is either one Decision used for every folder or a mapping of
    folder name -> Decision; folders missing from the mapping abort.
    Every question asked is recorded in `asked`.
    """

    def __init__(
        self,
        decisions: Union[Decision, Dict[str, Decision], None] = None,
        create_config: bool = False,
    ):
        self.decisions = decisions
        self.create_config = create_config
        self.asked: List[str] = []

    def confirm_create_config(self, root: Path, filename: str) -> bool:
        self.asked.append(filename)
        return self.create_config

    def decide(self, folder: str, task_count: int, columns: List[Column]) -> Decision:
        self.asked.append(folder)
        if isinstance(self.decisions, Decision):
            return self.decisions
        if self.decisions and folder in self.decisions:
            return self.decisions[folder]
        return Decision.abort()
