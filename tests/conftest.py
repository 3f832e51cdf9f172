"""Shared fixtures for the task board tests."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the project root (kanban_server, taskboard) importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.config import load_config, write_config  # noqa: E402
from taskboard.schema import BoardConfig, Column  # noqa: E402
from taskboard.store import TaskStore  # noqa: E402


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> str:
        self.now += timedelta(seconds=1)
        return self.now.isoformat(timespec="microseconds")


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def board_root(tmp_path):
    """Board root with the default four columns configured and created."""
    root = tmp_path / "board"
    root.mkdir()
    config = load_config(root, auto_confirm=True)
    for column in config.columns:
        (root / column.id).mkdir()
    return root


@pytest.fixture
def config(board_root):
    return load_config(board_root, auto_confirm=True)


@pytest.fixture
def store(board_root, clock):
    return TaskStore(board_root, clock=clock)


def write_board(root: Path, *column_ids: str) -> BoardConfig:
    """Write a config with the given column ids (title = id)."""
    config = BoardConfig(columns=[Column(id=c, title=c) for c in column_ids])
    write_config(root, config)
    return config


@pytest.fixture
def make_board():
    return write_board
