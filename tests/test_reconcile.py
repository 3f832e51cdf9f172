"""
Tests for folder reconciliation: column folders, orphan folders, resolver
decisions and the refresh_config() prologue.
"""
import pytest

from taskboard.codec import read_task
from taskboard.config import load_config
from taskboard.errors import Aborted, UnresolvedOrphan
from taskboard.reconcile import ensure_folders, find_orphans, reconcile, refresh_config
from taskboard.resolver import ConsoleResolver, Decision, ScriptedResolver


def snapshot(root):
    """Every path under root with file contents, for no-change assertions."""
    return {
        str(p.relative_to(root)): (p.read_bytes() if p.is_file() else None)
        for p in sorted(root.rglob("*"))
    }


def add_orphan(root, name, *task_ids):
    folder = root / name
    folder.mkdir()
    for task_id in task_ids:
        (folder / f"{task_id}.md").write_text(f"status: {name}\ntitle: {task_id}\n\nbody of {task_id}\n")
    return folder


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Column folders
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_ensure_folders_creates_all_columns(tmp_path, make_board):
    config = make_board(tmp_path, "todo", "doing", "done")
    ensure_folders(tmp_path, config)
    ensure_folders(tmp_path, config)
    assert sorted(p.name for p in tmp_path.iterdir() if p.is_dir()) == ["doing", "done", "todo"]


def test_reconcile_is_idempotent(board_root, config):
    add_orphan(board_root, "empty_orphan")
    reconcile(board_root, config, auto_confirm=True)
    before = snapshot(board_root)
    reconcile(board_root, config, auto_confirm=True)
    assert snapshot(board_root) == before


def test_git_directory_ignored(board_root, config):
    (board_root / ".git").mkdir()
    (board_root / ".git" / "HEAD.md").write_text("ref")
    reconcile(board_root, config, auto_confirm=True)
    assert (board_root / ".git" / "HEAD.md").exists()
    assert find_orphans(board_root, config) == []


def test_plain_files_in_root_ignored(board_root, config):
    (board_root / "notes.md").write_text("loose file")
    reconcile(board_root, config, auto_confirm=True)
    assert (board_root / "notes.md").exists()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Orphans
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@pytest.mark.parametrize("auto_confirm", [True, False])
def test_empty_orphan_removed_in_any_mode(board_root, config, auto_confirm):
    orphan = add_orphan(board_root, "old_column")
    (orphan / "readme.txt").write_text("not a task")
    resolver = ScriptedResolver()
    reconcile(board_root, config, auto_confirm=auto_confirm, resolver=resolver)
    assert not orphan.exists()
    assert resolver.asked == []


def test_auto_confirm_refuses_orphan_with_tasks(board_root, config):
    add_orphan(board_root, "old_column", "keep-me")
    before = snapshot(board_root)
    with pytest.raises(UnresolvedOrphan, match="old_column"):
        reconcile(board_root, config, auto_confirm=True)
    assert snapshot(board_root) == before


def test_delete_decision(board_root, config):
    orphan = add_orphan(board_root, "old_column", "one", "two")
    resolver = ScriptedResolver(Decision.delete())
    reconcile(board_root, config, auto_confirm=False, resolver=resolver)
    assert resolver.asked == ["old_column"]
    assert not orphan.exists()
    assert not any(board_root.rglob("one.md"))


def test_move_decision_rewrites_tasks(board_root, config, clock):
    orphan = add_orphan(board_root, "old_column", "one", "two")
    resolver = ScriptedResolver({"old_column": Decision.move_to("planned")})
    reconcile(board_root, config, auto_confirm=False, resolver=resolver, clock=clock)

    assert not orphan.exists()
    for task_id in ("one", "two"):
        path = board_root / "planned" / f"{task_id}.md"
        assert "status: planned" in path.read_text()
        task = read_task(path, "planned")
        assert task.folder == task.status == "planned"
        assert task.updated_at.startswith("2024-01-01T09:00")
        assert task.description == f"body of {task_id}"


def test_move_decision_conflict_moves_nothing(board_root, config):
    orphan = add_orphan(board_root, "old_column", "alpha", "dup")
    (board_root / "done" / "dup.md").write_text("title: existing\n\n")
    before = snapshot(board_root)
    resolver = ScriptedResolver(Decision.move_to("done"))
    with pytest.raises(Aborted, match="dup.md") as excinfo:
        reconcile(board_root, config, auto_confirm=False, resolver=resolver)
    assert excinfo.value.status_code == 500
    assert snapshot(board_root) == before
    assert (orphan / "alpha.md").exists()
    assert not (board_root / "done" / "alpha.md").exists()


def test_move_to_unknown_column_aborts(board_root, config):
    orphan = add_orphan(board_root, "old_column", "one")
    with pytest.raises(Aborted):
        reconcile(board_root, config, auto_confirm=False, resolver=ScriptedResolver(Decision.move_to("nope")))
    assert (orphan / "one.md").exists()


def test_abort_decision(board_root, config):
    orphan = add_orphan(board_root, "old_column", "one")
    with pytest.raises(Aborted):
        reconcile(board_root, config, auto_confirm=False, resolver=ScriptedResolver(Decision.abort()))
    assert (orphan / "one.md").exists()


def test_no_resolver_aborts(board_root, config):
    add_orphan(board_root, "old_column", "one")
    with pytest.raises(Aborted):
        reconcile(board_root, config, auto_confirm=False)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Console resolver
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestConsoleResolver:

    def make(self, *answers):
        replies = iter(answers)
        output = []
        return ConsoleResolver(read=lambda prompt: next(replies), write=output.append), output

    def test_delete(self, config):
        resolver, output = self.make("d")
        assert resolver.decide("old", 2, config.columns) == Decision.delete()
        assert "contains 2 task(s)" in output[0]

    def test_move_by_number(self, config):
        resolver, output = self.make("m", "3")
        assert resolver.decide("old", 1, config.columns) == Decision.move_to("in_progress")
        assert "  3) In Progress (in_progress)" in output

    @pytest.mark.parametrize("choice", ["0", "9", "x"])
    def test_move_bad_number_aborts(self, config, choice):
        resolver, _ = self.make("move", choice)
        assert resolver.decide("old", 1, config.columns).action.value == "abort"

    def test_anything_else_aborts(self, config):
        resolver, _ = self.make("")
        assert resolver.decide("old", 1, config.columns) == Decision.abort()

    @pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("", False), ("n", False)])
    def test_confirm_create_config(self, tmp_path, answer, expected):
        resolver, _ = self.make(answer)
        assert resolver.confirm_create_config(tmp_path, ".workspace-kanban") is expected


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# refresh_config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_refresh_config_bootstraps_empty_root(tmp_path):
    root = tmp_path / "fresh"
    config = refresh_config(root, auto_confirm=True)
    assert config.column_ids() == ["backlog", "planned", "in_progress", "done"]
    assert all((root / c).is_dir() for c in config.column_ids())


def test_refresh_config_follows_config_edits(board_root):
    (board_root / ".workspace-kanban").write_text("backlog: Backlog\nreview: Review\n")
    config = refresh_config(board_root, auto_confirm=True)
    assert config.column_ids() == ["backlog", "review"]
    assert (board_root / "review").is_dir()
    assert not (board_root / "planned").exists()
    assert load_config(board_root, auto_confirm=True).column_ids() == ["backlog", "review"]
