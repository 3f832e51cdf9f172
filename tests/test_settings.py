"""
Tests for server settings: YAML file, environment and command-line layering.
"""
import textwrap

import pytest

from taskboard.settings import ServerSettings, parse_bool, resolve_settings


class TestParseBool:

    @pytest.mark.parametrize("value", ["true", "1", "YES", "On", True])
    def test_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "OFF", False])
    def test_false(self, value):
        assert parse_bool(value) is False

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid boolean"):
            parse_bool("maybe")


def test_defaults():
    settings = resolve_settings([], environ={})
    assert settings.root == "./kanban_data"
    assert settings.port == 8787
    assert settings.auto_confirm is False
    assert settings.show_task_editor is True
    assert settings.show_board_editor is False
    assert settings.open_browser is False
    assert settings.open_browser_once is True


def test_yaml_file(tmp_path):
    path = tmp_path / "kanban.yaml"
    path.write_text(textwrap.dedent("""
        root: /srv/board
        port: 9000
        auto_confirm: "yes"
        show_board_editor: true
        unknown_key: ignored
    """))
    settings = ServerSettings.load(str(path))
    assert settings.root == "/srv/board"
    assert settings.port == 9000
    assert settings.auto_confirm is True
    assert settings.show_board_editor is True


def test_missing_yaml_file_uses_defaults(tmp_path):
    assert ServerSettings.load(str(tmp_path / "nope.yaml")) == ServerSettings()


@pytest.mark.parametrize("text", [
    "- root\n- port\n",
    "just a string\n",
    "port: http\n",
    "auto_confirm: maybe\n",
    "root: [unclosed\n",
])
def test_invalid_yaml_file_uses_defaults(tmp_path, text):
    path = tmp_path / "kanban.yaml"
    path.write_text(text)
    assert ServerSettings.load(str(path)) == ServerSettings()


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "kanban.yaml"
    path.write_text("root: /from/file\nport: 9000\n")
    settings = resolve_settings([], environ={
        "KANBAN_SETTINGS": str(path),
        "KANBAN_ROOT": "/from/env",
        "KANBAN_PORT": "9100",
    })
    assert settings.root == "/from/env"
    assert settings.port == 9100


def test_bad_port_env_ignored():
    assert resolve_settings([], environ={"KANBAN_PORT": "http"}).port == 8787


def test_command_line_overrides_environment():
    settings = resolve_settings(
        ["-t", "/from/cli", "-y", "--show-task-editor=false", "--show-board-editor=on",
         "--open-browser=1", "--open-browser-once=no", "--write-default-theme", "--port", "9200"],
        environ={"KANBAN_ROOT": "/from/env", "KANBAN_PORT": "9100"},
    )
    assert settings.root == "/from/cli"
    assert settings.auto_confirm is True
    assert settings.show_task_editor is False
    assert settings.show_board_editor is True
    assert settings.open_browser is True
    assert settings.open_browser_once is False
    assert settings.write_default_theme is True
    assert settings.port == 9200


def test_invalid_boolean_flag_exits():
    with pytest.raises(SystemExit):
        resolve_settings(["--show-task-editor=perhaps"], environ={})


def test_unknown_argument_exits():
    with pytest.raises(SystemExit):
        resolve_settings(["--bogus"], environ={})
