"""Tests for TOML configuration loading."""

from pathlib import Path

import pytest

from tmux_sessionizer.config_loader import (
    CONFIG_ENV_VAR,
    SESSION_WINDOW_OFFSET,
    SearchPath,
    deep_merge,
    default_config_path,
    load_config_from_path,
    parse_search_path,
)
from tmux_sessionizer.errors import ErrorType


def write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestParseSearchPath:
    def test_plain_path_inherits_depth(self, tmp_path):
        assert parse_search_path(str(tmp_path)) == SearchPath(tmp_path)

    def test_colon_depth(self, tmp_path):
        assert parse_search_path(f"{tmp_path}:3") == SearchPath(tmp_path, depth=3)

    def test_table_form(self, tmp_path):
        assert parse_search_path({"path": str(tmp_path), "depth": 2}) == SearchPath(tmp_path, depth=2)

    def test_tilde_is_expanded(self):
        assert parse_search_path("~/code").root == Path.home() / "code"

    @pytest.mark.parametrize("entry", ["/p:0", {"path": "/p", "depth": -1}, {"depth": 2}, 7, ""])
    def test_rejects_invalid(self, entry):
        with pytest.raises(ValueError):
            parse_search_path(entry)


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path):
        result = load_config_from_path(tmp_path / "absent.toml")

        assert result.is_ok()
        config = result.value
        assert config.max_depth == 1
        assert config.session_commands == ()
        assert config.session_window_offset == SESSION_WINDOW_OFFSET
        assert config.search_paths == (SearchPath(Path("~/").expanduser()),)

    def test_full_file(self, tmp_path):
        path = write(tmp_path / "c.toml", f"""
search_paths = ["{tmp_path}/a", "{tmp_path}/b:2"]
extra_search_paths = [{{ path = "{tmp_path}/c", depth = 4 }}]
max_depth = 3
session_commands = ["nvim .", "lazygit"]
session_window_offset = 80
pane_cache = "{tmp_path}/panes.cache"

[logging]
mode = "file"
file = "{tmp_path}/log.jsonl"
""")

        config = load_config_from_path(path).value

        assert config.search_paths == (
            SearchPath(tmp_path / "a"),
            SearchPath(tmp_path / "b", depth=2),
            SearchPath(tmp_path / "c", depth=4),
        )
        assert config.max_depth == 3
        assert config.session_commands == ("nvim .", "lazygit")
        assert config.session_window_offset == 80
        assert config.pane_cache_path == tmp_path / "panes.cache"
        assert config.log_mode == "file"
        assert config.log_file == tmp_path / "log.jsonl"

    def test_syntax_error_reports_line(self, tmp_path):
        path = write(tmp_path / "c.toml", "max_depth = 1\nsession_commands = [\n")

        result = load_config_from_path(path)

        assert result.is_err()
        assert result.error.error_type is ErrorType.PARSE_ERROR

    @pytest.mark.parametrize("body", [
        "max_depth = 0",
        "session_commands = [1, 2]",
        'search_paths = ["/p:0"]',
        'logging = { mode = "loud" }',
        'logging = "echo"',
        'logging = ["x"]',
        "session_window_offset = -1",
    ])
    def test_validation_errors(self, tmp_path, body):
        result = load_config_from_path(write(tmp_path / "c.toml", body + "\n"))

        assert result.is_err()
        assert result.error.error_type is ErrorType.VALIDATION_ERROR


def test_env_var_overrides_config_location(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "mine.toml"))

    assert default_config_path() == tmp_path / "mine.toml"


def test_deep_merge_keeps_nested_defaults():
    merged = deep_merge({"logging": {"mode": None, "file": None}}, {"logging": {"mode": "echo"}})

    assert merged == {"logging": {"mode": "echo", "file": None}}
