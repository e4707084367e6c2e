"""Tests for board config loading and env parsing."""

import pytest
from unittest.mock import patch

from taskboard.lib.config import BOARD_DIR_ENV, get_board_dir, load_board_config
from taskboard.lib.envparse import load_env, parse_env


class TestLoadBoardConfig:
    """Tests for load_board_config."""

    def test_defaults_without_env_file(self, tmp_path):
        config = load_board_config(tmp_path)
        assert config.board_dir == tmp_path
        assert config.tasks_path == tmp_path / "TASKS.md"
        assert config.settings_path == tmp_path / "taskboard.config.json"
        assert config.poll_interval == 1.0

    def test_env_file_overrides(self, tmp_path):
        (tmp_path / "taskboard.env").write_text(
            "TASKS_FILE=docs/TODO.md\n"
            "SETTINGS_FILE=/etc/taskboard.json\n"
            "POLL_INTERVAL=0.5\n"
        )
        config = load_board_config(tmp_path)
        assert config.tasks_path == tmp_path / "docs" / "TODO.md"
        assert str(config.settings_path) == "/etc/taskboard.json"
        assert config.poll_interval == 0.5

    @patch("taskboard.lib.config.envparse.load_env")
    def test_invalid_interval_uses_default(self, mock_load_env, tmp_path, caplog):
        (tmp_path / "taskboard.env").write_text("")
        mock_load_env.return_value = {"POLL_INTERVAL": "soon"}
        config = load_board_config(tmp_path)
        assert config.poll_interval == 1.0
        assert "Invalid POLL_INTERVAL 'soon'" in caplog.text

    @patch("taskboard.lib.config.envparse.load_env")
    def test_non_positive_interval_uses_default(self, mock_load_env, tmp_path, caplog):
        (tmp_path / "taskboard.env").write_text("")
        mock_load_env.return_value = {"POLL_INTERVAL": "0"}
        assert load_board_config(tmp_path).poll_interval == 1.0
        assert "Invalid POLL_INTERVAL '0'" in caplog.text

    def test_unsafe_env_file_raises(self, tmp_path):
        (tmp_path / "taskboard.env").write_text("TASKS_FILE=$(rm -rf /)\n")
        with pytest.raises(ValueError, match="Forbidden pattern"):
            load_board_config(tmp_path)


class TestGetBoardDir:
    """Tests for get_board_dir."""

    def test_uses_env_var(self, tmp_path, monkeypatch):
        monkeypatch.setenv(BOARD_DIR_ENV, str(tmp_path))
        assert get_board_dir() == tmp_path

    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.delenv(BOARD_DIR_ENV, raising=False)
        monkeypatch.chdir(tmp_path)
        assert get_board_dir() == tmp_path


class TestParseEnv:
    """Tests for parse_env and load_env."""

    def test_basic_pairs(self):
        env = parse_env("# comment\n\nTASKS_FILE=TASKS.md\nexport POLL_INTERVAL=2\n")
        assert env == {"TASKS_FILE": "TASKS.md", "POLL_INTERVAL": "2"}

    def test_quotes_stripped(self):
        assert parse_env('TASKS_FILE="my tasks.md"\n') == {"TASKS_FILE": "my tasks.md"}
        assert parse_env("TASKS_FILE='x.md'\n") == {"TASKS_FILE": "x.md"}

    def test_missing_equals(self):
        with pytest.raises(ValueError, match="no '='"):
            parse_env("TASKS_FILE\n")

    def test_invalid_key(self):
        with pytest.raises(ValueError, match="Invalid key"):
            parse_env("tasks_file=x\n")

    @pytest.mark.parametrize("value", ["`id`", "${HOME}", "a;b", "a && b", "a | b"])
    def test_forbidden_patterns(self, value):
        with pytest.raises(ValueError, match="Forbidden pattern"):
            parse_env(f"TASKS_FILE={value}\n")

    def test_load_env_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_env(tmp_path / "taskboard.env")
