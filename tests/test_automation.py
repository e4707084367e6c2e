"""Tests for taskboard.lib.automation module."""

import sys
import time

import pytest
from dataclasses import replace
from unittest.mock import MagicMock, patch

from taskboard.lib.automation import (
    _observe,
    append_log,
    describe_exit,
    launch_detached,
    parse_command,
    should_trigger,
    trigger_automation,
)
from taskboard.lib.document import Task
from taskboard.lib.settings import AutomationSettings


@pytest.fixture
def transition():
    before = Task(id=3, title="Fix it", severity="HIGH", status="Backlog")
    return before, replace(before, status="To Do")


@pytest.fixture
def enabled():
    return AutomationSettings(autorun_enabled=True, worker_command="claude --verbose", log_path="runs.log")


def _mock_process(mock_popen, returncode=0, pid=4242):
    mock_popen.return_value.pid = pid
    mock_popen.return_value.wait.return_value = returncode
    return mock_popen.return_value


class TestShouldTrigger:
    """Tests for should_trigger."""

    def test_backlog_to_todo(self):
        assert should_trigger("Backlog", "To Do")

    def test_case_and_whitespace_insensitive(self):
        assert should_trigger(" backlog ", "TO DO")

    def test_other_transitions(self):
        assert not should_trigger("To Do", "To Do")
        assert not should_trigger("Backlog", "In Progress")
        assert not should_trigger("In Progress", "To Do")
        assert not should_trigger(None, "To Do")

    def test_labels_are_fixed(self):
        assert not should_trigger("Icebox", "Ready")
        assert not should_trigger("To Do", "Backlog")


class TestParseCommand:
    """Tests for parse_command."""

    def test_quoted_arguments(self):
        assert parse_command('claude --model "big one"') == ["claude", "--model", "big one"]

    def test_empty_uses_default(self):
        assert parse_command("") == ["claude"]
        assert parse_command(None) == ["claude"]

    def test_unbalanced_quote_falls_back(self, caplog):
        assert parse_command('claude "oops') == ["claude", '"oops']
        assert "Could not parse worker command" in caplog.text


class TestDescribeExit:
    """Tests for describe_exit."""

    def test_normal_exit(self):
        assert describe_exit(0) == "exit code=0 signal=none"
        assert describe_exit(2) == "exit code=2 signal=none"

    def test_killed_by_signal(self):
        assert describe_exit(-15) == "exit code=None signal=SIGTERM"


class TestAppendLog:
    """Tests for append_log."""

    def test_appends_timestamped_lines(self, tmp_path):
        log = tmp_path / "logs" / "runs.log"
        assert append_log(log, "first")
        assert append_log(log, "second")

        lines = log.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("[") and lines[0].endswith("] first")

    def test_unwritable_path_returns_false(self, tmp_path, caplog):
        assert append_log(tmp_path, "x") is False
        assert "Failed to write automation log" in caplog.text


class TestLaunchDetached:
    """Tests for launch_detached."""

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_spawns_in_new_session(self, mock_popen, tmp_path):
        _mock_process(mock_popen)
        process = launch_detached(["worker", "arg"], tmp_path / "runs.log")

        assert process is mock_popen.return_value
        args, kwargs = mock_popen.call_args
        assert args[0] == ["worker", "arg"]
        assert kwargs["start_new_session"] is True

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_spawn_failure_is_logged(self, mock_popen, tmp_path, caplog):
        mock_popen.side_effect = FileNotFoundError("No such file: 'worker'")
        log = tmp_path / "runs.log"

        assert launch_detached(["worker"], log) is None
        assert "spawn failed" in log.read_text()
        assert "Failed to start" in caplog.text

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_log_open_failure_skips_spawn(self, mock_popen, tmp_path, caplog):
        # A directory can't be opened for append
        assert launch_detached(["worker"], tmp_path) is None
        mock_popen.assert_not_called()
        assert "Unable to open automation log" in caplog.text


class TestObserve:
    """Tests for the exit observer."""

    def test_records_exit_code(self, tmp_path):
        process = MagicMock(pid=7)
        process.wait.return_value = 0
        log = tmp_path / "runs.log"

        _observe(process, log, "/do-task 3")
        assert "/do-task 3 exit code=0 signal=none" in log.read_text()

    def test_nonzero_exit_warns(self, tmp_path, caplog):
        process = MagicMock(pid=7)
        process.wait.return_value = -9
        log = tmp_path / "runs.log"

        _observe(process, log, "/do-task 3")
        assert "signal=SIGKILL" in log.read_text()
        assert "pid=7" in caplog.text


class TestTriggerAutomation:
    """Tests for trigger_automation."""

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_launches_worker_once(self, mock_popen, tmp_path, transition, enabled):
        _mock_process(mock_popen)
        before, after = transition

        process = trigger_automation(before, after, enabled, tmp_path)

        assert process is mock_popen.return_value
        mock_popen.assert_called_once()
        assert mock_popen.call_args[0][0] == ["claude", "--verbose", "/do-task", "3"]
        assert "launch /do-task 3 (Backlog -> To Do)" in (tmp_path / "runs.log").read_text()

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_disabled_does_nothing(self, mock_popen, tmp_path, transition):
        before, after = transition
        settings = AutomationSettings(autorun_enabled=False, log_path="runs.log")

        assert trigger_automation(before, after, settings, tmp_path) is None
        mock_popen.assert_not_called()
        assert not (tmp_path / "runs.log").exists()

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_other_transition_does_nothing(self, mock_popen, tmp_path, transition, enabled):
        before, _ = transition
        after = replace(before, status="In Progress")

        assert trigger_automation(before, after, enabled, tmp_path) is None
        mock_popen.assert_not_called()

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_already_ready_does_nothing(self, mock_popen, tmp_path, transition, enabled):
        _, after = transition

        assert trigger_automation(after, after, enabled, tmp_path) is None
        mock_popen.assert_not_called()

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_spawn_error_swallowed(self, mock_popen, tmp_path, transition, enabled):
        mock_popen.side_effect = PermissionError("denied")
        before, after = transition

        assert trigger_automation(before, after, enabled, tmp_path) is None
        assert "spawn failed: denied" in (tmp_path / "runs.log").read_text()

    @patch("taskboard.lib.automation.subprocess.Popen")
    def test_absolute_log_path(self, mock_popen, tmp_path, transition):
        _mock_process(mock_popen)
        log = tmp_path / "elsewhere" / "worker.log"
        settings = AutomationSettings(autorun_enabled=True, log_path=str(log))
        before, after = transition

        trigger_automation(before, after, settings, tmp_path / "board")
        assert log.exists()


class TestRealProcess:
    """Launches a real interpreter to check the log contract end to end."""

    def test_output_and_exit_line_logged(self, tmp_path):
        log = tmp_path / "runs.log"
        process = launch_detached([sys.executable, "-c", "print('hello from worker')"], log, label="probe")
        assert process is not None
        assert process.wait(timeout=30) == 0

        deadline = time.monotonic() + 10
        while "probe exit code=0" not in log.read_text() and time.monotonic() < deadline:
            time.sleep(0.05)

        content = log.read_text()
        assert "hello from worker" in content
        assert "probe exit code=0 signal=none" in content
