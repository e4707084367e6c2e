"""
Worker automation for taskboard.

When a task moves from the not-started status to the ready status and
autorun is enabled, the configured worker command is launched as:

    <worker_command...> /do-task <task id>

LAUNCH CONTRACT
===============
The child is fire-and-forget. It runs in its own session with stdout and
stderr appended to the automation log. The caller never waits on it: a
daemon observer thread records the exit code and signal in the log. There
is no backpressure (every qualifying update launches a new worker) and no
cancellation (a running worker can only be stopped from outside).

Failures to open the log or to start the process are logged and swallowed.
They never fail the task update that triggered them.

The observer is a daemon thread, so it only outlives the launch in a
long-running process (tb watch). After a one-shot call such as `tb set` the
worker keeps running in its own session, but no exit line is written for it.
"""

import logging
import shlex
import signal
import subprocess
import threading
from datetime import datetime
from pathlib import Path

from taskboard.lib.document import Task
from taskboard.lib.settings import (
    AutomationSettings,
    DEFAULT_WORKER_COMMAND,
    resolve_log_path,
)

logger = logging.getLogger(__name__)

NOT_STARTED_STATUS = "Backlog"
READY_STATUS = "To Do"
WORKER_SUBCOMMAND = "/do-task"


def _normalize_status(status: str | None) -> str:
    return str(status or "").strip().lower()


def should_trigger(before_status: str | None, after_status: str | None) -> bool:
    """True only for the Backlog -> To Do move (case-insensitive)."""
    return (
        _normalize_status(before_status) == _normalize_status(NOT_STARTED_STATUS)
        and _normalize_status(after_status) == _normalize_status(READY_STATUS)
    )


def parse_command(value: str | None) -> list[str]:
    """Split a worker command line into argv.

    Quoted segments are kept together. An empty value gives the default
    worker binary.
    """
    text = str(value or "").strip()
    try:
        parts = shlex.split(text)
    except ValueError as e:
        logger.warning(f"Could not parse worker command {text!r} ({e}); splitting on whitespace")
        parts = text.split()
    return parts or [DEFAULT_WORKER_COMMAND]


def _timestamp() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def append_log(log_path: Path, message: str) -> bool:
    """Append a timestamped line to the automation log. Best effort."""
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(f"[{_timestamp()}] {message}\n")
        return True
    except OSError as e:
        logger.warning(f"Failed to write automation log {log_path}: {e}")
        return False


def describe_exit(returncode: int) -> str:
    """Format a Popen return code as 'exit code=N signal=NAME'."""
    if returncode < 0:
        try:
            sig_name = signal.Signals(-returncode).name
        except ValueError:
            sig_name = str(-returncode)
        return f"exit code=None signal={sig_name}"
    return f"exit code={returncode} signal=none"


def _observe(process: subprocess.Popen, log_path: Path, label: str) -> None:
    returncode = process.wait()
    summary = describe_exit(returncode)
    append_log(log_path, f"{label} {summary}")
    if returncode == 0:
        logger.info(f"{label} pid={process.pid} {summary}")
    else:
        logger.warning(f"{label} pid={process.pid} {summary}")


def launch_detached(cmd: list[str], log_path: Path, label: str = "worker") -> subprocess.Popen | None:
    """Start cmd in the background with output appended to log_path.

    Returns the Popen, or None if the log could not be opened or the process
    could not be started. Never raises OSError and never waits on the child.
    """
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_file = open(log_path, "ab")
    except OSError as e:
        logger.error(f"Unable to open automation log {log_path}: {e}")
        append_log(log_path, f"log open failed: {e}")
        return None

    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=log_file,
            stderr=subprocess.STDOUT,
            # Don't let the worker die with (or block) the parent
            start_new_session=True,
        )
    except (OSError, ValueError) as e:
        logger.error(f"Failed to start {label} ({cmd[0]}): {e}")
        append_log(log_path, f"spawn failed: {e}")
        return None
    finally:
        # The child holds its own descriptor
        log_file.close()

    observer = threading.Thread(
        target=_observe,
        args=(process, log_path, label),
        name=f"{label}-observer-{process.pid}",
        daemon=True,
    )
    observer.start()
    return process


def trigger_automation(
    before: Task,
    after: Task,
    settings: AutomationSettings,
    base_dir: Path,
) -> subprocess.Popen | None:
    """Launch the worker if this update is a qualifying transition.

    Returns the launched process, or None when nothing was started.
    """
    if not settings.autorun_enabled:
        return None
    if not should_trigger(before.status, after.status):
        return None

    argv = parse_command(settings.worker_command)
    cmd = argv + [WORKER_SUBCOMMAND, str(after.id)]
    log_path = resolve_log_path(settings, base_dir)
    label = f"{WORKER_SUBCOMMAND} {after.id}"

    append_log(log_path, f"launch {label} ({before.status} -> {after.status})")
    process = launch_detached(cmd, log_path, label=label)
    if process is not None:
        logger.info(f"Spawned {argv[0]} for #{after.id} ({before.status} -> {after.status}) pid={process.pid}")
    return process
