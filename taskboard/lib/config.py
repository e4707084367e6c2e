"""
Board configuration for taskboard.

A board is a directory holding TASKS.md, the settings file and the worker log.
File names can be overridden with an optional taskboard.env in that directory.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import envparse
from .settings import SETTINGS_FILENAME

logger = logging.getLogger(__name__)

ENV_FILENAME = "taskboard.env"
DEFAULT_TASKS_FILE = "TASKS.md"
DEFAULT_POLL_INTERVAL = 1.0
BOARD_DIR_ENV = "TASKBOARD_DIR"


@dataclass
class BoardConfig:
    """Resolved paths and timing for one board directory."""
    board_dir: Path  # base for relative paths (log file included)
    tasks_path: Path
    settings_path: Path
    poll_interval: float  # seconds between file-change checks


def get_board_dir() -> Path:
    """$TASKBOARD_DIR if set, else the current directory."""
    env_dir = os.environ.get(BOARD_DIR_ENV)
    return Path(env_dir).expanduser() if env_dir else Path.cwd()


def _resolve(board_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else board_dir / path


def load_board_config(board_dir: Path) -> BoardConfig:
    """Load taskboard.env (if any) and return BoardConfig."""
    board_dir = Path(board_dir)
    env_file = board_dir / ENV_FILENAME
    env = envparse.load_env(env_file) if env_file.exists() else {}

    raw_interval = env.get("POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))
    try:
        poll_interval = float(raw_interval)
        if poll_interval <= 0:
            raise ValueError(raw_interval)
    except ValueError:
        logger.warning(f"Invalid POLL_INTERVAL '{raw_interval}', using {DEFAULT_POLL_INTERVAL}")
        poll_interval = DEFAULT_POLL_INTERVAL

    return BoardConfig(
        board_dir=board_dir,
        tasks_path=_resolve(board_dir, env.get("TASKS_FILE", DEFAULT_TASKS_FILE)),
        settings_path=_resolve(board_dir, env.get("SETTINGS_FILE", SETTINGS_FILENAME)),
        poll_interval=poll_interval,
    )
