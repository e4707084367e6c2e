"""
Automation settings.

Stored as JSON next to the tasks file:
  <board_dir>/taskboard.config.json
"""

import json
import logging
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path

from taskboard.lib.validate import SchemaError, validate, validate_before_write

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "taskboard.config.json"
DEFAULT_WORKER_COMMAND = "claude"
DEFAULT_LOG_PATH = "claude-runs.log"


@dataclass
class AutomationSettings:
    autorun_enabled: bool = False
    worker_command: str = DEFAULT_WORKER_COMMAND  # shell-tokenized, extra args allowed
    log_path: str = DEFAULT_LOG_PATH  # relative paths resolve against the board dir


def load_settings(path: Path) -> AutomationSettings:
    """Load settings, falling back to defaults.

    A missing file is normal. A corrupt or invalid file is logged and ignored.
    """
    if not path.exists():
        return AutomationSettings()

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load settings from {path}: {e}")
        return AutomationSettings()

    if not isinstance(data, dict):
        logger.warning(f"Ignoring settings in {path}: expected an object")
        return AutomationSettings()

    known = {f.name for f in fields(AutomationSettings)}
    merged = asdict(AutomationSettings())
    merged.update({k: v for k, v in data.items() if k in known})

    try:
        validate(merged, "settings")
    except SchemaError as e:
        logger.warning(f"Ignoring invalid settings in {path}: {e}")
        return AutomationSettings()

    return AutomationSettings(**merged)


def save_settings(path: Path, settings: AutomationSettings) -> AutomationSettings:
    """Validate and write settings. Raises SchemaError on invalid data."""
    data = asdict(settings)
    validate_before_write(data, "settings", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")
    return settings


def update_settings(
    path: Path,
    autorun_enabled: bool | None = None,
    worker_command: str | None = None,
    log_path: str | None = None,
) -> AutomationSettings:
    """Apply partial changes and persist.

    Blank worker_command/log_path values keep the current value.
    """
    current = load_settings(path)
    changes = {}
    if autorun_enabled is not None:
        changes["autorun_enabled"] = bool(autorun_enabled)
    if worker_command is not None and worker_command.strip():
        changes["worker_command"] = worker_command.strip()
    if log_path is not None and log_path.strip():
        changes["log_path"] = log_path.strip()

    return save_settings(path, replace(current, **changes))


def resolve_log_path(settings: AutomationSettings, base_dir: Path) -> Path:
    target = Path(settings.log_path or DEFAULT_LOG_PATH).expanduser()
    return target if target.is_absolute() else base_dir / target
