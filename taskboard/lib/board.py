"""
Task board service.

The boundaries the CLI and any other front end talk to: read, mutate,
create/delete, label edits and settings. Each mutation publishes a refresh
and task updates feed the worker automation.
"""

import logging
import re

from taskboard.lib import automation
from taskboard.lib.config import BoardConfig
from taskboard.lib.notifier import ChangeNotifier
from taskboard.lib.settings import AutomationSettings, load_settings, update_settings
from taskboard.lib.store import TaskStore, UpdateResult

logger = logging.getLogger(__name__)

# Titles edited in a UI often come back with the "<id>. " prefix still on
LEADING_ID_RE = re.compile(r'^\s*\d+\.\s*')


DEFAULT_COLUMNS = ("Backlog", "To Do", "In Progress", "Blocked", "Done")


def clean_title(title: str) -> str:
    return LEADING_ID_RE.sub("", str(title)).strip()


def group_by_status(tasks: list[dict]) -> dict[str, list[dict]]:
    """Bucket task dicts by their status, keeping document order."""
    groups: dict[str, list[dict]] = {}
    for task in tasks:
        groups.setdefault(task.get("status") or automation.READY_STATUS, []).append(task)
    return groups


def column_order(statuses: list[str], groups: dict[str, list[dict]]) -> list[str]:
    """Declared statuses (or the defaults), then any undeclared ones in use."""
    columns = list(statuses) if statuses else list(DEFAULT_COLUMNS)
    columns.extend(s for s in groups if s not in columns)
    return columns


class TaskBoard:
    def __init__(self, config: BoardConfig, notifier: ChangeNotifier | None = None):
        self.config = config
        self.store = TaskStore(config.tasks_path)
        self.notifier = notifier or ChangeNotifier()

    def snapshot(self) -> dict:
        """All tasks plus declared labels, as plain data."""
        doc = self.store.read()
        return {
            "tasks": [t.to_dict() for t in doc.tasks],
            "meta": {
                "statuses": list(doc.config.statuses),
                "severities": list(doc.config.severities),
            },
        }

    def update_task(self, task_id: int, updates: dict) -> UpdateResult:
        """Apply a partial update, notify, then run automation.

        Automation problems are logged only; the update is already on disk.
        """
        updates = dict(updates)
        if "title" in updates:
            updates["title"] = clean_title(updates["title"])

        result = self.store.update(task_id, updates)
        self.notifier.publish()

        try:
            automation.trigger_automation(
                result.before,
                result.after,
                self.get_settings(),
                self.config.board_dir,
            )
        except Exception:
            logger.exception(f"Automation failed for task {task_id}")
        return result

    def create_task(self, fields: dict) -> int:
        task_id = self.store.create(fields)
        self.notifier.publish()
        return task_id

    def delete_task(self, task_id: int) -> None:
        self.store.delete(task_id)
        self.notifier.publish()

    def set_labels(self, statuses: list[str] | None = None, severities: list[str] | None = None):
        config = self.store.update_config(statuses=statuses, severities=severities)
        self.notifier.publish()
        return config

    def get_settings(self) -> AutomationSettings:
        return load_settings(self.config.settings_path)

    def set_settings(self, **changes) -> AutomationSettings:
        return update_settings(self.config.settings_path, **changes)
