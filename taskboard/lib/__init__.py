"""
Core library for taskboard.

The document model, the file-backed task store, and the automation that
launches a worker when a task becomes ready.
"""

from taskboard.lib.document import (
    Document,
    DocumentConfig,
    Task,
    parse,
    serialize,
    patch_fields,
)
from taskboard.lib.store import TaskStore, NotFound, ValidationError, UpdateResult
from taskboard.lib.automation import should_trigger, trigger_automation

__all__ = [
    "Document",
    "DocumentConfig",
    "Task",
    "parse",
    "serialize",
    "patch_fields",
    "TaskStore",
    "NotFound",
    "ValidationError",
    "UpdateResult",
    "should_trigger",
    "trigger_automation",
]
