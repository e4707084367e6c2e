"""
Task store backed by a single TASKS.md document.

Every mutation is a full read-modify-write of the file. There is no locking:
concurrent writers race and the last write wins. Full rewrites keep blocks
the parser skipped in their original position.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from taskboard.lib import document
from taskboard.lib.document import Document, DocumentConfig, Task

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "Backlog"
FALLBACK_SEVERITY = "MEDIUM"
PREFERRED_SEVERITY = "medium"

UPDATABLE_FIELDS = ("title", "severity", "status", "description")
# Fields that can be written with a targeted patch instead of a full rewrite
PATCHABLE_FIELDS = {"severity", "status"}


class NotFound(LookupError):
    """Task id (or the document itself) does not exist."""


class ValidationError(ValueError):
    """Rejected input; the document was not touched."""


@dataclass
class UpdateResult:
    before: Task
    after: Task


def _clean_single_line(name: str, value) -> str:
    text = str(value if value is not None else "").strip()
    if not text:
        raise ValidationError(f"{name} is required")
    if "\n" in text or "\r" in text:
        raise ValidationError(f"{name} must be a single line")
    return text


def _clean_label(name: str, value) -> str:
    """Single-line label value that reads back unchanged (no | or :)."""
    text = _clean_single_line(name, value)
    if any(ch in text for ch in document.VALUE_DELIMITERS):
        raise ValidationError(f"{name} must not contain any of {' '.join(document.VALUE_DELIMITERS)}")
    return text


def default_severity(config: DocumentConfig) -> str:
    """Configured label matching 'medium', else the first one, else MEDIUM."""
    for label in config.severities:
        if label.lower() == PREFERRED_SEVERITY:
            return label
    if config.severities:
        return config.severities[0]
    return FALLBACK_SEVERITY


class TaskStore:
    def __init__(self, tasks_path: str | Path):
        self.tasks_path = Path(tasks_path)

    def _read_text(self) -> str:
        try:
            return self.tasks_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFound(f"Tasks file not found: {self.tasks_path}") from None
        except UnicodeDecodeError as e:
            raise OSError(f"Cannot decode {self.tasks_path}: {e}") from None

    def _write_text(self, content: str) -> None:
        self.tasks_path.write_text(content, encoding="utf-8")

    def _rewrite(self, doc: Document, transform, extra: list[Task] | None = None) -> None:
        """Serialize doc with transform applied to each task (None drops it)."""
        blocks: list[Task | str] = []
        for block in doc.blocks:
            if isinstance(block, document.SkippedBlock):
                blocks.append(block.text)
                continue
            task = transform(block.task)
            if task is not None:
                blocks.append(task)
        blocks.extend(extra or [])
        self._write_text(document.serialize_blocks(doc.front_matter, blocks))

    def read(self) -> Document:
        """Load and parse the document.

        Raises:
            NotFound: if the file does not exist
            OSError: if the file cannot be read
        """
        return document.parse(self._read_text())

    def get(self, task_id: int) -> Task:
        task = self.read().find(task_id)
        if task is None:
            raise NotFound(f"Task {task_id} not found")
        return task

    def update(self, task_id: int, updates: dict) -> UpdateResult:
        """Merge field updates into one task and persist.

        Only Severity/Status changes are patched in place; a title or
        description change rewrites the whole document.
        """
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        changes = {}
        for name, value in updates.items():
            if name == "description":
                changes[name] = str(value or "").strip("\n")
            elif name == "title":
                changes[name] = _clean_single_line(name, value)
            else:
                changes[name] = _clean_label(name, value)

        original = self._read_text()
        doc = document.parse(original)
        before = doc.find(task_id)
        if before is None:
            raise NotFound(f"Task {task_id} not found")

        after = replace(before, **changes)
        changed = {name for name in changes if getattr(before, name) != getattr(after, name)}
        if not changed:
            logger.debug(f"Task {task_id}: update is a no-op, not writing")
            return UpdateResult(before=before, after=after)

        if changed <= PATCHABLE_FIELDS:
            self._write_text(document.patch_fields(original, [after]))
        else:
            self._rewrite(doc, lambda t: after if t is before else t)
        logger.info(f"Task {task_id} updated: {', '.join(sorted(changed))}")
        return UpdateResult(before=before, after=after)

    def create(self, fields: dict) -> int:
        """Append a new task and return its id (max existing id + 1)."""
        title = str(fields.get("title") or "").strip()
        if not title:
            raise ValidationError("Title is required")
        title = _clean_single_line("title", title)

        doc = self.read()
        severity = str(fields.get("severity") or "").strip()
        status = str(fields.get("status") or "").strip()
        task = Task(
            id=doc.max_id + 1,
            title=title,
            severity=_clean_label("severity", severity) if severity else default_severity(doc.config),
            status=_clean_label("status", status) if status else DEFAULT_STATUS,
            description=str(fields.get("description") or "").strip(),
        )

        self._rewrite(doc, lambda t: t, extra=[task])
        logger.info(f"Task {task.id} created: {task.title}")
        return task.id

    def delete(self, task_id: int) -> None:
        """Remove one task block. Remaining ids are left as they are."""
        doc = self.read()
        if doc.find(task_id) is None:
            raise NotFound(f"Task {task_id} not found")

        self._rewrite(doc, lambda t: None if t.id == task_id else t)
        logger.info(f"Task {task_id} deleted")

    def update_config(
        self,
        statuses: list[str] | None = None,
        severities: list[str] | None = None,
    ) -> DocumentConfig:
        """Edit the front matter label lists; the task body is not touched."""
        original = document.normalize_newlines(self._read_text())
        front_matter, _ = document.split_front_matter(original)
        new_front_matter = document.set_front_matter_lists(front_matter, statuses, severities)

        body = original[len(front_matter):]
        if not front_matter and body.startswith("\n"):
            body = body[1:]
        self._write_text(new_front_matter + body)
        return document.parse_front_matter(new_front_matter)
