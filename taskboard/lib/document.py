"""
TASKS.md document model.

Parses the front matter and task blocks into Task records, serializes them
back, and patches single Severity/Status lines in place.
"""

import logging
import re
import textwrap
from dataclasses import dataclass, field, asdict

logger = logging.getLogger(__name__)

SEPARATOR = "---"
INDENT = "    "

UNKNOWN_SEVERITY = "UNKNOWN"
DEFAULT_PARSED_STATUS = "To Do"

TITLE_RE = re.compile(r'^(\d+)\.\s+(.*)$')
FRONT_MATTER_KEY_RE = re.compile(r'^\s*(statuses|severities)\s*:\s*(.*)$', re.IGNORECASE)
# Characters that end a label value; anything after them is an inline annotation.
VALUE_DELIMITERS = "|:"


@dataclass
class Task:
    id: int
    title: str
    severity: str
    status: str
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DocumentConfig:
    """Labels declared in the front matter. Not enforced on tasks."""
    statuses: list[str] = field(default_factory=list)
    severities: list[str] = field(default_factory=list)


@dataclass
class ParsedBlock:
    task: Task
    start_line: int  # 0-based index into the normalized document lines
    end_line: int  # exclusive


@dataclass
class SkippedBlock:
    text: str
    reason: str
    start_line: int


@dataclass
class Document:
    front_matter: str
    config: DocumentConfig
    tasks: list[Task]
    skipped: list[SkippedBlock] = field(default_factory=list)
    # Parsed and skipped blocks in document order
    blocks: list[ParsedBlock | SkippedBlock] = field(default_factory=list)

    def find(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    @property
    def max_id(self) -> int:
        return max((t.id for t in self.tasks), default=0)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_front_matter(text: str) -> tuple[str, int]:
    """Split a leading fenced block off the document.

    Returns (front_matter, body_start_line). front_matter includes both fences
    and ends with a newline; it is "" when the document has no front matter.
    """
    lines = text.split("\n")
    if not lines or lines[0] != SEPARATOR:
        return "", 0

    for i in range(1, len(lines)):
        if lines[i] == SEPARATOR:
            return "\n".join(lines[:i + 1]) + "\n", i + 1

    # Unclosed fence: treat everything as body
    return "", 0


def _split_labels(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_front_matter(front_matter: str) -> DocumentConfig:
    """Extract the statuses/severities lists from a front matter block."""
    config = DocumentConfig()
    seen = set()
    for line in front_matter.split("\n"):
        match = FRONT_MATTER_KEY_RE.match(line)
        if not match:
            continue
        key = match.group(1).lower()
        if key in seen:
            continue
        seen.add(key)
        setattr(config, key, _split_labels(match.group(2)))
    return config


def _label_of(line: str) -> str | None:
    """Return 'severity' or 'status' if the line is a labeled field line."""
    lowered = line.strip().lower()
    if lowered.startswith("severity:"):
        return "severity"
    if lowered.startswith("status:"):
        return "status"
    return None


def _label_value(line: str) -> str:
    """Value after the label colon, cut at the first delimiter."""
    _, _, rest = line.partition(":")
    for i, ch in enumerate(rest):
        if ch in VALUE_DELIMITERS:
            rest = rest[:i]
            break
    return rest.strip()


def _trim_description(lines: list[str]) -> str:
    while lines and not lines[0].strip():
        lines = lines[1:]
    while lines and not lines[-1].strip():
        lines = lines[:-1]
    return textwrap.dedent("\n".join(lines)).rstrip()


def _parse_block(lines: list[str], start_line: int) -> ParsedBlock | SkippedBlock | None:
    # Drop leading blank lines so the title is the first line
    offset = 0
    while offset < len(lines) and not lines[offset].strip():
        offset += 1
    if offset == len(lines):
        return None

    body = lines[offset:]
    title_match = TITLE_RE.match(body[0].strip())
    if not title_match:
        return SkippedBlock(
            text="\n".join(lines).strip("\n"),
            reason="first line is not '<id>. <title>'",
            start_line=start_line + offset,
        )

    task_id = int(title_match.group(1))
    if task_id <= 0:
        return SkippedBlock(
            text="\n".join(lines).strip("\n"),
            reason="task id must be positive",
            start_line=start_line + offset,
        )

    fields: dict[str, str] = {}
    desc_lines = []
    for line in body[1:]:
        label = _label_of(line)
        if label and label not in fields:
            fields[label] = _label_value(line)
        else:
            desc_lines.append(line)

    task = Task(
        id=task_id,
        title=title_match.group(2).strip(),
        severity=fields.get("severity") or UNKNOWN_SEVERITY,
        status=fields.get("status") or DEFAULT_PARSED_STATUS,
        description=_trim_description(desc_lines),
    )
    return ParsedBlock(task=task, start_line=start_line, end_line=start_line + len(lines))


def tokenize_blocks(text: str) -> list[ParsedBlock | SkippedBlock]:
    """Split the document body on separator lines and classify each block.

    Empty blocks are dropped. Blocks without a valid title line come back as
    SkippedBlock so callers can see what was tolerated.
    """
    text = normalize_newlines(text)
    _, body_start = split_front_matter(text)
    lines = text.split("\n")

    results: list[ParsedBlock | SkippedBlock] = []
    block_start = body_start
    for i in range(body_start, len(lines) + 1):
        if i < len(lines) and lines[i] != SEPARATOR:
            continue
        block = _parse_block(lines[block_start:i], block_start)
        if block is not None:
            results.append(block)
        block_start = i + 1
    return results


def parse(text: str) -> Document:
    """Parse TASKS.md content into a Document."""
    text = normalize_newlines(text)
    front_matter, _ = split_front_matter(text)

    tasks = []
    skipped = []
    blocks = tokenize_blocks(text)
    for block in blocks:
        if isinstance(block, ParsedBlock):
            tasks.append(block.task)
        else:
            logger.debug(f"Skipping block at line {block.start_line + 1}: {block.reason}")
            skipped.append(block)

    return Document(
        front_matter=front_matter,
        config=parse_front_matter(front_matter),
        tasks=tasks,
        skipped=skipped,
        blocks=blocks,
    )


def format_task(task: Task) -> str:
    """Render one task block (without separator)."""
    lines = [
        f"{task.id}. {task.title}",
        "",
        f"{INDENT}Severity: {task.severity}",
        f"{INDENT}Status: {task.status}",
        "",
    ]
    for line in task.description.split("\n") if task.description else []:
        stripped = line.strip()
        lines.append(INDENT + stripped if stripped else "")
    return "\n".join(lines).rstrip("\n") + "\n"


def serialize(front_matter: str, tasks: list[Task]) -> str:
    """Render the whole document. Always ends with exactly one newline."""
    return serialize_blocks(front_matter, tasks)


def serialize_blocks(front_matter: str, blocks: list[Task | str]) -> str:
    """Like serialize, but str items are emitted verbatim as their own block.

    Used for full rewrites so that blocks the parser skipped survive.
    """
    prefix = normalize_newlines(front_matter)
    if prefix and not prefix.endswith("\n"):
        prefix += "\n"

    rendered = []
    for block in blocks:
        if isinstance(block, Task):
            rendered.append(format_task(block))
        else:
            rendered.append(normalize_newlines(block).strip("\n") + "\n")
    body = (SEPARATOR + "\n").join(rendered)
    content = (prefix + body).rstrip("\n")
    return content + "\n"


def _replace_value(line: str, value: str) -> str:
    """Swap the value on a labeled line, keeping indent, label and annotation."""
    label, _, rest = line.partition(":")
    lead = rest[:len(rest) - len(rest.lstrip())] or " "
    annotation = ""
    for i, ch in enumerate(rest):
        if ch in VALUE_DELIMITERS:
            old_value = rest[:i]
            annotation = old_value[len(old_value.rstrip()):] + rest[i:]
            break
    return f"{label}:{lead}{value}{annotation}"


def patch_fields(original: str, tasks: list[Task]) -> str:
    """Rewrite only Severity/Status lines of the given tasks' blocks.

    Everything else in the document, including the patched tasks' titles and
    descriptions, is left byte-for-byte as it was.
    """
    text = normalize_newlines(original)
    lines = text.split("\n")
    wanted = {t.id: t for t in tasks}
    patched = set()
    # (line index, new line) pairs to insert, applied bottom-up
    inserts: list[tuple[int, str]] = []

    for block in tokenize_blocks(text):
        if not isinstance(block, ParsedBlock):
            continue
        task_id = block.task.id
        if task_id not in wanted or task_id in patched:
            continue
        patched.add(task_id)
        target = wanted[task_id]

        found: dict[str, int] = {}
        title_idx = None
        for idx in range(block.start_line, block.end_line):
            if title_idx is None:
                if lines[idx].strip():
                    title_idx = idx
                continue
            label = _label_of(lines[idx])
            if label and label not in found:
                found[label] = idx

        for label in ("severity", "status"):
            new_value = getattr(target, label)
            if new_value == getattr(block.task, label):
                continue
            if label in found:
                lines[found[label]] = _replace_value(lines[found[label]], new_value)
                continue
            sibling = found.get("status" if label == "severity" else "severity")
            if sibling is not None:
                indent = lines[sibling][:len(lines[sibling]) - len(lines[sibling].lstrip())]
                pos = sibling if label == "severity" else sibling + 1
            else:
                indent = INDENT
                pos = title_idx + 1
            inserts.append((pos, f"{indent}{label.capitalize()}: {new_value}"))

    # Bottom-up so earlier positions stay valid; ties keep insertion order
    ordered = sorted(enumerate(inserts), key=lambda item: (item[1][0], item[0]), reverse=True)
    for _, (pos, new_line) in ordered:
        lines.insert(pos, new_line)

    for task_id in wanted.keys() - patched:
        logger.debug(f"patch_fields: no block for task {task_id}, ignored")

    return "\n".join(lines)


def set_front_matter_lists(
    front_matter: str,
    statuses: list[str] | None = None,
    severities: list[str] | None = None,
) -> str:
    """Rewrite the declared label lists, keeping every other line verbatim.

    Missing keys are appended before the closing fence. An empty front_matter
    produces a fresh block.
    """
    updates = {}
    if statuses is not None:
        updates["statuses"] = statuses
    if severities is not None:
        updates["severities"] = severities

    front_matter = normalize_newlines(front_matter)
    if not front_matter:
        if not updates:
            return ""
        front_matter = f"{SEPARATOR}\n{SEPARATOR}\n"

    lines = front_matter.rstrip("\n").split("\n")
    done = set()
    for i, line in enumerate(lines[1:-1], 1):
        match = FRONT_MATTER_KEY_RE.match(line)
        if not match:
            continue
        key = match.group(1).lower()
        if key in updates and key not in done:
            lines[i] = f"{line[:match.start(2)].rstrip()} {', '.join(updates[key])}"
            done.add(key)

    for key in ("statuses", "severities"):
        if key in updates and key not in done:
            lines.insert(len(lines) - 1, f"{key}: {', '.join(updates[key])}")

    return "\n".join(lines) + "\n"
