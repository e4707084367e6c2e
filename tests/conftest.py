"""Shared fixtures for taskboard tests."""

import pytest

SAMPLE = """---
statuses: Backlog, To Do, In Progress, Done
severities: CRITICAL, HIGH, Medium, LOW
# owner: ops
---
1. Fix login redirect

    Severity: HIGH
    Status: Backlog

    Users land on /home after login.
    Resolution: pending
---
2. Add dark mode

    Severity: LOW | nice to have
    Status: To Do

    Toggle in settings.
---
not a task block
---
6. Ship docs

    Severity: Medium
    Status: Done
"""


@pytest.fixture
def tasks_file(tmp_path):
    path = tmp_path / "TASKS.md"
    path.write_text(SAMPLE, encoding="utf-8")
    return path
