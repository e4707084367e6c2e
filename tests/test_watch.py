"""Tests for the tb watch board rendering."""

from taskboard.commands.watch import build_board_table, parse_task_id


def _snapshot(tasks, statuses=None):
    return {"tasks": tasks, "meta": {"statuses": statuses or [], "severities": []}}


class TestBuildBoardTable:
    """Tests for build_board_table."""

    def test_one_column_per_declared_status(self):
        snapshot = _snapshot(
            [
                {"id": 1, "title": "A", "severity": "HIGH", "status": "Backlog", "description": ""},
                {"id": 2, "title": "B", "severity": "LOW", "status": "Done", "description": ""},
                {"id": 3, "title": "C", "severity": "LOW", "status": "Done", "description": ""},
            ],
            statuses=["Backlog", "To Do", "Done"],
        )
        table = build_board_table(snapshot)

        assert [c.header for c in table.columns] == ["Backlog (1)", "To Do (0)", "Done (2)"]
        assert table.row_count == 1

    def test_undeclared_status_gets_column(self):
        snapshot = _snapshot(
            [{"id": 1, "title": "A", "severity": "HIGH", "status": "Review", "description": ""}],
            statuses=["Backlog"],
        )
        headers = [c.header for c in build_board_table(snapshot).columns]
        assert headers == ["Backlog (0)", "Review (1)"]

    def test_default_columns_without_front_matter(self):
        headers = [c.header for c in build_board_table(_snapshot([])).columns]
        assert headers == ["Backlog (0)", "To Do (0)", "In Progress (0)", "Blocked (0)", "Done (0)"]


class TestParseTaskId:
    """Tests for parse_task_id."""

    def test_plain_and_hash(self):
        assert parse_task_id("3") == 3
        assert parse_task_id(" #12 ") == 12

    def test_invalid(self):
        assert parse_task_id("") is None
        assert parse_task_id("abc") is None
        assert parse_task_id("0") is None
        assert parse_task_id("-1") is None
