"""
tb add - Create a task.
"""

from taskboard.lib.board import TaskBoard
from taskboard.lib.store import ValidationError


def cmd_add(args, board: TaskBoard) -> int:
    """Append a new task to TASKS.md."""
    try:
        task_id = board.create_task({
            "title": args.title,
            "severity": args.severity,
            "status": args.status,
            "description": args.desc,
        })
    except ValidationError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Created task #{task_id}")
    return 0
