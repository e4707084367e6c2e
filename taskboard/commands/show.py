"""
tb show - Show one task.
"""

from taskboard.lib.board import TaskBoard
from taskboard.lib.store import NotFound


def cmd_show(args, board: TaskBoard) -> int:
    """Print a task's fields and description."""
    try:
        task = board.store.get(args.id)
    except NotFound as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Task #{task.id}: {task.title}")
    print("=" * 60)
    print(f"Severity:   {task.severity}")
    print(f"Status:     {task.status}")
    if task.description:
        print()
        print(task.description)
    return 0
