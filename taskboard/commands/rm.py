"""
tb rm - Delete a task.
"""

from taskboard.lib.board import TaskBoard
from taskboard.lib.store import NotFound


def cmd_rm(args, board: TaskBoard) -> int:
    """Remove a task block. Other ids are not renumbered."""
    if not args.yes:
        try:
            task = board.store.get(args.id)
        except NotFound as e:
            print(f"ERROR: {e}")
            return 1
        answer = input(f"Delete #{task.id} {task.title}? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Cancelled.")
            return 0

    try:
        board.delete_task(args.id)
    except NotFound as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Deleted task #{args.id}")
    return 0
