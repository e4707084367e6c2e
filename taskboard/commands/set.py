"""
tb set - Update fields of a task.

Moving a task from Backlog to To Do may launch the worker when autorun is on.
"""

from taskboard.lib.board import TaskBoard
from taskboard.lib.store import NotFound, ValidationError


def cmd_set(args, board: TaskBoard) -> int:
    """Apply the given field updates to one task."""
    updates = {}
    if args.title is not None:
        updates["title"] = args.title
    if args.severity is not None:
        updates["severity"] = args.severity
    if args.status is not None:
        updates["status"] = args.status
    if args.desc is not None:
        updates["description"] = args.desc

    if not updates:
        print("ERROR: Nothing to update. Use --title, --severity, --status or --desc.")
        return 1

    try:
        result = board.update_task(args.id, updates)
    except (NotFound, ValidationError) as e:
        print(f"ERROR: {e}")
        return 1

    before, after = result.before, result.after
    print(f"Updated task #{after.id}")
    for name in updates:
        old, new = getattr(before, name), getattr(after, name)
        if old != new and name != "description":
            print(f"  {name}: {old} -> {new}")
        elif old != new:
            print("  description updated")
    return 0
