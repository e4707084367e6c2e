"""
tb list - List tasks grouped by status.
"""

import json

from taskboard.lib.board import TaskBoard, column_order, group_by_status


def cmd_list(args, board: TaskBoard) -> int:
    """List tasks, one status section at a time."""
    snapshot = board.snapshot()
    tasks = snapshot["tasks"]
    if args.status:
        wanted = args.status.strip().lower()
        tasks = [t for t in tasks if t["status"].lower() == wanted]

    if args.json:
        print(json.dumps({"tasks": tasks, "meta": snapshot["meta"]}, indent=2))
        return 0

    if not tasks:
        print("Tasks: none")
        return 0

    groups = group_by_status(tasks)
    for status in column_order(snapshot["meta"]["statuses"], groups):
        items = groups.get(status, [])
        if not items:
            continue
        print(f"{status} ({len(items)})")
        print("-" * 60)
        for task in items:
            title = task["title"][:45] + "..." if len(task["title"]) > 45 else task["title"]
            print(f"  {task['id']:>4}. {title:<48} {task['severity']}")
        print()

    print(f"{len(tasks)} task(s)")
    return 0
