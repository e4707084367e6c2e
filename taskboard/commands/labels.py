"""
tb labels - Show or edit the statuses/severities declared in the front matter.
"""

from taskboard.lib.board import TaskBoard


def _split(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def cmd_labels(args, board: TaskBoard) -> int:
    statuses = _split(args.statuses)
    severities = _split(args.severities)

    if statuses is None and severities is None:
        config = board.store.read().config
    else:
        config = board.set_labels(statuses=statuses, severities=severities)

    print(f"Statuses:   {', '.join(config.statuses) or '(none)'}")
    print(f"Severities: {', '.join(config.severities) or '(none)'}")
    return 0
