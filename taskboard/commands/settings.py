"""
tb settings - Show or change automation settings.
"""

import json
from dataclasses import asdict

from taskboard.lib.board import TaskBoard
from taskboard.lib.settings import resolve_log_path
from taskboard.lib.validate import SchemaError


def cmd_settings(args, board: TaskBoard) -> int:
    changes = {}
    if args.enable:
        changes["autorun_enabled"] = True
    if args.disable:
        changes["autorun_enabled"] = False
    if args.command is not None:
        changes["worker_command"] = args.command
    if args.log_path is not None:
        changes["log_path"] = args.log_path

    try:
        settings = board.set_settings(**changes) if changes else board.get_settings()
    except SchemaError as e:
        print(f"ERROR: {e}")
        return 1

    data = asdict(settings)
    data["resolved_log_path"] = str(resolve_log_path(settings, board.config.board_dir))
    print(json.dumps(data, indent=2))
    return 0
