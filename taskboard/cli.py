#!/usr/bin/env python3
"""taskboard CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from taskboard.lib.board import TaskBoard
from taskboard.lib.config import get_board_dir, load_board_config
from taskboard.commands import add as cmd_add_module
from taskboard.commands import labels as cmd_labels_module
from taskboard.commands import list as cmd_list_module
from taskboard.commands import rm as cmd_rm_module
from taskboard.commands import set as cmd_set_module
from taskboard.commands import settings as cmd_settings_module
from taskboard.commands import show as cmd_show_module

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def get_board(args, require_tasks: bool = True) -> TaskBoard:
    """Load board config from --dir (or $TASKBOARD_DIR / cwd)."""
    board_dir = Path(args.dir).expanduser() if args.dir else get_board_dir()
    try:
        config = load_board_config(board_dir)
    except ValueError as e:
        print(f"ERROR: Invalid taskboard.env in {board_dir}: {e}")
        sys.exit(2)

    if require_tasks and not config.tasks_path.exists():
        print(f"ERROR: No tasks file at {config.tasks_path}")
        print("  Create one or point --dir / TASKBOARD_DIR at a board directory.")
        sys.exit(2)

    return TaskBoard(config)


def cmd_list(args):
    return cmd_list_module.cmd_list(args, get_board(args))


def cmd_show(args):
    return cmd_show_module.cmd_show(args, get_board(args))


def cmd_add(args):
    return cmd_add_module.cmd_add(args, get_board(args))


def cmd_set(args):
    return cmd_set_module.cmd_set(args, get_board(args))


def cmd_rm(args):
    return cmd_rm_module.cmd_rm(args, get_board(args))


def cmd_labels(args):
    return cmd_labels_module.cmd_labels(args, get_board(args))


def cmd_settings(args):
    return cmd_settings_module.cmd_settings(args, get_board(args, require_tasks=False))


def cmd_watch(args):
    # Imported lazily: textual is only needed for the live board
    from taskboard.commands import watch as cmd_watch_module
    return cmd_watch_module.cmd_watch(args, get_board(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tb', description='TASKS.md task board')
    parser.add_argument('--dir', '-d', help='Board directory (default: $TASKBOARD_DIR or cwd)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # tb list
    p_list = subparsers.add_parser('list', help='List tasks by status')
    p_list.add_argument('--status', '-s', help='Only tasks with this status')
    p_list.add_argument('--json', action='store_true', help='Print tasks and labels as JSON')
    p_list.set_defaults(func=cmd_list)

    # tb show
    p_show = subparsers.add_parser('show', help='Show one task')
    p_show.add_argument('id', type=int, help='Task ID')
    p_show.set_defaults(func=cmd_show)

    # tb add
    p_add = subparsers.add_parser('add', help='Create a task')
    p_add.add_argument('title', help='Task title')
    p_add.add_argument('--severity', help='Severity (default: configured medium)')
    p_add.add_argument('--status', help='Status (default: Backlog)')
    p_add.add_argument('--desc', help='Description')
    p_add.set_defaults(func=cmd_add)

    # tb set
    p_set = subparsers.add_parser('set', help='Update task fields')
    p_set.add_argument('id', type=int, help='Task ID')
    p_set.add_argument('--title', help='New title')
    p_set.add_argument('--severity', help='New severity')
    p_set.add_argument('--status', help='New status (Backlog -> To Do may launch the worker)')
    p_set.add_argument('--desc', help='New description')
    p_set.set_defaults(func=cmd_set)

    # tb rm
    p_rm = subparsers.add_parser('rm', help='Delete a task')
    p_rm.add_argument('id', type=int, help='Task ID')
    p_rm.add_argument('--yes', '-y', action='store_true', help='Skip confirmation')
    p_rm.set_defaults(func=cmd_rm)

    # tb labels
    p_labels = subparsers.add_parser('labels', help='Show/edit declared statuses and severities')
    p_labels.add_argument('--statuses', help='Comma-separated status labels')
    p_labels.add_argument('--severities', help='Comma-separated severity labels')
    p_labels.set_defaults(func=cmd_labels)

    # tb settings
    p_settings = subparsers.add_parser('settings', help='Show/change automation settings')
    toggle = p_settings.add_mutually_exclusive_group()
    toggle.add_argument('--enable', action='store_true', help='Enable worker autorun')
    toggle.add_argument('--disable', action='store_true', help='Disable worker autorun')
    p_settings.add_argument('--command', help='Worker command line (quotes allowed)')
    p_settings.add_argument('--log-path', help='Worker log file (relative to board dir)')
    p_settings.set_defaults(func=cmd_settings)

    # tb watch
    p_watch = subparsers.add_parser('watch', help='Live terminal board')
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except OSError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
