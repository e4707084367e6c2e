"""
tb watch - Live terminal board.

Renders one column per status and redraws whenever TASKS.md changes,
whether the change came from this process, another tb command or an editor.
"""

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, Static
from rich.table import Table
from rich.text import Text

from taskboard.lib.automation import NOT_STARTED_STATUS, READY_STATUS
from taskboard.lib.board import TaskBoard, column_order, group_by_status
from taskboard.lib.notifier import DocumentWatcher
from taskboard.lib.store import NotFound, ValidationError

# How often the app drains its refresh subscription
EVENT_POLL_SECONDS = 0.25

SEVERITY_STYLES = {
    "CRITICAL": "bold red",
    "HIGH": "yellow",
    "MEDIUM": "blue",
    "LOW": "green",
}


def build_board_table(snapshot: dict) -> Table:
    """Build the board as a Rich table with one column per status."""
    groups = group_by_status(snapshot["tasks"])
    columns = column_order(snapshot["meta"]["statuses"], groups)

    table = Table(expand=True, show_header=True, header_style="bold")
    cells = []
    for status in columns:
        items = groups.get(status, [])
        table.add_column(f"{status} ({len(items)})", ratio=1)

        if not items:
            cells.append(Text("No tasks", style="dim"))
            continue
        cell = Text()
        for task in items:
            style = SEVERITY_STYLES.get(task["severity"].upper(), "")
            cell.append(f"{task['id']}. ", style="bold")
            cell.append(task["title"], style=style)
            cell.append(f"\n   {task['severity']}\n\n", style="dim")
        cells.append(cell)

    if columns:
        table.add_row(*cells)
    return table


def parse_task_id(value: str) -> int | None:
    value = value.strip().lstrip("#")
    return int(value) if value.isdigit() and int(value) > 0 else None


class PromptModal(ModalScreen[str]):
    """Modal asking for a single line of input."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, prompt: str) -> None:
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        yield Container(
            Label(self.prompt, id="prompt-label"),
            Input(placeholder="Task id", id="prompt-input"),
            Label("Press Enter to submit, Escape to cancel", id="prompt-hint"),
            id="prompt-dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#prompt-input", Input).focus()

    @on(Input.Submitted)
    def on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss("")


class ConfirmModal(ModalScreen[bool]):
    """Yes/no confirmation."""

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Container(
            Static(Text(self.message), id="confirm-message"),
            Static("y = yes, n = no", id="confirm-hint"),
            id="confirm-dialog",
        )

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class BoardApp(App):
    """Live kanban view of TASKS.md."""

    CSS = """
    #board-scroll {
        height: 1fr;
        padding: 0 1;
    }

    #prompt-dialog, #confirm-dialog {
        align: center middle;
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    PromptModal, ConfirmModal {
        align: center middle;
    }

    #prompt-hint, #confirm-hint {
        margin-top: 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("r", "refresh_board", "Refresh"),
        Binding("p", "promote", f"{NOT_STARTED_STATUS} -> {READY_STATUS}"),
        Binding("x", "delete", "Delete"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, board: TaskBoard) -> None:
        super().__init__()
        self.board = board
        self.watcher = DocumentWatcher(
            board.config.tasks_path,
            board.notifier,
            interval=board.config.poll_interval,
        )
        self.subscription = None
        self._load_error_notified = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(Static(id="board"), id="board-scroll")
        yield Footer()

    def on_mount(self) -> None:
        self.subscription = self.board.notifier.subscribe()
        self.watcher.start()
        self.refresh_board()
        self.set_interval(EVENT_POLL_SECONDS, self._drain_events)

    def on_unmount(self) -> None:
        self.watcher.stop()
        if self.subscription is not None:
            self.board.notifier.unsubscribe(self.subscription)

    def _drain_events(self) -> None:
        if self.subscription is not None and self.subscription.drain():
            self.refresh_board()

    def refresh_board(self) -> None:
        """Re-read TASKS.md and redraw."""
        try:
            snapshot = self.board.snapshot()
            self._load_error_notified = False
        except (NotFound, OSError) as e:
            if not self._load_error_notified:
                self.notify(f"Failed to load tasks: {e}", severity="error")
                self._load_error_notified = True
            return

        self.query_one("#board", Static).update(build_board_table(snapshot))
        self.title = f"tb watch: {self.board.config.tasks_path.name}"
        self.sub_title = f"{len(snapshot['tasks'])} task(s)"

    def action_refresh_board(self) -> None:
        self.refresh_board()

    def action_promote(self) -> None:
        """Move a task to the ready status (may launch the worker)."""

        def handle_id(value: str) -> None:
            task_id = parse_task_id(value or "")
            if task_id is None:
                return
            try:
                self.board.update_task(task_id, {"status": READY_STATUS})
            except (NotFound, ValidationError) as e:
                self.notify(str(e), severity="error")
                return
            self.notify(f"#{task_id} moved to {READY_STATUS}")

        self.push_screen(PromptModal(f"Move which task to {READY_STATUS}?"), handle_id)

    def action_delete(self) -> None:
        """Delete a task after confirmation."""

        def handle_id(value: str) -> None:
            task_id = parse_task_id(value or "")
            if task_id is None:
                return
            try:
                task = self.board.store.get(task_id)
            except NotFound as e:
                self.notify(str(e), severity="error")
                return

            def handle_confirm(confirmed: bool) -> None:
                if not confirmed:
                    return
                try:
                    self.board.delete_task(task_id)
                except NotFound as e:
                    self.notify(str(e), severity="error")
                    return
                self.notify(f"Deleted #{task_id}", severity="warning")

            self.push_screen(ConfirmModal(f"Delete #{task.id} {task.title}?"), handle_confirm)

        self.push_screen(PromptModal("Delete which task?"), handle_id)


def cmd_watch(args, board: TaskBoard) -> int:
    """Run the live board until the user quits."""
    app = BoardApp(board)
    app.run()
    return 0
