"""Task view: renders the application state and dispatches user intents.

The view keeps an :class:`AppState` mirroring the last known store state and
re-renders after the initial load, after every snapshot push and after each
mutation completes. Domain errors are raised to the caller once the state has
been restored; printing them is the caller's job.
"""

from __future__ import annotations

from collections.abc import Callable

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from bunny_todo.models import (
    TASK_FILTERS,
    BunnyTodoError,
    SyncStatus,
    Task,
    TaskFilter,
    TaskNotFoundError,
    TaskValidationError,
    WriteResult,
)
from bunny_todo.repositories import Unsubscribe
from bunny_todo.services.sync_service import SyncService
from bunny_todo.ui.app_state import AppState
from bunny_todo.utils.logger import get_logger
from bunny_todo.utils.ui.console import get_console
from bunny_todo.utils.ui.formatters import (
    SYNC_STATUS_LABELS,
    format_info,
    format_success,
    format_warning,
    get_category_icon,
    get_completion_color,
    get_progress_bar,
    format_relative_time,
    truncate,
)

LOCAL_WRITE_WARNING = "Saved locally. Sync is offline; run 'bunny data import' later."


def render_tasks(state: AppState, console: Console, show_icons: bool = True) -> None:
    """Render the filtered task list, progress and sync status."""
    visible = state.visible_tasks
    console.print(SYNC_STATUS_LABELS[state.sync_status])

    if not visible:
        label = f"{state.filter} " if state.filter != "all" else ""
        console.print(f"\n[bold]No {label}tasks![/bold]")
        if state.filter == "all":
            console.print("[dim]Add your first task to get started 🌈[/dim]")
        else:
            console.print("[dim]Try changing the filter[/dim]")
    else:
        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("", width=3)
        table.add_column("ID", style="dim", overflow="fold")
        table.add_column("Task")
        table.add_column("Category")
        table.add_column("Added", style="dim")
        for task in visible:
            table.add_row(*_task_row(task, show_icons))
        console.print(table)

    render_progress(state, console)


def _task_row(task: Task, show_icons: bool) -> tuple[str, str, Text, str, str]:
    check = "[green]✔[/green]" if task.completed else "○"
    text = Text(task.task, style="strike dim" if task.completed else "")
    category = task.category
    if show_icons:
        category = f"{get_category_icon(task.category)} {category}"
    return check, str(task.id), text, category, format_relative_time(task.created_at)


def render_progress(state: AppState, console: Console) -> None:
    progress = state.progress
    color = get_completion_color(progress.percentage)
    console.print(
        f"\n{progress.completed}/{progress.total} completed "
        f"[{color}]{get_progress_bar(progress.percentage)} {progress.percentage}%[/{color}]"
    )


class TodoView:
    """Controller holding the app state and talking to the sync adapter."""

    def __init__(
        self,
        sync: SyncService,
        state: AppState | None = None,
        console: Console | None = None,
        confirm: Callable[[str], bool] | None = None,
        show_icons: bool = True,
        quiet: bool = False,
    ):
        self.sync = sync
        self.state = state or AppState(sync_status=sync.status)
        self.console = console or get_console()
        self.confirm = confirm or (lambda message: typer.confirm(message))
        self.show_icons = show_icons
        self.quiet = quiet
        self._unsubscribe: Unsubscribe | None = None
        sync.on_status_change(self._on_status)

    def _on_status(self, status: SyncStatus) -> None:
        self.state.sync_status = status

    def render(self) -> None:
        if not self.quiet:
            render_tasks(self.state, self.console, self.show_icons)

    def _notify_local(self, result: WriteResult) -> None:
        if result.is_local and self.sync.is_remote:
            format_warning(LOCAL_WRITE_WARNING)

    def resolve(self, ref: int | str) -> Task:
        """Find a task by exact id or unique id prefix.

        Raises:
            TaskNotFoundError: If nothing matches
            TaskValidationError: If the prefix matches several tasks
        """
        task = self.state.find(ref)
        if task is not None:
            return task
        matches = [t for t in self.state.tasks if str(t.id).startswith(str(ref))]
        if len(matches) > 1:
            raise TaskValidationError(f"Ambiguous id '{ref}' matches {len(matches)} tasks")
        if not matches:
            raise TaskNotFoundError(ref)
        return matches[0]

    # ------------------------------------------------------------------
    # Loading and subscriptions
    # ------------------------------------------------------------------

    async def load(self) -> list[Task]:
        self.state.replace_all(await self.sync.load())
        return self.state.tasks

    async def start(self) -> Unsubscribe:
        """Subscribe to snapshot pushes; each push replaces the list and re-renders."""
        self._unsubscribe = await self.sync.subscribe(self.on_snapshot)
        return self._unsubscribe

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_snapshot(self, tasks: list[Task]) -> None:
        get_logger().debug("view received %d tasks", len(tasks))
        self.state.replace_all(tasks)
        self.render()

    def set_filter(self, task_filter: TaskFilter) -> None:
        if task_filter not in TASK_FILTERS:
            raise TaskValidationError(
                f"Unknown filter '{task_filter}'. Choose from: {', '.join(TASK_FILTERS)}"
            )
        self.state.filter = task_filter
        self.render()

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def add(self, text: str | None, category: str | None = None) -> WriteResult:
        """Add intent. Invalid text raises before any store call."""
        result = await self.sync.add_task(text, category)
        if result.task is not None:
            self.state.upsert(result.task)
        format_success("Task added successfully! ✨")
        self._notify_local(result)
        self.render()
        return result

    async def toggle(self, ref: int | str) -> WriteResult:
        """Toggle intent: optimistic update, confirmed or rolled back."""
        task = self.resolve(ref)
        tentative = self.state.apply_tentative(task.id, completed=not task.completed)
        try:
            result = await self.sync.update_task(task.id, completed=tentative.after.completed)
        except BunnyTodoError:
            self.state.rollback(tentative)
            self.render()
            raise

        self.state.confirm(tentative, result.task)
        status = "completed 🎉" if tentative.after.completed else "pending"
        format_success(f"Task marked as {status}!")
        self._notify_local(result)
        self.render()
        return result

    async def edit(
        self, ref: int | str, text: str | None = None, category: str | None = None
    ) -> WriteResult:
        task = self.resolve(ref)
        result = await self.sync.update_task(task.id, task=text, category=category)
        if result.task is not None:
            self.state.upsert(result.task)
        else:
            changes = {k: v for k, v in (("task", text), ("category", category)) if v}
            self.state.upsert(task.model_copy(update=changes))
        format_success("Task updated!")
        self._notify_local(result)
        self.render()
        return result

    async def delete(self, ref: int | str, force: bool = False) -> WriteResult | None:
        """Delete intent, asking for confirmation unless forced.

        Returns:
            None if the user cancelled
        """
        task = self.resolve(ref)
        if not force and not self.confirm(f'Delete "{truncate(task.task)}"?'):
            format_info("Cancelled")
            return None

        result = await self.sync.delete_task(task.id)
        self.state.remove(task.id)
        format_success("Task deleted! 🗑️")
        self._notify_local(result)
        self.render()
        return result
