"""Task commands: add, list, toggle, edit, delete, progress and watch."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import typer

from bunny_todo.models import TASK_FILTERS
from bunny_todo.services.config_service import get_config_service
from bunny_todo.services.sync_service import get_sync_service
from bunny_todo.ui.view import TodoView
from bunny_todo.utils import exit_codes
from bunny_todo.utils.ui.console import get_console
from bunny_todo.utils.ui.formatters import (
    SYNC_STATUS_LABELS,
    format_info,
    format_json,
    get_completion_color,
    get_progress_bar,
)

from .decorators import AppError, command_wrapper

console = get_console()


@asynccontextmanager
async def open_view(quiet: bool = False) -> AsyncIterator[TodoView]:
    """Build a view over the configured backend, closing its clients on exit."""
    config = get_config_service().config
    view = TodoView(
        get_sync_service(),
        console=console,
        show_icons=config.output.icons,
        quiet=quiet,
    )
    try:
        yield view
    finally:
        await view.sync.close()


@command_wrapper
async def add_task(
    text: str = typer.Argument(..., help="What needs to be done"),
    category: str | None = typer.Option(
        None, "--category", "-c", help="general, work, personal, shopping or health"
    ),
) -> None:
    """
    Add a new task.

    Examples:
      bunny add "Buy milk" -c shopping
      bunny add "Write report" --category work
    """
    async with open_view() as view:
        await view.load()
        await view.add(text, category)


@command_wrapper
async def list_tasks(
    task_filter: str = typer.Option(
        "all", "--filter", "-f", help="Show all, pending or completed tasks"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List tasks with progress."""
    if task_filter not in TASK_FILTERS:
        raise AppError(
            f"Unknown filter '{task_filter}'. Choose from: {', '.join(TASK_FILTERS)}",
            exit_codes.ERROR_INVALID_ARGS,
        )

    async with open_view(quiet=json_output) as view:
        await view.load()
        view.state.filter = task_filter

        if json_output:
            format_json([task.to_storage() for task in view.state.visible_tasks])
            return
        view.render()


@command_wrapper
async def toggle_task(
    task_id: str = typer.Argument(..., help="Task ID or unique ID prefix"),
) -> None:
    """Mark a task completed, or pending again."""
    async with open_view() as view:
        await view.load()
        await view.toggle(task_id)


@command_wrapper
async def edit_task(
    task_id: str = typer.Argument(..., help="Task ID or unique ID prefix"),
    text: str | None = typer.Option(None, "--text", "-t", help="New task text"),
    category: str | None = typer.Option(None, "--category", "-c", help="New category"),
) -> None:
    """Edit the text or category of a task."""
    async with open_view() as view:
        await view.load()
        await view.edit(task_id, text=text, category=category)


@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID or unique ID prefix"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    async with open_view() as view:
        await view.load()
        await view.delete(task_id, force=force)


@command_wrapper
async def show_progress(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show completion statistics."""
    sync = get_sync_service()
    try:
        progress = await sync.progress()
    finally:
        await sync.close()

    if json_output:
        format_json(progress.model_dump(by_alias=True))
        return

    color = get_completion_color(progress.percentage)
    console.print(SYNC_STATUS_LABELS[sync.status])
    console.print(f"[bold]Total:[/bold] {progress.total}")
    console.print(f"[bold]Completed:[/bold] {progress.completed}")
    console.print(
        f"[{color}]{get_progress_bar(progress.percentage)} {progress.percentage}%[/{color}]"
    )


@command_wrapper
async def watch_tasks(
    interval: float | None = typer.Option(
        None, "--interval", "-i", help="Seconds between checks for changes"
    ),
    duration: float | None = typer.Option(
        None, "--duration", help="Stop after this many seconds"
    ),
) -> None:
    """Follow the task list live; it re-renders on every change."""
    from bunny_todo.services.context_manager import get_strategy_context

    async with open_view() as view:
        if not view.sync.is_live:
            raise AppError(
                "Live updates need the document backend",
                exit_codes.ERROR_INVALID_ARGS,
            )

        store = get_strategy_context().strategy.document_store
        interval = interval or get_config_service().config.document.poll_interval
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration if duration is not None else None

        await view.start()
        format_info("Watching for changes. Press Ctrl+C to stop.")
        try:
            while deadline is None or loop.time() < deadline:
                await asyncio.sleep(interval)
                store.poll()
        except (KeyboardInterrupt, asyncio.CancelledError):
            format_info("Stopped")
        finally:
            view.stop()
