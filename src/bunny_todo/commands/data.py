"""Data management commands (import, export)."""

from datetime import datetime
from pathlib import Path

import typer

from bunny_todo.services.sync_service import get_sync_service
from bunny_todo.utils.ui.console import get_console
from bunny_todo.utils.ui.formatters import format_info, format_success

from .decorators import command_wrapper

app = typer.Typer(help="Data management commands")
console = get_console()


def default_export_path() -> Path:
    return Path(f"bunny-todos-export-{datetime.now():%Y-%m-%d}.json")


@app.command("import")
@command_wrapper
async def import_data() -> None:
    """
    Move tasks saved locally while offline into the remote store.

    Tasks imported before are skipped. Local storage is cleared afterwards.
    """
    sync = get_sync_service()
    try:
        local_tasks = await sync.local.list_all()
        if not local_tasks:
            format_info("No local tasks to import")
            return

        format_info(f"Importing {len(local_tasks)} local tasks...")
        result = await sync.import_from_local()
    finally:
        await sync.close()
    format_success(f"Imported {result.imported} tasks")
    if result.skipped:
        format_info(f"Skipped {result.skipped} tasks already imported")


@app.command("export")
@command_wrapper
async def export_data(
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (default: bunny-todos-export-{date}.json)",
    ),
) -> None:
    """
    Export your tasks to JSON.

    Examples:
        bunny data export
        bunny data export --output backup.json
    """
    sync = get_sync_service()
    try:
        document = await sync.export()
    finally:
        await sync.close()

    path = Path(output) if output else default_export_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document.model_dump_json(indent=2), encoding="utf-8")

    format_success(f"Exported {document.count} tasks to {path}")
