"""Output formatters for Bunny Todo."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from bunny_todo.models import SyncStatus
from bunny_todo.utils.ui.console import get_console

console = get_console()

CATEGORY_ICONS = {
    "general": "🎀",
    "work": "💼",
    "personal": "🌸",
    "shopping": "🛍️",
    "health": "🏃",
}
DEFAULT_CATEGORY_ICON = "📌"

SYNC_STATUS_LABELS = {
    SyncStatus.SYNCED: "[green]☁ Synced[/green]",
    SyncStatus.SYNCING: "[yellow]⟳ Syncing...[/yellow]",
    SyncStatus.LOCAL: "[magenta]💻 Local Mode[/magenta]",
}


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def format_json(data: Any) -> None:
    """Print data as JSON without Rich markup processing."""
    console.print_json(json.dumps(data, default=str))


def get_category_icon(category: str | None) -> str:
    """Icon for a category, with a default for unknown ones."""
    return CATEGORY_ICONS.get(category or "", DEFAULT_CATEGORY_ICON)


def truncate(text: str, length: int = 20) -> str:
    """Shorten text for prompts, marking the cut with '...'."""
    return text[:length] + ("..." if len(text) > length else "")


def format_relative_time(value: str | datetime | None, now: datetime | None = None) -> str:
    """Format timestamp as relative time."""
    if not value:
        return ""

    try:
        if isinstance(value, datetime):
            date = value
        else:
            date = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return ""  # Return empty string for invalid dates

    if date.tzinfo is None:
        date = date.replace(tzinfo=UTC)
    now = now or datetime.now(tz=UTC)
    seconds = (now - date).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds / 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds / 3600)}h ago"
    if seconds < 7 * 86400:
        return f"{int(seconds / 86400)}d ago"
    return f"{date.strftime('%b')} {date.day}"


def get_progress_bar(percentage: float) -> str:
    """Get a progress bar representation."""
    filled = int(percentage / 10)
    empty = 10 - filled
    return "▓" * filled + "░" * empty


def get_completion_color(percentage: float) -> str:
    """Get color based on completion percentage."""
    if percentage >= 80:
        return "green"
    if percentage >= 40:
        return "yellow"
    return "red"
