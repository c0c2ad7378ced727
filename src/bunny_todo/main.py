"""Main entry point for Bunny Todo."""

import typer

from bunny_todo import __version__
from bunny_todo.commands import config, data, server, tasks
from bunny_todo.services.config_service import get_config_service
from bunny_todo.utils.ui.console import get_console

app = typer.Typer(
    name="bunny",
    help="A cute personal task tracker with local, REST and live document storage",
    no_args_is_help=True,
)

console = get_console()


# Add subcommands
app.add_typer(data.app, name="data", help="Data management (import, export)")
app.add_typer(config.app, name="config", help="Configuration management")

# Add top-level commands
app.command("add")(tasks.add_task)
app.command("list")(tasks.list_tasks)
app.command("toggle")(tasks.toggle_task)
app.command("edit")(tasks.edit_task)
app.command("delete")(tasks.delete_task)
app.command("progress")(tasks.show_progress)
app.command("watch")(tasks.watch_tasks)
app.command("serve")(server.serve)


@app.command()
def version() -> None:
    """Show version information and the active backend."""
    console.print(f"[bold]Bunny Todo[/bold] version [cyan]{__version__}[/cyan]")
    console.print(f"[dim]Backend: {get_config_service().backend}[/dim]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
