"""REST server command.

Usage:
    bunny serve                     # Start on the configured host and port
    bunny serve --port 8000         # Custom port
    bunny serve --db ./todos.db     # Custom SQLite file
"""

import typer
import uvicorn

from bunny_todo.server import create_app
from bunny_todo.services.config_service import get_config_service
from bunny_todo.utils.logger import get_logger
from bunny_todo.utils.ui.console import get_console

from .decorators import command_wrapper

console = get_console()


@command_wrapper
def serve(
    host: str | None = typer.Option(None, "--host", help="Host to bind to"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
    db: str | None = typer.Option(None, "--db", help="SQLite file for the todos table"),
) -> None:
    """Run the Bunny Todo REST server."""
    config_service = get_config_service()
    server_config = config_service.config.server
    host = host or server_config.host
    port = port or server_config.port
    db_path = db or config_service.server_db_path

    app = create_app(db_path)

    console.print()
    console.print("[bold green]🐰 Bunny Todo server[/bold green]")
    console.print(f"   URL: http://{host}:{port}/api/todos")
    console.print(f"   Database: {db_path}")
    console.print()
    console.print("[dim]Press Ctrl+C to stop[/dim]")
    console.print()

    get_logger().info("serving on %s:%d with %s", host, port, db_path)
    uvicorn.run(app, host=host, port=port, log_level="info")
