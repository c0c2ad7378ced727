"""Configuration management commands."""

import typer

from bunny_todo.services.config_service import get_config_service
from bunny_todo.utils import exit_codes
from bunny_todo.utils.ui.console import get_console
from bunny_todo.utils.ui.formatters import format_info, format_json, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Configuration management commands")
console = get_console()


def parse_value(value: str) -> str | int | float | bool | None:
    """Convert a command-line string to the closest JSON scalar."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("none", "null"):
        return None
    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit():
        return float(value)
    return value


@app.command("show")
@command_wrapper
def show_config() -> None:
    """Show the current configuration."""
    config_service = get_config_service()
    format_json(config_service.config.model_dump())
    console.print(f"[dim]Active backend: {config_service.backend}[/dim]")
    console.print(f"[dim]Config file: {config_service.config_path}[/dim]")


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
) -> None:
    """Get a configuration value."""
    try:
        value = get_config_service().get_value(key)
    except KeyError as e:
        raise AppError(
            f"Configuration key '{key}' not found", exit_codes.ERROR_INVALID_ARGS
        ) from e

    if isinstance(value, dict):
        format_json(value)
    else:
        console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = parse_value(value)
    try:
        get_config_service().set_value(key, parsed_value)
    except KeyError as e:
        raise AppError(
            f"Configuration key '{key}' not found", exit_codes.ERROR_INVALID_ARGS
        ) from e
    except ValueError as e:
        raise AppError(str(e), exit_codes.ERROR_INVALID_ARGS) from e

    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: str | None = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            format_info("Cancelled")
            return

    try:
        get_config_service().reset_config(key)
    except KeyError as e:
        raise AppError(
            f"Configuration key '{key}' not found", exit_codes.ERROR_INVALID_ARGS
        ) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
