"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from bunny_todo.models import (
    BunnyTodoError,
    StoreUnavailableError,
    TaskNotFoundError,
    TaskValidationError,
)
from bunny_todo.utils import exit_codes
from bunny_todo.utils.logger import get_logger
from bunny_todo.utils.ui.formatters import format_error, format_warning


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(error: BunnyTodoError) -> int:
    if isinstance(error, TaskValidationError):
        return exit_codes.ERROR_INVALID_ARGS
    if isinstance(error, TaskNotFoundError):
        return exit_codes.ERROR_NOT_FOUND
    if isinstance(error, StoreUnavailableError):
        return exit_codes.ERROR_NETWORK
    return exit_codes.ERROR_GENERAL


def command_wrapper(func: Callable):
    """Decorator to wrap command functions with logging and error mapping."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except AppError as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) %s - %s",
                cmd,
                elapsed,
                exit_codes.get_exit_code_name(e.exit_code),
                str(e),
            )
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except TaskValidationError as e:
            logger.info("command rejected input: %s - %s", cmd, str(e))
            format_warning(str(e))
            raise typer.Exit(code=exit_code_for(e)) from e

        except BunnyTodoError as e:
            elapsed = time.monotonic() - start
            code = exit_code_for(e)
            logger.error(
                "command failed: %s (%.3fs) %s - %s",
                cmd,
                elapsed,
                exit_codes.get_exit_code_name(code),
                str(e),
            )
            format_error(str(e))
            raise typer.Exit(code=code) from e

        except typer.Exit:
            # Re-raise Typer's own exits (like --help or explicit Exit(0))
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            # Generic fallback for unexpected crashes
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
