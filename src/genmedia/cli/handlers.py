"""
Error reporting for the CLI.

Library exceptions become an exit code plus a one-line message, so command
bodies never need their own try/except for known failures.
"""

import sys
from collections.abc import Callable

import click

from genmedia.cli import progress
from genmedia.cli.utils import (
    EXIT_API_OR_NETWORK,
    EXIT_CANCELLED,
    EXIT_VALIDATION_OR_CONFIG,
)
from genmedia.utils.exceptions import (
    ConfigurationError,
    GenmediaError,
    ImageProcessingError,
    TaskFailedError,
    UnsupportedModelError,
)

# Checked in order; anything not listed is an API or network failure.
_EXIT_CODES: tuple[tuple[type[BaseException], int], ...] = (
    (KeyboardInterrupt, EXIT_CANCELLED),
    (ConfigurationError, EXIT_VALIDATION_OR_CONFIG),
    (ImageProcessingError, EXIT_VALIDATION_OR_CONFIG),
    (UnsupportedModelError, EXIT_VALIDATION_OR_CONFIG),
    (FileNotFoundError, EXIT_VALIDATION_OR_CONFIG),
)


def _message(exc: BaseException) -> str:
    if isinstance(exc, KeyboardInterrupt):
        return "Cancelled."
    msg = str(exc.args[0]) if exc.args else ""
    if not msg:
        return "An unexpected error occurred."
    # ValidationError carries the offending field, TaskFailedError the task id
    if getattr(exc, "field", None):
        msg = f"{msg} (field: {exc.field})"  # type: ignore[attr-defined]
    if isinstance(exc, TaskFailedError) and exc.task_id:
        msg = f"{msg} (task: {exc.task_id})"
    return msg


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map an exception to (exit_code, user_message)."""
    for exc_type, code in _EXIT_CODES:
        if isinstance(exc, exc_type):
            return code, _message(exc)
    return EXIT_API_OR_NETWORK, _message(exc)


def _report(code: int, msg: str, quiet: bool) -> None:
    if code == EXIT_CANCELLED:
        if not quiet:
            progress.print_warning(msg)
    elif quiet:
        click.echo(msg, err=True)
    else:
        progress.print_error(msg)


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Run fn(); on failure print the mapped message and exit with its code.

    With debug=True unexpected (non-genmedia) exceptions are re-raised so the
    traceback is visible.
    """
    try:
        fn()
    except (KeyboardInterrupt, GenmediaError, FileNotFoundError) as e:
        code, msg = map_exception_to_exit(e)
        _report(code, msg, quiet)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        code, msg = map_exception_to_exit(e)
        _report(code, msg, quiet)
        sys.exit(code)


__all__ = ["map_exception_to_exit", "run_with_error_handling"]
