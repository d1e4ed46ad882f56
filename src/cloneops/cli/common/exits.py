"""Exit handling utilities for the CLI.

Exit codes: 0 success, 1 a host or clone failed (or the catalog is
unusable), 2 invalid input.
"""

from typing import NoReturn

import typer

from cloneops.cli.common.output import out

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def die(msg: str, code: int = EXIT_FAILED) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = EXIT_OK) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = EXIT_FAILED) -> NoReturn:
    """Print an error message and exit, chaining the original exception."""
    out.error(message)
    raise typer.Exit(code) from exc
