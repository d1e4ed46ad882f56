"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from cloneops.cli.common.output import console


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> None:
    """Route `cloneops.*` loggers to the shared rich console."""
    resolved = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("cloneops")
    root.handlers[:] = [handler]
    root.setLevel(resolved)
    root.propagate = False
