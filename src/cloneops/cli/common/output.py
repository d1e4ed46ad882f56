"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from cloneops.cli.common.tui_style import (
    QUESTIONARY_STYLE_CONFIRM,
    QUESTIONARY_STYLE_SELECT,
)
from cloneops.core.models import (
    CloneRecord,
    HostQueryFailure,
    OutcomeStatus,
    TeardownOutcome,
)

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)

_STATUS_STYLE = {
    OutcomeStatus.REMOVED: "ok",
    OutcomeStatus.ALREADY_REMOVED: "meta",
    OutcomeStatus.PLANNED: "warn",
    OutcomeStatus.FAILED: "err",
}


def truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts to be CLONE-OPS consistent."""
        return f"[CLONE-OPS] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {escape(msg)}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {escape(msg)}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {escape(msg)}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {escape(msg)}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        # Questionary renders `instruction=...` inline next to the echoed answer
        console.print("[meta]Use y/n then Enter[/]")
        prompt = questionary.confirm(
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def password(self, message: str) -> str | None:
        """Prompt for a secret without echoing it. Returns None if cancelled."""
        return questionary.password(
            self._q(message), style=QUESTIONARY_STYLE_SELECT, qmark="✦"
        ).ask()

    def clones_table(self, records: Iterable[CloneRecord], title: str = "Clones") -> None:
        """Render clone records as a table."""
        t = Table(title=title, show_lines=False)
        t.add_column("Host", style="ok", no_wrap=True)
        t.add_column("Database")
        t.add_column("Instance", style="meta")
        t.add_column("Clone location", style="meta")
        t.add_column("Access path", style="meta")
        t.add_column("Enabled", style="meta")

        for r in records:
            t.add_row(
                escape(r.host_name),
                escape(r.database_name),
                escape(r.sql_instance),
                escape(r.clone_location),
                escape(r.access_path),
                "yes" if r.is_enabled else "no",
            )

        console.print(t)

    def host_failures_table(
        self, failures: Iterable[HostQueryFailure], title: str = "Host query failures"
    ) -> None:
        """Render hosts whose catalog query failed."""
        t = Table(title=title, show_lines=False)
        t.add_column("Host", style="warn", no_wrap=True)
        t.add_column("Error", style="err")

        for f in failures:
            t.add_row(escape(f.host_name), escape(f.error))

        console.print(t)

    def teardown_results_table(
        self, outcomes: Iterable[TeardownOutcome], title: str = "Teardown results"
    ) -> None:
        """
        Render per-clone teardown outcomes.

        Failed rows show the stage at which teardown stopped, the kind of
        failure and the error.
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Host", style="ok", no_wrap=True)
        t.add_column("Database")
        t.add_column("Result")
        t.add_column("Reached", style="meta")
        t.add_column("Failed at", style="err")
        t.add_column("Kind", style="err")
        t.add_column("Error", style="err")

        for o in outcomes:
            style = _STATUS_STYLE.get(o.status, "meta")
            t.add_row(
                escape(o.record.host_name),
                escape(o.record.database_name),
                f"[{style}]{o.status.value}[/{style}]",
                o.reached.value,
                o.failed_stage.value if o.failed_stage else "",
                o.error_kind or "",
                escape(o.error or ""),
            )

        console.print(t)


out = Out()
