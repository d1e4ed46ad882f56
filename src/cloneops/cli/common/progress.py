"""Progress formatting utilities for the CLI."""

from __future__ import annotations

from rich.console import Group
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from cloneops.cli.common.output import console, truncate
from cloneops.core.models import (
    CloneRecord,
    StepResult,
    TeardownCredentials,
    TeardownOutcome,
    TeardownStage,
)
from cloneops.core.teardown import CloneTeardownOrchestrator

_MAX_DB_NAME_WIDTH = 56
_LAST_STAGE = TeardownStage.CATALOG_ROW_DELETED


def _display_clone_label(record: CloneRecord, *, name_width: int) -> str:
    """Render `<database>  (host: <host>)` with an aligned host column."""
    short_name = truncate(record.database_name, _MAX_DB_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  (host: {record.host_name})"


def teardown_with_progress(
    orchestrator: CloneTeardownOrchestrator,
    records: list[CloneRecord],
    credentials: TeardownCredentials,
) -> list[TeardownOutcome]:
    """
    Tear down records while showing:
      - an overall progress bar (x/y clones + failures)
      - per-clone rows with the last stage reached and elapsed timers

    Returns the orchestrator's outcomes unchanged.
    """
    name_width = max(
        (len(truncate(r.database_name, _MAX_DB_NAME_WIDTH)) for r in records),
        default=0,
    )
    failures = 0

    overall = Progress(
        TextColumn("[bold]Overall[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("failures=[bold red]{task.fields[failures]}[/]"),
        TimeElapsedColumn(),
        console=console,
    )
    per_clone = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[clone]}[/]"),
        TextColumn("[{task.fields[style]}]{task.fields[stage]}[/{task.fields[style]}]"),
        TimeElapsedColumn(),
        console=console,
    )

    overall_task_id = overall.add_task("overall", total=max(len(records), 1), failures=0)
    task_ids = {
        r.key: per_clone.add_task(
            "",
            total=1,
            clone=escape(_display_clone_label(r, name_width=name_width)),
            stage=TeardownStage.RESOLVED.value,
            style="yellow",
        )
        for r in records
    }

    def on_step(record: CloneRecord, result: StepResult) -> None:
        nonlocal failures
        task_id = task_ids[record.key]
        if not result.ok:
            failures += 1
            per_clone.update(
                task_id, stage=f"FAILED at {result.stage.value}", style="red", completed=1
            )
            overall.update(overall_task_id, failures=failures)
            overall.advance(overall_task_id, 1)
            return

        done = result.stage == _LAST_STAGE
        per_clone.update(
            task_id,
            stage="DONE" if done else result.stage.value,
            style="green" if done else "yellow",
            completed=1 if done else 0,
        )
        if done:
            overall.advance(overall_task_id, 1)

    group = Group(overall, per_clone)

    with Live(group, console=console, refresh_per_second=10, transient=True):
        outcomes = orchestrator.teardown(records, credentials, on_step=on_step)
        overall.update(overall_task_id, completed=len(records))

    return outcomes
