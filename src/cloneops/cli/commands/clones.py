"""Commands for listing and removing database clones."""

from __future__ import annotations

import typer

from cloneops.cli.common.context import (
    CliOptions,
    CloneAppContext,
    build_clone_context,
    resolve_credential,
)
from cloneops.cli.common.exits import EXIT_FAILED, EXIT_OK, EXIT_USAGE, die, warn_exit
from cloneops.cli.common.options import (
    AllOpt,
    DatabaseOpt,
    DryRunOpt,
    EnvFileOpt,
    ExcludeDatabaseOpt,
    HostOpt,
    InteractiveOpt,
    SqlUserOpt,
    UserOpt,
    VerboseOpt,
    YesOpt,
)
from cloneops.cli.common.output import out
from cloneops.cli.common.progress import teardown_with_progress
from cloneops.cli.tui import select_clones
from cloneops.core.catalog import list_clones
from cloneops.core.models import CloneListing, OutcomeStatus, TeardownCredentials

clones_app = typer.Typer(
    help="List and remove database clones.",
    no_args_is_help=True,
)


@clones_app.callback()
def _init(
    ctx: typer.Context,
    env_file: str | None = EnvFileOpt,
    verbose: bool = VerboseOpt,
):
    """Capture shared options; the catalog is opened by each command."""
    ctx.obj = CliOptions(env_file=env_file, verbose=verbose)


def _resolve_or_exit(
    appctx: CloneAppContext,
    hosts: list[str],
    database: list[str],
    exclude_database: list[str],
    all_: bool,
) -> CloneListing:
    """Resolve clones, converting invalid patterns into CLI input errors."""
    try:
        with out.status("Resolving clones..."):
            listing = list_clones(
                appctx.store,
                hosts,
                include=database,
                exclude=exclude_database,
                all_=all_,
            )
    except ValueError as exc:
        die(str(exc), code=EXIT_USAGE)

    if listing.failures:
        out.host_failures_table(listing.failures)
    return listing


@clones_app.command("list")
def list_(
    ctx: typer.Context,
    host: list[str] = HostOpt,
    database: list[str] = DatabaseOpt,
    exclude_database: list[str] = ExcludeDatabaseOpt,
):
    """List clones registered in the catalog for the matched hosts."""
    appctx = build_clone_context(ctx.obj)
    listing = _resolve_or_exit(appctx, host, database, exclude_database, False)
    code = EXIT_FAILED if listing.failures else EXIT_OK

    if not listing.records:
        warn_exit("No clones found.", code=code)

    out.header("Clones")
    out.info(f"Hosts: {', '.join(host)} | Clones: {len(listing.records)}")
    out.clones_table(listing.records)
    raise typer.Exit(code)


@clones_app.command()
def remove(
    ctx: typer.Context,
    host: list[str] = HostOpt,
    database: list[str] = DatabaseOpt,
    exclude_database: list[str] = ExcludeDatabaseOpt,
    all_: bool = AllOpt,
    sql_user: str | None = SqlUserOpt,
    user: str | None = UserOpt,
    interactive: bool = InteractiveOpt,
    dry_run: bool = DryRunOpt,
    yes: bool = YesOpt,
):
    """Remove clones: drop database -> dismount disk -> delete files -> delete catalog row."""
    if all_ and (database or exclude_database):
        out.warn("--all given: ignoring --database/--exclude-database.")

    appctx = build_clone_context(ctx.obj)
    listing = _resolve_or_exit(appctx, host, database, exclude_database, all_)
    host_code = EXIT_FAILED if listing.failures else EXIT_OK

    if not listing.records:
        warn_exit("No clones found.", code=host_code)

    out.header("Matched clones")
    out.clones_table(listing.records, title="Matched clones")

    selected = listing.records
    if interactive and not all_:
        selected = select_clones(listing.records)
        if not selected:
            warn_exit("No clones selected.", code=host_code)
        out.header("Selected clones")
        out.clones_table(selected, title="Selected clones")

    out.info(f"Matched: {len(listing.records)} | Selected: {len(selected)}")

    if dry_run:
        out.warn("DRY RUN: no changes will be made.")
        outcomes = appctx.orchestrator.teardown(selected, dry_run=True)
        out.teardown_results_table(outcomes, title="Teardown plan")
        raise typer.Exit(host_code)

    if not yes:
        if not out.confirm("Proceed with removing the selected clones?"):
            warn_exit("Cancelled.")

    credentials = TeardownCredentials(
        engine=resolve_credential(
            sql_user,
            env_var="CLONEOPS_SQL_PASSWORD",
            prompt=f"Password for SQL login {sql_user}:",
        ),
        filesystem=resolve_credential(
            user, env_var="CLONEOPS_FS_PASSWORD", prompt=f"Password for {user}:"
        ),
    )

    outcomes = teardown_with_progress(appctx.orchestrator, selected, credentials)
    out.teardown_results_table(outcomes)

    failed = [o for o in outcomes if o.status == OutcomeStatus.FAILED]
    already = [o for o in outcomes if o.status == OutcomeStatus.ALREADY_REMOVED]
    if already:
        out.warn(f"{len(already)} clone(s) were already removed.")
    if failed:
        out.error(f"Failed to remove {len(failed)} clone(s).")
        raise typer.Exit(EXIT_FAILED)
    if listing.failures:
        out.error(f"Could not query {len(listing.failures)} host(s).")
        raise typer.Exit(EXIT_FAILED)

    out.success(f"Removed {len(outcomes) - len(already)} clone(s).")
