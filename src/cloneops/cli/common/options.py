"""Common CLI options for the CLI."""

import typer

EnvFileOpt = typer.Option(
    None,
    "--env-file",
    help="Load settings from this .env file before reading the environment",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every teardown step (DEBUG)",
)

HostOpt = typer.Option(
    ...,
    "--host",
    "-H",
    help="Host name substring (case-insensitive). This is reusable.",
    show_default=False,
)

DatabaseOpt = typer.Option(
    [],
    "--database",
    "-d",
    help="Regex on database name to include. This is reusable.",
    show_default=False,
)

ExcludeDatabaseOpt = typer.Option(
    [],
    "--exclude-database",
    "-x",
    help="Regex on database name to exclude (wins over --database). This is reusable.",
    show_default=False,
)

AllOpt = typer.Option(
    False,
    "--all",
    help="Remove every clone on the matched hosts, ignoring name filters and selection UI",
)

SqlUserOpt = typer.Option(
    None,
    "--sql-user",
    help="SQL login for the clone instances (password: CLONEOPS_SQL_PASSWORD or prompt)",
)

UserOpt = typer.Option(
    None,
    "--user",
    help="Identity used to delete clone files (password: CLONEOPS_FS_PASSWORD or prompt)",
)

InteractiveOpt = typer.Option(
    False,
    "--interactive",
    "-i",
    help="Pick the clones to remove from the matched list",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show which clones would be removed, but don't remove anything",
)

YesOpt = typer.Option(False, "--yes", help="Skip confirmation prompt")
