"""CLI application for database clone operations."""

import typer

from cloneops.cli.commands.clones import clones_app

app = typer.Typer(
    help="clone-ops - database clone tooling",
    no_args_is_help=True,
)

app.add_typer(clones_app, name="clones", help="List and remove database clones.")


if __name__ == "__main__":
    app()
