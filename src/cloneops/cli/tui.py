"""Terminal UI utilities for clone selection."""

from __future__ import annotations

import questionary

from cloneops.cli.common.output import truncate
from cloneops.cli.common.tui_style import QUESTIONARY_STYLE_SELECT
from cloneops.core.models import CloneRecord

_MAX_DB_NAME_WIDTH = 96


def _clone_choice_title(record: CloneRecord, *, name_width: int) -> str:
    """Format one clone as `<database>  (host: <host>)` with aligned host column."""
    short_name = truncate(record.database_name, _MAX_DB_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  (host: {record.host_name})"


def select_clones(records: list[CloneRecord]) -> list[CloneRecord]:
    """Display a checkbox prompt to select clones from a list.

    Returns:
        The selected records in their original order, or an empty list.
    """
    shown_names = [truncate(r.database_name, _MAX_DB_NAME_WIDTH) for r in records]
    name_width = max((len(name) for name in shown_names), default=0)

    choices = [
        questionary.Choice(title=_clone_choice_title(r, name_width=name_width), value=r)
        for r in records
    ]

    picked = (
        questionary.checkbox(
            "Select clones to remove:",
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
        ).ask()
        or []
    )
    picked_keys = {r.key for r in picked}
    return [r for r in records if r.key in picked_keys]
