"""Clone selector abstractions and implementations.

This module defines the selector system used to decide whether a clone
record matches the database-name filters given by the user. Selectors
encapsulate matching logic and can be composed (ANY / NOT) to express the
include/exclude rules of a teardown or listing.

Patterns are Python regular expressions searched anywhere in the database
name, case-insensitively, so a plain word behaves as a substring match.
The same semantics apply to include and exclude patterns.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from cloneops.core.models import CloneRecord


class CloneSelector(ABC):
    """
    Abstract base class for all clone selectors.

    A CloneSelector encapsulates a single piece of matching logic that
    determines whether a given CloneRecord satisfies a criterion.
    """

    @abstractmethod
    def matches(self, record: CloneRecord) -> bool:
        """
        Determine whether the given record matches this selector.

        Args:
            record: CloneRecord instance to evaluate.

        Returns:
            True if the record matches the selector criteria, False otherwise.
        """
        ...


class DatabaseNameSelector(CloneSelector):
    """
    Selector that matches clones based on a regular expression applied
    to the database name.
    """

    def __init__(self, pattern: str):
        """
        Create a database-name selector.

        Args:
            pattern: Regular expression searched in the database name.
        """
        try:
            self.regex = re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            raise ValueError(f"Invalid database pattern '{pattern}': {exc}") from exc

    def matches(self, record: CloneRecord) -> bool:
        return bool(self.regex.search(record.database_name))


class AnySelector(CloneSelector):
    """
    Composite selector that matches a record if any child selector matches.
    """

    def __init__(self, selectors: list[CloneSelector]):
        self.selectors = selectors

    def matches(self, record: CloneRecord) -> bool:
        return any(s.matches(record) for s in self.selectors)


class NotSelector(CloneSelector):
    """Inverts a child selector."""

    def __init__(self, selector: CloneSelector):
        self.selector = selector

    def matches(self, record: CloneRecord) -> bool:
        return not self.selector.matches(record)


class MatchAll(CloneSelector):
    """Selector that accepts every record."""

    def matches(self, record: CloneRecord) -> bool:
        return True


def build_name_filter(
    *,
    include: Iterable[str] | None,
    exclude: Iterable[str] | None,
) -> tuple[CloneSelector, CloneSelector | None]:
    """
    Translate include/exclude patterns into selectors.

    Args:
        include: Patterns of which at least one must match. Empty or None
                 means every record passes the include stage.
        exclude: Patterns of which none may match.

    Returns:
        A (keep, drop) pair. `drop` is None when there are no exclude patterns.

    Raises:
        ValueError: If any pattern is not a valid regular expression.
    """
    include_patterns = [p for p in (include or []) if p]
    exclude_patterns = [p for p in (exclude or []) if p]

    keep: CloneSelector = (
        AnySelector([DatabaseNameSelector(p) for p in include_patterns])
        if include_patterns
        else MatchAll()
    )
    drop = (
        AnySelector([DatabaseNameSelector(p) for p in exclude_patterns])
        if exclude_patterns
        else None
    )
    return keep, drop


def filter_records(
    records: Iterable[CloneRecord],
    *,
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> list[CloneRecord]:
    """
    Apply include then exclude filtering, preserving record order.

    A record matching both an include and an exclude pattern is dropped.
    """
    keep, drop = build_name_filter(include=include, exclude=exclude)
    kept = [r for r in records if keep.matches(r)]
    if drop is None:
        return kept
    not_dropped = NotSelector(drop)
    return [r for r in kept if not_dropped.matches(r)]
