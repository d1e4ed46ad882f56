"""Clone resolution against the catalog.

Resolves the clone records to work on from host-name patterns and
database-name filters. Host queries are isolated from each other: a failing
host is reported and the remaining hosts are still resolved.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from cloneops.core.errors import HostQueryFailed
from cloneops.core.models import CloneListing, CloneRecord, HostQueryFailure
from cloneops.core.selectors import build_name_filter, filter_records

logger = logging.getLogger(__name__)


class CloneQueryAdapter(Protocol):
    """Interface for catalog lookups used by clone resolution."""

    def find_clones(self, host_pattern: str) -> list[CloneRecord]:
        """Return clones on hosts whose name contains the pattern."""
        ...


def list_clones(
    store: CloneQueryAdapter,
    host_names: Iterable[str],
    *,
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
    all_: bool = False,
) -> CloneListing:
    """
    Resolve clone records for the given hosts and name filters.

    Hosts are queried in the given order and results are aggregated in query
    order. A record matched by more than one host pattern is kept once.
    Filtering runs after aggregation: include patterns first, then exclude
    patterns, so exclude always wins.

    Args:
        store: Catalog adapter.
        host_names: Case-insensitive substrings of host names.
        include: Database-name patterns to keep (None/empty keeps all).
        exclude: Database-name patterns to drop.
        all_: Ignore include/exclude patterns and return every clone.

    Returns:
        CloneListing with the filtered records and per-host query failures.

    Raises:
        ValueError: If a name pattern is invalid (checked before any query).
    """
    if all_:
        include, exclude = None, None
    else:
        include = list(include or [])
        exclude = list(exclude or [])
        # fail on bad patterns before any catalog query
        build_name_filter(include=include, exclude=exclude)

    records: list[CloneRecord] = []
    failures: list[HostQueryFailure] = []
    seen: set[tuple[str, str]] = set()

    for host in dict.fromkeys(host_names):
        try:
            found = store.find_clones(host)
        except HostQueryFailed as exc:
            logger.warning("%s", exc)
            failures.append(HostQueryFailure(host_name=host, error=str(exc)))
            continue
        except Exception as exc:  # noqa: BLE001
            logger.warning("Catalog query for host '%s' failed: %s", host, exc)
            failures.append(HostQueryFailure(host_name=host, error=str(exc)))
            continue

        logger.info("Host pattern '%s' matched %d clone(s)", host, len(found))
        for record in found:
            if record.key in seen:
                continue
            seen.add(record.key)
            records.append(record)

    return CloneListing(
        records=filter_records(records, include=include, exclude=exclude),
        failures=failures,
    )
