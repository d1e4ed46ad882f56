"""Core clone domain models.

This module defines the immutable data structures passed between the catalog
query, the teardown orchestrator and the CLI. It is intentionally free of
SQLAlchemy types and CLI concerns so that the same models can be used by
automation scripts and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class CloneRecord:
    """
    Snapshot of one catalog row describing a provisioned clone.

    Attributes:
        host_name: Host that owns the clone.
        database_name: Name of the database as attached to the instance.
        sql_instance: Address of the database engine instance.
        clone_location: Path of the differencing disk image file.
        access_path: Path where the disk's volume is mounted.
        is_enabled: Administrative flag (never changed by teardown).
    """

    host_name: str
    database_name: str
    sql_instance: str
    clone_location: str
    access_path: str
    is_enabled: bool = True

    @property
    def key(self) -> tuple[str, str]:
        """The (host, location) pair that identifies the catalog row."""
        return self.host_name, self.clone_location


@dataclass(frozen=True)
class Credential:
    """Username/password pair. The password never appears in repr()."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class TeardownCredentials:
    """Credentials used during teardown (None means integrated/current user)."""

    engine: Credential | None = None
    filesystem: Credential | None = None


class TeardownStage(str, Enum):
    """
    Stages a record passes through during teardown.

    Each pipeline step is named after the stage it reaches when it succeeds.
    """

    RESOLVED = "Resolved"
    DATABASE_REMOVED = "DatabaseRemoved"
    DISK_DISMOUNTED = "DiskDismounted"
    FILES_REMOVED = "FilesRemoved"
    CATALOG_ROW_DELETED = "CatalogRowDeleted"


class OutcomeStatus(str, Enum):
    """Terminal status of a record after a teardown pass."""

    REMOVED = "REMOVED"
    ALREADY_REMOVED = "ALREADY_REMOVED"
    FAILED = "FAILED"
    PLANNED = "PLANNED"


@dataclass(frozen=True)
class StepResult:
    """
    Result of a single teardown step.

    Attributes:
        stage: Stage the step reaches on success.
        ok: Whether the step succeeded.
        changed: False when the step was a no-op because the resource
                 was already gone.
        error: Error message when the step failed.
        error_kind: Name of the failure kind (e.g. "ConnectionFailed"), or
                    "Unexpected" for errors outside the clone-ops hierarchy.
    """

    stage: TeardownStage
    ok: bool
    changed: bool = True
    error: str | None = None
    error_kind: str | None = None


@dataclass(frozen=True)
class TeardownOutcome:
    """Per-record outcome of a teardown pass."""

    record: CloneRecord
    status: OutcomeStatus
    reached: TeardownStage
    steps: tuple[StepResult, ...] = ()
    failed_stage: TeardownStage | None = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED


@dataclass(frozen=True)
class HostQueryFailure:
    """A host whose catalog query failed during clone resolution."""

    host_name: str
    error: str


@dataclass(frozen=True)
class CloneListing:
    """Resolved clone records plus the hosts that could not be queried."""

    records: list[CloneRecord]
    failures: list[HostQueryFailure]
