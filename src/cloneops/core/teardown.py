"""Clone teardown orchestration.

Drives each resolved clone record through the release sequence:

  1) connect to the instance and drop the database
  2) dismount the differencing disk image
  3) delete the mount path, then the image file
  4) delete the catalog row

Each step yields an explicit StepResult. The first failed step ends the
sequence for that record only; the remaining records are still processed.
Nothing is retried and completed steps are not undone. Every step treats an
already-released resource as a no-op, so re-running teardown is the
recovery path for a record left half-removed.
"""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Any, Callable, Iterable, Protocol

from cloneops.core.errors import CloneOpsError
from cloneops.core.models import (
    CloneRecord,
    Credential,
    OutcomeStatus,
    StepResult,
    TeardownCredentials,
    TeardownOutcome,
    TeardownStage,
)

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_KIND = "Unexpected"

StepCallback = Callable[[CloneRecord, StepResult], None]


class EngineAdapter(Protocol):
    """Interface for database engine operations."""

    def connect(self, instance: str, credential: Credential | None) -> Any:
        """Open a connection handle (must support close())."""
        ...

    def remove_database(self, handle: Any, name: str) -> bool:
        """Drop a database; False if it did not exist."""
        ...


class DiskAdapter(Protocol):
    """Interface for virtual disk operations."""

    def dismount(self, path: str, host: str | None = None) -> bool:
        """Dismount a disk image on `host`; False if it was not mounted."""
        ...


class FileAdapter(Protocol):
    """Interface for filesystem removal."""

    def remove(
        self, path: str, identity: Credential | None = None, host: str | None = None
    ) -> bool:
        """Delete a path on `host`; False if it was already absent."""
        ...


class CatalogDeleteAdapter(Protocol):
    """Interface for catalog row deletion."""

    def delete_clone(self, host_name: str, clone_location: str) -> int:
        """Delete the row for the pair; return number of rows deleted."""
        ...


class CloneTeardownOrchestrator:
    """Run the teardown pipeline over clone records with per-record isolation."""

    def __init__(
        self,
        engine: EngineAdapter,
        disks: DiskAdapter,
        files: FileAdapter,
        store: CatalogDeleteAdapter,
    ) -> None:
        self.engine = engine
        self.disks = disks
        self.files = files
        self.store = store

    def teardown(
        self,
        records: Iterable[CloneRecord],
        credentials: TeardownCredentials | None = None,
        *,
        dry_run: bool = False,
        on_step: StepCallback | None = None,
    ) -> list[TeardownOutcome]:
        """
        Tear down every record in order.

        Args:
            records: Records in aggregation order.
            credentials: Engine and filesystem credentials.
            dry_run: Report PLANNED outcomes without touching anything.
            on_step: Optional callback invoked after every step.

        Returns:
            One TeardownOutcome per record, in input order.
        """
        credentials = credentials or TeardownCredentials()
        outcomes: list[TeardownOutcome] = []

        for record in records:
            if dry_run:
                outcomes.append(
                    TeardownOutcome(
                        record=record,
                        status=OutcomeStatus.PLANNED,
                        reached=TeardownStage.RESOLVED,
                    )
                )
                continue
            outcomes.append(self.teardown_one(record, credentials, on_step=on_step))

        return outcomes

    def teardown_one(
        self,
        record: CloneRecord,
        credentials: TeardownCredentials,
        *,
        on_step: StepCallback | None = None,
    ) -> TeardownOutcome:
        """Run the pipeline for one record, stopping at its first failed step."""
        steps: list[StepResult] = []
        reached = TeardownStage.RESOLVED

        for stage, action in self._pipeline(record, credentials):
            result = self._attempt(record, stage, action)
            steps.append(result)
            if on_step is not None:
                on_step(record, result)

            if not result.ok:
                logger.warning(
                    "Teardown of %s on %s failed at %s: %s",
                    record.database_name,
                    record.host_name,
                    stage.value,
                    result.error,
                )
                return TeardownOutcome(
                    record=record,
                    status=OutcomeStatus.FAILED,
                    reached=reached,
                    steps=tuple(steps),
                    failed_stage=stage,
                    error=result.error,
                    error_kind=result.error_kind,
                )
            reached = stage

        status = (
            OutcomeStatus.REMOVED
            if any(s.changed for s in steps)
            else OutcomeStatus.ALREADY_REMOVED
        )
        return TeardownOutcome(
            record=record, status=status, reached=reached, steps=tuple(steps)
        )

    def _pipeline(
        self, record: CloneRecord, credentials: TeardownCredentials
    ) -> list[tuple[TeardownStage, Callable[[], bool]]]:
        def remove_database() -> bool:
            with closing(
                self.engine.connect(record.sql_instance, credentials.engine)
            ) as handle:
                return self.engine.remove_database(handle, record.database_name)

        def dismount_disk() -> bool:
            return self.disks.dismount(record.clone_location, host=record.host_name)

        def remove_files() -> bool:
            # A failure on the mount path stops before the image file is touched
            access_removed = self.files.remove(
                record.access_path, credentials.filesystem, host=record.host_name
            )
            image_removed = self.files.remove(
                record.clone_location, credentials.filesystem, host=record.host_name
            )
            return access_removed or image_removed

        def delete_catalog_row() -> bool:
            return self.store.delete_clone(record.host_name, record.clone_location) > 0

        return [
            (TeardownStage.DATABASE_REMOVED, remove_database),
            (TeardownStage.DISK_DISMOUNTED, dismount_disk),
            (TeardownStage.FILES_REMOVED, remove_files),
            (TeardownStage.CATALOG_ROW_DELETED, delete_catalog_row),
        ]

    @staticmethod
    def _attempt(
        record: CloneRecord, stage: TeardownStage, action: Callable[[], bool]
    ) -> StepResult:
        try:
            changed = bool(action())
        except CloneOpsError as exc:
            return StepResult(
                stage=stage,
                ok=False,
                changed=False,
                error=str(exc),
                error_kind=type(exc).__name__,
            )
        except Exception as exc:  # noqa: BLE001 - surface per-clone errors
            return StepResult(
                stage=stage,
                ok=False,
                changed=False,
                error=f"{type(exc).__name__}: {exc}",
                error_kind=UNEXPECTED_ERROR_KIND,
            )

        if changed:
            logger.info("%s: %s", record.database_name, stage.value)
        else:
            logger.debug("%s: %s (already done)", record.database_name, stage.value)
        return StepResult(stage=stage, ok=True, changed=changed)
