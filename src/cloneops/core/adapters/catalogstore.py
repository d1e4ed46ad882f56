from __future__ import annotations

import logging

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    func,
    inspect,
    select,
)
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from cloneops.core.errors import (
    CatalogDeleteFailed,
    ConfigurationInvalid,
    HostQueryFailed,
)
from cloneops.core.models import CloneRecord

logger = logging.getLogger(__name__)

metadata = MetaData()

host_table = Table(
    "Host",
    metadata,
    Column("HostID", Integer, primary_key=True),
    Column("HostName", String(255), nullable=False),
)

clone_table = Table(
    "Clone",
    metadata,
    Column("CloneID", Integer, primary_key=True),
    Column("HostID", Integer, ForeignKey("Host.HostID"), nullable=False),
    Column("CloneLocation", String(1024), nullable=False),
    Column("AccessPath", String(1024), nullable=False),
    Column("SqlInstance", String(255), nullable=False),
    Column("DatabaseName", String(255), nullable=False),
    Column("IsEnabled", Boolean, nullable=False, default=True),
)


class CatalogStore:
    """SQLAlchemy access to the clone catalog (Host and Clone tables)."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_url(cls, url: URL | str) -> "CatalogStore":
        """Create a store for the catalog at `url`."""
        try:
            engine = create_engine(url, pool_pre_ping=True)
        except (SQLAlchemyError, ImportError) as exc:
            raise ConfigurationInvalid(f"Cannot open catalog: {exc}") from exc
        return cls(engine)

    def check_initialized(self) -> None:
        """Raise ConfigurationInvalid unless the catalog is reachable and has its tables."""
        try:
            with self.engine.connect() as conn:
                insp = inspect(conn)
                missing = [
                    t.name for t in (host_table, clone_table) if not insp.has_table(t.name)
                ]
        except SQLAlchemyError as exc:
            raise ConfigurationInvalid(f"Catalog is not reachable: {exc}") from exc
        if missing:
            raise ConfigurationInvalid(
                f"Catalog is not initialized (missing tables: {', '.join(missing)})."
            )

    def find_clones(self, host_pattern: str) -> list[CloneRecord]:
        """Return clones on hosts whose name contains `host_pattern` (case-insensitive)."""
        h, c = host_table.c, clone_table.c
        stmt = (
            select(
                h.HostName,
                c.DatabaseName,
                c.SqlInstance,
                c.CloneLocation,
                c.AccessPath,
                c.IsEnabled,
            )
            .select_from(clone_table.join(host_table, c.HostID == h.HostID))
            .where(func.lower(h.HostName).contains(host_pattern.lower(), autoescape=True))
            .order_by(h.HostName, c.CloneID)
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise HostQueryFailed(host_pattern, str(exc)) from exc

        return [
            CloneRecord(
                host_name=row.HostName,
                database_name=row.DatabaseName,
                sql_instance=row.SqlInstance,
                clone_location=row.CloneLocation,
                access_path=row.AccessPath,
                is_enabled=bool(row.IsEnabled),
            )
            for row in rows
        ]

    def delete_clone(self, host_name: str, clone_location: str) -> int:
        """
        Delete the clone row for exactly (host_name, clone_location).

        The clone row is tied to its owning host through Clone.HostID.

        Returns:
            Number of deleted rows: 1, or 0 if the row was already gone.

        Raises:
            CatalogDeleteFailed: On database errors, or if more than one row
                matched (the delete is rolled back in that case).
        """
        c = clone_table.c
        owner_ids = select(host_table.c.HostID).where(
            host_table.c.HostName == host_name
        )
        stmt = delete(clone_table).where(
            c.CloneLocation == clone_location,
            c.HostID.in_(owner_ids),
        )
        try:
            with self.engine.begin() as conn:
                deleted = conn.execute(stmt).rowcount
                if deleted > 1:
                    raise CatalogDeleteFailed(
                        host_name,
                        clone_location,
                        f"{deleted} rows matched, expected at most one",
                    )
        except SQLAlchemyError as exc:
            raise CatalogDeleteFailed(host_name, clone_location, str(exc)) from exc

        if deleted == 0:
            logger.debug("Catalog row for %s on %s already gone", clone_location, host_name)
        return deleted
