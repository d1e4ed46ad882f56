from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from sqlalchemy import create_engine, insert  # noqa: E402

from cloneops.core.adapters.catalogstore import (  # noqa: E402
    CatalogStore,
    clone_table,
    host_table,
    metadata,
)


def add_clone(
    store: CatalogStore,
    *,
    host: str,
    database: str,
    location: str | None = None,
    access_path: str | None = None,
    instance: str = "SQL01",
) -> None:
    """Insert a clone row (and its host row if missing) into a test catalog."""
    with store.engine.begin() as conn:
        host_id = conn.execute(
            host_table.select().where(host_table.c.HostName == host)
        ).scalar()
        if host_id is None:
            host_id = conn.execute(
                insert(host_table).values(HostName=host)
            ).inserted_primary_key[0]
        conn.execute(
            insert(clone_table).values(
                HostID=host_id,
                CloneLocation=location or rf"C:\clones\{database}.vhdx",
                AccessPath=access_path or rf"C:\mounts\{database}",
                SqlInstance=instance,
                DatabaseName=database,
                IsEnabled=True,
            )
        )


@pytest.fixture
def catalog(tmp_path) -> CatalogStore:
    engine = create_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    metadata.create_all(engine)
    return CatalogStore(engine)


@pytest.fixture
def seed(catalog):
    """Return a helper that inserts clone rows into the `catalog` fixture."""

    def _seed(**kwargs) -> None:
        add_clone(catalog, **kwargs)

    return _seed
