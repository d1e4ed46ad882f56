import pytest
from sqlalchemy import create_engine, func, select

from cloneops.core.adapters.catalogstore import CatalogStore, clone_table
from cloneops.core.errors import (
    CatalogDeleteFailed,
    ConfigurationInvalid,
    HostQueryFailed,
)


def _locations(store: CatalogStore) -> list[str]:
    with store.engine.connect() as conn:
        return sorted(conn.execute(select(clone_table.c.CloneLocation)).scalars())


def test_check_initialized_passes_with_tables(catalog):
    catalog.check_initialized()


def test_check_initialized_rejects_empty_database(tmp_path):
    store = CatalogStore(create_engine(f"sqlite:///{tmp_path / 'empty.db'}"))

    with pytest.raises(ConfigurationInvalid, match="missing tables: Host, Clone"):
        store.check_initialized()


def test_check_initialized_rejects_unreachable_catalog(tmp_path):
    missing_dir = tmp_path / "nope" / "catalog.db"
    store = CatalogStore(create_engine(f"sqlite:///{missing_dir}"))

    with pytest.raises(ConfigurationInvalid, match="not reachable"):
        store.check_initialized()


def test_find_clones_matches_host_substring_case_insensitively(catalog, seed):
    seed(host="SQLHOST1", database="Clone1_Test")
    seed(host="sqlhost2", database="Clone2_Test")
    seed(host="OTHER", database="Clone3_Test")

    records = catalog.find_clones("SqlHost")

    assert [(r.host_name, r.database_name) for r in records] == [
        ("SQLHOST1", "Clone1_Test"),
        ("sqlhost2", "Clone2_Test"),
    ]
    assert all("sqlhost" in r.host_name.lower() for r in records)


def test_find_clones_maps_columns(catalog, seed):
    seed(
        host="HOST1",
        database="Clone1_Test",
        location=r"D:\vhd\Clone1.vhdx",
        access_path=r"D:\mnt\Clone1",
        instance=r"HOST1\INST",
    )

    (record,) = catalog.find_clones("host1")

    assert record.database_name == "Clone1_Test"
    assert record.clone_location == r"D:\vhd\Clone1.vhdx"
    assert record.access_path == r"D:\mnt\Clone1"
    assert record.sql_instance == r"HOST1\INST"
    assert record.is_enabled is True


def test_find_clones_treats_wildcards_literally(catalog, seed):
    seed(host="HOST_1", database="a")
    seed(host="HOSTX1", database="b")

    assert [r.database_name for r in catalog.find_clones("host_1")] == ["a"]


def test_find_clones_wraps_database_errors(catalog):
    with catalog.engine.begin() as conn:
        conn.exec_driver_sql('DROP TABLE "Clone"')

    with pytest.raises(HostQueryFailed) as excinfo:
        catalog.find_clones("HOST2")

    assert excinfo.value.host_name == "HOST2"


def test_delete_clone_removes_exactly_the_matching_pair(catalog, seed):
    seed(host="HOST1", database="Clone1_Test", location=r"C:\clones\1.vhdx")
    seed(host="HOST1", database="Clone2_Test", location=r"C:\clones\2.vhdx")
    seed(host="HOST2", database="Clone1_Test", location=r"C:\clones\1.vhdx")

    deleted = catalog.delete_clone("HOST1", r"C:\clones\1.vhdx")

    assert deleted == 1
    remaining = [(r.host_name, r.clone_location) for r in catalog.find_clones("HOST")]
    assert remaining == [
        ("HOST1", r"C:\clones\2.vhdx"),
        ("HOST2", r"C:\clones\1.vhdx"),
    ]


def test_delete_clone_ignores_other_hosts_and_locations(catalog, seed):
    seed(host="HOST1", database="Clone1_Test", location=r"C:\clones\1.vhdx")

    assert catalog.delete_clone("HOST9", r"C:\clones\1.vhdx") == 0
    assert catalog.delete_clone("HOST1", r"C:\clones\9.vhdx") == 0
    assert _locations(catalog) == [r"C:\clones\1.vhdx"]


def test_delete_clone_is_a_noop_when_row_is_gone(catalog, seed):
    seed(host="HOST1", database="Clone1_Test", location=r"C:\clones\1.vhdx")

    assert catalog.delete_clone("HOST1", r"C:\clones\1.vhdx") == 1
    assert catalog.delete_clone("HOST1", r"C:\clones\1.vhdx") == 0


def test_delete_clone_rolls_back_when_pair_is_not_unique(catalog, seed):
    seed(host="HOST1", database="A", location=r"C:\clones\dup.vhdx")
    seed(host="HOST1", database="B", location=r"C:\clones\dup.vhdx")

    with pytest.raises(CatalogDeleteFailed, match="2 rows matched"):
        catalog.delete_clone("HOST1", r"C:\clones\dup.vhdx")

    with catalog.engine.connect() as conn:
        count = conn.execute(select(func.count()).select_from(clone_table)).scalar()
    assert count == 2
