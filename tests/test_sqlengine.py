from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from cloneops.core.adapters.sqlengine import SqlEngineClient
from cloneops.core.errors import ConnectionFailed, DatabaseRemovalFailed
from cloneops.core.models import Credential


class _Conn:
    def __init__(self, existing: set[str], drop_error: Exception | None = None):
        self.existing = existing
        self.drop_error = drop_error
        self.statements: list[str] = []
        self.info = {"instance": "SQL01"}
        self.dialect = SimpleNamespace(
            identifier_preparer=SimpleNamespace(
                quote_identifier=lambda name: "[" + name.replace("]", "]]") + "]"
            )
        )

    def execute(self, stmt, params=None):
        sql = str(stmt)
        self.statements.append(sql)
        if sql.startswith("SELECT"):
            row = (1,) if params["name"] in self.existing else None
            return SimpleNamespace(first=lambda: row)
        if self.drop_error:
            raise self.drop_error
        return None


def test_remove_database_drops_existing_database():
    conn = _Conn({"Clone1_Test"})

    assert SqlEngineClient().remove_database(conn, "Clone1_Test") is True
    assert conn.statements[-1] == "DROP DATABASE [Clone1_Test]"


def test_remove_database_is_noop_when_missing():
    conn = _Conn(set())

    assert SqlEngineClient().remove_database(conn, "Clone1_Test") is False
    assert not any(s.startswith("DROP") for s in conn.statements)


def test_remove_database_surfaces_active_session_errors():
    error = OperationalError("DROP DATABASE", {}, Exception("database is in use"))
    conn = _Conn({"Clone1_Test"}, drop_error=error)

    with pytest.raises(DatabaseRemovalFailed) as excinfo:
        SqlEngineClient().remove_database(conn, "Clone1_Test")

    assert excinfo.value.instance == "SQL01"
    assert excinfo.value.database == "Clone1_Test"
    assert "in use" in str(excinfo.value)


def test_connect_uses_autocommit_and_tags_instance():
    seen = {}
    conn = SimpleNamespace(info={})

    def _factory(url, **kwargs):
        seen["url"] = url
        seen.update(kwargs)
        return SimpleNamespace(connect=lambda: conn)

    client = SqlEngineClient(engine_factory=_factory)
    handle = client.connect(r"HOST1\INST", Credential("sa", "p;w}d"))

    assert handle is conn
    assert handle.info["instance"] == r"HOST1\INST"
    assert seen["isolation_level"] == "AUTOCOMMIT"
    odbc = seen["url"].query["odbc_connect"]
    assert r"SERVER=HOST1\INST" in odbc
    assert "DATABASE={master}" in odbc
    assert "UID={sa}" in odbc
    assert "PWD={p;w}}d}" in odbc


def test_connect_without_credential_uses_integrated_auth():
    client = SqlEngineClient()

    odbc = client.url_for("SQL01", None).query["odbc_connect"]

    assert "Trusted_Connection=yes" in odbc
    assert "UID=" not in odbc


def test_connect_failure_raises_connection_failed():
    def _factory(url, **kwargs):
        def _connect():
            raise OperationalError("connect", {}, Exception("login timeout"))

        return SimpleNamespace(connect=_connect)

    with pytest.raises(ConnectionFailed) as excinfo:
        SqlEngineClient(engine_factory=_factory).connect("SQL01", None)

    assert excinfo.value.instance == "SQL01"
