from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from cloneops.core.config import DEFAULT_ODBC_DRIVER, mssql_url, odbc_connection_string
from cloneops.core.errors import ConnectionFailed, DatabaseRemovalFailed
from cloneops.core.models import Credential

logger = logging.getLogger(__name__)


class SqlEngineClient:
    """Adapter around SQL Server instances hosting clone databases."""

    def __init__(
        self,
        *,
        driver: str = DEFAULT_ODBC_DRIVER,
        trust_server_certificate: bool = True,
        engine_factory: Callable[..., Engine] = create_engine,
    ) -> None:
        self.driver = driver
        self.trust_server_certificate = trust_server_certificate
        self.engine_factory = engine_factory

    def url_for(self, instance: str, credential: Credential | None) -> URL:
        """Build the connection URL for the `master` database of an instance."""
        return mssql_url(
            odbc_connection_string(
                server=instance,
                database="master",
                driver=self.driver,
                username=credential.username if credential else None,
                password=credential.password if credential else None,
                trust_server_certificate=self.trust_server_certificate,
            )
        )

    def connect(self, instance: str, credential: Credential | None) -> Connection:
        """Open an autocommit connection to the instance."""
        try:
            engine = self.engine_factory(
                self.url_for(instance, credential),
                isolation_level="AUTOCOMMIT",
                poolclass=NullPool,
            )
            conn = engine.connect()
        except (SQLAlchemyError, ImportError) as exc:
            raise ConnectionFailed(instance, str(exc)) from exc
        conn.info["instance"] = instance
        return conn

    def remove_database(self, handle: Connection, name: str) -> bool:
        """
        Drop a database from the connected instance.

        Returns:
            True if the database was dropped, False if it did not exist.

        Raises:
            DatabaseRemovalFailed: If the drop fails (e.g. blocked by active
                sessions). The error is not retried.
        """
        instance = handle.info.get("instance", "?")
        try:
            exists = handle.execute(
                text("SELECT 1 FROM sys.databases WHERE name = :name"),
                {"name": name},
            ).first()
            if exists is None:
                logger.debug("Database %s not present on %s", name, instance)
                return False
            quoted = handle.dialect.identifier_preparer.quote_identifier(name)
            handle.execute(text(f"DROP DATABASE {quoted}"))
        except SQLAlchemyError as exc:
            raise DatabaseRemovalFailed(instance, name, str(exc)) from exc
        return True
