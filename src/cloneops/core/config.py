"""Configuration loading for clone-ops.

Settings come from environment variables. A `.env` file is only read when
explicitly requested (e.g. via `--env-file`).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from cloneops.core.errors import ConfigurationInvalid

DEFAULT_CATALOG_DATABASE = "cloneops"
DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def _default_powershell() -> str:
    return "powershell" if sys.platform == "win32" else "pwsh"


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def odbc_connection_string(
    *,
    server: str,
    database: str,
    driver: str,
    username: str | None = None,
    password: str | None = None,
    trust_server_certificate: bool = True,
) -> str:
    """
    Build an ODBC connection string for SQL Server.

    Without a username the connection uses integrated (trusted) authentication.
    Values are brace-quoted so passwords may contain `;` or `}`.
    """

    def _q(value: str) -> str:
        return "{" + value.replace("}", "}}") + "}"

    parts = [
        f"DRIVER={_q(driver)}",
        f"SERVER={server}",
        f"DATABASE={_q(database)}",
    ]
    if username:
        parts.append(f"UID={_q(username)}")
        parts.append(f"PWD={_q(password or '')}")
    else:
        parts.append("Trusted_Connection=yes")
    if trust_server_certificate:
        parts.append("TrustServerCertificate=yes")
    return ";".join(parts)


def mssql_url(odbc_connect: str) -> URL:
    """Wrap an ODBC connection string into a SQLAlchemy pyodbc URL."""
    return URL.create("mssql+pyodbc", query={"odbc_connect": odbc_connect})


@dataclass(frozen=True)
class Settings:
    """Resolved clone-ops settings."""

    catalog_url: URL
    odbc_driver: str = DEFAULT_ODBC_DRIVER
    trust_server_certificate: bool = True
    powershell: str = "pwsh"
    log_level: str = "WARNING"

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        env_file: str | None = None,
    ) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ).
            env_file: Optional .env file loaded into os.environ first.

        Raises:
            ConfigurationInvalid: If no catalog location is configured or the
                                  catalog URL cannot be parsed.
        """
        if env_file:
            if not os.path.isfile(env_file):
                raise ConfigurationInvalid(f"Env file '{env_file}' does not exist.")
            load_dotenv(env_file, override=False)
        env = os.environ if env is None else env

        driver = env.get("CLONEOPS_ODBC_DRIVER") or DEFAULT_ODBC_DRIVER
        trust = _as_bool(env.get("CLONEOPS_TRUST_SERVER_CERTIFICATE"), True)

        raw_url = env.get("CLONEOPS_CATALOG_URL")
        instance = env.get("CLONEOPS_CATALOG_INSTANCE")
        if raw_url:
            try:
                url = make_url(raw_url)
            except ArgumentError as exc:
                raise ConfigurationInvalid(
                    f"Invalid CLONEOPS_CATALOG_URL: {exc}"
                ) from exc
        elif instance:
            database = env.get("CLONEOPS_CATALOG_DATABASE") or DEFAULT_CATALOG_DATABASE
            url = mssql_url(
                odbc_connection_string(
                    server=instance,
                    database=database,
                    driver=driver,
                    trust_server_certificate=trust,
                )
            )
        else:
            raise ConfigurationInvalid(
                "No catalog configured. Set CLONEOPS_CATALOG_URL or "
                "CLONEOPS_CATALOG_INSTANCE (and optionally CLONEOPS_CATALOG_DATABASE)."
            )

        return cls(
            catalog_url=url,
            odbc_driver=driver,
            trust_server_certificate=trust,
            powershell=env.get("CLONEOPS_POWERSHELL") or _default_powershell(),
            log_level=(env.get("CLONEOPS_LOG_LEVEL") or "WARNING").upper(),
        )
