"""Application context management for the CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass

from cloneops.cli.common.exits import EXIT_FAILED, exit_from_exc, warn_exit
from cloneops.cli.common.log import configure_logging
from cloneops.cli.common.output import out
from cloneops.core.adapters.catalogstore import CatalogStore
from cloneops.core.adapters.filesystem import FileSystemCleaner
from cloneops.core.adapters.sqlengine import SqlEngineClient
from cloneops.core.adapters.vhd import VirtualDiskManager
from cloneops.core.config import Settings
from cloneops.core.errors import ConfigurationInvalid
from cloneops.core.models import Credential
from cloneops.core.shell import PowerShellRunner
from cloneops.core.teardown import CloneTeardownOrchestrator


@dataclass
class CliOptions:
    """Options shared by all clone commands, captured by the group callback."""

    env_file: str | None = None
    verbose: bool = False


@dataclass
class CloneAppContext:
    """Application context holding settings, catalog store and orchestrator."""

    settings: Settings
    store: CatalogStore
    orchestrator: CloneTeardownOrchestrator


def build_clone_context(options: CliOptions) -> CloneAppContext:
    """Load settings, verify the catalog and wire the teardown collaborators.

    Exits with code 1 (before any clone is touched) when the settings are
    incomplete or the catalog is unreachable or not initialized.
    """
    try:
        settings = Settings.from_env(env_file=options.env_file)
    except ConfigurationInvalid as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_FAILED)
    configure_logging(settings.log_level, verbose=options.verbose)

    try:
        with out.status("Checking catalog..."):
            store = CatalogStore.from_url(settings.catalog_url)
            store.check_initialized()
    except ConfigurationInvalid as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_FAILED)

    runner = PowerShellRunner(executable=settings.powershell)
    orchestrator = CloneTeardownOrchestrator(
        engine=SqlEngineClient(
            driver=settings.odbc_driver,
            trust_server_certificate=settings.trust_server_certificate,
        ),
        disks=VirtualDiskManager(runner),
        files=FileSystemCleaner(runner),
        store=store,
    )
    return CloneAppContext(settings=settings, store=store, orchestrator=orchestrator)


def resolve_credential(
    username: str | None, *, env_var: str, prompt: str
) -> Credential | None:
    """Build a credential for `username`, reading the password from env or a prompt."""
    if not username:
        return None
    password = os.environ.get(env_var)
    if password is None:
        password = out.password(prompt)
        if password is None:
            warn_exit("Cancelled.")
    return Credential(username=username, password=password)
