from __future__ import annotations

import logging
import shutil
from pathlib import Path

from cloneops.core.errors import FileRemovalFailed, ShellCommandError
from cloneops.core.models import Credential
from cloneops.core.shell import ShellRunner, ps_quote, remote_target

logger = logging.getLogger(__name__)


class FileSystemCleaner:
    """Delete clone mount paths and disk image files."""

    def __init__(self, runner: ShellRunner | None = None) -> None:
        self.runner = runner

    def remove(
        self, path: str, identity: Credential | None = None, host: str | None = None
    ) -> bool:
        """
        Delete a file or directory tree on `host` (local when None).

        On the local machine without an identity the removal happens
        in-process as the current user. With an identity, or on another
        host, it runs through PowerShell.

        Returns:
            True if something was deleted, False if the path was already absent.

        Raises:
            FileRemovalFailed: If the path exists and cannot be deleted.
        """
        computer = remote_target(host)
        if identity is None and computer is None:
            return self._remove_local(path)
        return self._remove_via_shell(path, identity, computer)

    def _remove_local(self, path: str) -> bool:
        target = Path(path)
        # is_symlink() covers dangling links, which exists() reports as missing
        if not target.exists() and not target.is_symlink():
            logger.debug("%s already absent", path)
            return False
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise FileRemovalFailed(path, str(exc)) from exc
        return True

    def _remove_via_shell(
        self, path: str, identity: Credential | None, computer: str | None
    ) -> bool:
        if self.runner is None:
            raise FileRemovalFailed(
                path, "no shell runner configured for identity or remote removal"
            )
        p = ps_quote(path)
        script = (
            f"if (Test-Path -LiteralPath {p}) "
            f"{{ Remove-Item -LiteralPath {p} -Recurse -Force; 'removed' }} "
            "else { 'absent' }"
        )
        try:
            out = self.runner.run(script, credential=identity, computer=computer)
        except ShellCommandError as exc:
            raise FileRemovalFailed(path, str(exc)) from exc
        return out.strip().lower().endswith("removed")
