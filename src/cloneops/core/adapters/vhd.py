from __future__ import annotations

import logging

from cloneops.core.errors import DiskDismountFailed, ShellCommandError
from cloneops.core.shell import ShellRunner, ps_quote, remote_target

logger = logging.getLogger(__name__)

ATTACHED = "attached"
DETACHED = "detached"
ABSENT = "absent"


class VirtualDiskManager:
    """Dismount differencing disk images through the Windows storage cmdlets."""

    def __init__(self, runner: ShellRunner) -> None:
        self.runner = runner

    def attachment_state(self, path: str, host: str | None = None) -> str:
        """Return 'attached', 'detached' or 'absent' (image file missing)."""
        p = ps_quote(path)
        out = self.runner.run(
            f"if (-not (Test-Path -LiteralPath {p})) {{ '{ABSENT}' }} "
            f"elseif ((Get-DiskImage -ImagePath {p}).Attached) {{ '{ATTACHED}' }} "
            f"else {{ '{DETACHED}' }}",
            computer=remote_target(host),
        )
        state = out.strip().splitlines()[-1].strip().lower() if out.strip() else ""
        if state not in {ATTACHED, DETACHED, ABSENT}:
            raise ShellCommandError(0, f"Unexpected attachment state output: {out!r}")
        return state

    def dismount(self, path: str, host: str | None = None) -> bool:
        """
        Dismount the disk image at `path` on `host` (local when None).

        Returns:
            True if the image was dismounted, False if it was already detached
            or the image file no longer exists.

        Raises:
            DiskDismountFailed: If the dismount fails. When the attachment
                state cannot be determined the dismount is attempted anyway
                and its failure is reported here.
        """
        try:
            state = self.attachment_state(path, host)
        except ShellCommandError as exc:
            logger.debug("Could not determine attachment of %s: %s", path, exc)
            state = None

        if state in {DETACHED, ABSENT}:
            logger.debug("Disk %s already released (%s)", path, state)
            return False

        try:
            self.runner.run(
                f"Dismount-DiskImage -ImagePath {ps_quote(path)} | Out-Null",
                computer=remote_target(host),
            )
        except ShellCommandError as exc:
            raise DiskDismountFailed(path, str(exc)) from exc
        return True
