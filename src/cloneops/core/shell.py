"""Thin PowerShell runner used by the disk and filesystem adapters.

Scripts run on the local machine, or on a clone host through PowerShell
remoting (`Invoke-Command -ComputerName`) when the host is another machine.
"""

from __future__ import annotations

import logging
import os
import socket
import subprocess
from dataclasses import dataclass
from typing import Protocol

from cloneops.core.errors import ShellCommandError
from cloneops.core.models import Credential

logger = logging.getLogger(__name__)

_PASSWORD_ENV = "CLONEOPS_PS_PASSWORD"
_LOCAL_NAMES = {"", ".", "localhost", "127.0.0.1", "::1"}


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def is_local_host(name: str | None) -> bool:
    """Return True when `name` refers to the machine running this process."""
    if name is None:
        return True
    wanted = name.strip().lower()
    if wanted in _LOCAL_NAMES:
        return True
    local = socket.gethostname().lower()
    return wanted == local or wanted.split(".")[0] == local.split(".")[0]


def remote_target(host: str | None) -> str | None:
    """Return the computer name to run on, or None to run locally."""
    return None if is_local_host(host) else host


def _credential_lines(credential: Credential) -> list[str]:
    return [
        f"$secure = ConvertTo-SecureString $env:{_PASSWORD_ENV} -AsPlainText -Force",
        f"$cred = New-Object System.Management.Automation.PSCredential({ps_quote(credential.username)}, $secure)",
    ]


def as_credential_job(script: str, credential: Credential) -> str:
    """
    Wrap a script so it runs under the given identity.

    The script is executed in a background job started with `-Credential`
    and its output is collected synchronously. The password is read from an
    environment variable of the child process, never from the command line.
    """
    return "\n".join(
        _credential_lines(credential)
        + [
            f"$job = Start-Job -Credential $cred -ScriptBlock {{ {script} }}",
            "Receive-Job -Job $job -Wait -AutoRemoveJob -ErrorAction Stop",
        ]
    )


def on_computer(script: str, computer: str, credential: Credential | None = None) -> str:
    """Wrap a script so it runs on `computer`, optionally as another identity."""
    lines = _credential_lines(credential) if credential is not None else []
    cred_arg = " -Credential $cred" if credential is not None else ""
    lines.append(
        f"Invoke-Command -ComputerName {ps_quote(computer)}{cred_arg} "
        f"-ScriptBlock {{ {script} }} -ErrorAction Stop"
    )
    return "\n".join(lines)


class ShellRunner(Protocol):
    """Interface for running PowerShell scripts."""

    def run(
        self,
        script: str,
        *,
        credential: Credential | None = None,
        computer: str | None = None,
    ) -> str:
        """Run a script (on `computer` when given) and return its trimmed output."""
        ...


@dataclass
class PowerShellRunner:
    """Run PowerShell scripts through a non-interactive subprocess."""

    executable: str = "pwsh"

    def run(
        self,
        script: str,
        *,
        credential: Credential | None = None,
        computer: str | None = None,
    ) -> str:
        """
        Run `script` and return its standard output.

        With `computer` the script runs there through `Invoke-Command`.
        With `credential` it runs as that identity.

        Raises:
            ShellCommandError: If PowerShell exits non-zero or cannot be started.
        """
        env = None
        if computer is not None:
            script = on_computer(script, computer, credential)
        elif credential is not None:
            script = as_credential_job(script, credential)
        if credential is not None:
            env = {**os.environ, _PASSWORD_ENV: credential.password}

        wrapped = f"$ErrorActionPreference = 'Stop'\n{script}"
        cmd = [self.executable, "-NoProfile", "-NonInteractive", "-Command", wrapped]
        logger.debug("Running PowerShell: %s", script)
        try:
            sp = subprocess.run(
                cmd, capture_output=True, text=True, check=False, env=env
            )
        except FileNotFoundError as exc:
            raise ShellCommandError(127, f"{self.executable} not found") from exc

        if sp.returncode != 0:
            raise ShellCommandError(sp.returncode, sp.stderr or sp.stdout)
        return sp.stdout.strip()
