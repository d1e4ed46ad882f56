"""Error types raised by clone teardown collaborators.

Every error carries enough context (host, instance, database or path) to
identify the offending host or record without the original traceback.
"""

from __future__ import annotations


class CloneOpsError(RuntimeError):
    """Base class for all clone-ops errors."""


class ConfigurationInvalid(CloneOpsError):
    """Raised when settings are missing or the catalog is unusable."""


class HostQueryFailed(CloneOpsError):
    """Raised when the catalog query for a single host fails."""

    def __init__(self, host_name: str, reason: str):
        super().__init__(f"Catalog query for host '{host_name}' failed: {reason}")
        self.host_name = host_name
        self.reason = reason


class ConnectionFailed(CloneOpsError):
    """Raised when the database engine instance cannot be reached."""

    def __init__(self, instance: str, reason: str):
        super().__init__(f"Could not connect to instance '{instance}': {reason}")
        self.instance = instance
        self.reason = reason


class DatabaseRemovalFailed(CloneOpsError):
    """Raised when a database cannot be dropped from its instance."""

    def __init__(self, instance: str, database: str, reason: str):
        super().__init__(
            f"Could not remove database '{database}' from '{instance}': {reason}"
        )
        self.instance = instance
        self.database = database
        self.reason = reason


class DiskDismountFailed(CloneOpsError):
    """Raised when a virtual disk image cannot be dismounted."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not dismount disk '{path}': {reason}")
        self.path = path
        self.reason = reason


class FileRemovalFailed(CloneOpsError):
    """Raised when a clone file or mount path cannot be deleted."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not remove '{path}': {reason}")
        self.path = path
        self.reason = reason


class CatalogDeleteFailed(CloneOpsError):
    """Raised when the catalog row for a clone cannot be deleted."""

    def __init__(self, host_name: str, clone_location: str, reason: str):
        super().__init__(
            f"Could not delete catalog row for '{clone_location}' "
            f"on host '{host_name}': {reason}"
        )
        self.host_name = host_name
        self.clone_location = clone_location
        self.reason = reason


class ShellCommandError(CloneOpsError):
    """Raised when a PowerShell command exits with a non-zero status."""

    def __init__(self, returncode: int, stderr: str):
        detail = stderr.strip() or "no error output"
        super().__init__(f"PowerShell exited with code {returncode}: {detail}")
        self.returncode = returncode
        self.stderr = stderr
