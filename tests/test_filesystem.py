import pytest

from cloneops.core.adapters.filesystem import FileSystemCleaner
from cloneops.core.errors import FileRemovalFailed, ShellCommandError
from cloneops.core.models import Credential


def test_remove_local_file(tmp_path):
    image = tmp_path / "clone.vhdx"
    image.write_bytes(b"\0" * 16)

    assert FileSystemCleaner().remove(str(image)) is True
    assert not image.exists()


def test_remove_local_directory_tree(tmp_path):
    mount = tmp_path / "mounts" / "Clone1"
    (mount / "data").mkdir(parents=True)
    (mount / "data" / "db.mdf").write_text("x")

    assert FileSystemCleaner().remove(str(mount)) is True
    assert not mount.exists()


def test_remove_missing_path_is_noop(tmp_path):
    assert FileSystemCleaner().remove(str(tmp_path / "gone")) is False


def test_remove_local_failure_raises(tmp_path, monkeypatch):
    image = tmp_path / "clone.vhdx"
    image.write_text("x")

    def _deny(self, missing_ok=False):
        raise PermissionError("access denied")

    monkeypatch.setattr(type(image), "unlink", _deny)

    with pytest.raises(FileRemovalFailed, match="access denied"):
        FileSystemCleaner().remove(str(image))


class _Runner:
    def __init__(self, output: str = "removed", error: str | None = None):
        self.output = output
        self.error = error
        self.calls: list[tuple[str, object]] = []
        self.computers: list[str | None] = []

    def run(self, script: str, *, credential=None, computer=None) -> str:
        self.calls.append((script, credential))
        self.computers.append(computer)
        if self.error:
            raise ShellCommandError(1, self.error)
        return self.output


def test_remove_with_identity_runs_through_shell():
    runner = _Runner("removed")
    identity = Credential("DOMAIN\\ops", "secret")

    assert FileSystemCleaner(runner).remove(r"\\fs01\clones\c.vhdx", identity) is True

    script, credential = runner.calls[0]
    assert credential is identity
    assert r"Remove-Item -LiteralPath '\\fs01\clones\c.vhdx'" in script


def test_remove_with_identity_reports_absent_path():
    assert FileSystemCleaner(_Runner("absent")).remove("x", Credential("u", "p")) is False


def test_remove_with_identity_wraps_shell_errors():
    runner = _Runner(error="Access is denied")

    with pytest.raises(FileRemovalFailed, match="Access is denied"):
        FileSystemCleaner(runner).remove("x", Credential("u", "p"))


def test_remove_with_identity_requires_runner():
    with pytest.raises(FileRemovalFailed, match="no shell runner"):
        FileSystemCleaner().remove("x", Credential("u", "p"))


def test_remove_on_remote_host_runs_through_shell():
    runner = _Runner("removed")

    assert FileSystemCleaner(runner).remove(r"C:\mounts\c", host="CLONEHOST01") is True

    script, credential = runner.calls[0]
    assert credential is None
    assert runner.computers == ["CLONEHOST01"]
    assert r"Remove-Item -LiteralPath 'C:\mounts\c'" in script


def test_remove_on_local_host_stays_in_process(tmp_path):
    runner = _Runner()
    target = tmp_path / "mount"
    target.mkdir()

    assert FileSystemCleaner(runner).remove(str(target), host="localhost") is True
    assert not target.exists()
    assert runner.calls == []


def test_remove_on_remote_host_requires_runner():
    with pytest.raises(FileRemovalFailed, match="no shell runner"):
        FileSystemCleaner().remove("x", host="CLONEHOST01")
