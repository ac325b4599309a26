from __future__ import annotations

import fcntl
import os
import subprocess
import sys
from pathlib import Path

import pytest

from sumgen.exceptions import ArtifactError, LockUnavailableError
from sumgen.runtime import atomic_io
from sumgen.runtime.atomic_io import atomic_write_text
from sumgen.runtime.dir_lock import DEFAULT_LOCK_NAME, directory_lock


def test_directory_lock_records_pid_and_releases(tmp_path: Path) -> None:
    with directory_lock(tmp_path) as lock_path:
        assert lock_path == tmp_path / DEFAULT_LOCK_NAME
        assert lock_path.read_text(encoding="utf-8").strip() == str(os.getpid())
    assert not (tmp_path / DEFAULT_LOCK_NAME).exists()


def test_directory_lock_releases_on_error(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        with directory_lock(tmp_path):
            raise RuntimeError("boom")
    assert not (tmp_path / DEFAULT_LOCK_NAME).exists()


def test_held_lock_fails_immediately(tmp_path: Path) -> None:
    lock_path = tmp_path / DEFAULT_LOCK_NAME
    with open(lock_path, "w", encoding="utf-8") as holder:
        holder.write("4242\n")
        holder.flush()
        fcntl.flock(holder, fcntl.LOCK_EX)
        with pytest.raises(LockUnavailableError) as excinfo:
            with directory_lock(tmp_path):
                pytest.fail("lock should not be acquired")
    assert excinfo.value.owner == "4242"
    assert "held by pid 4242" in str(excinfo.value)
    # A failed acquisition leaves the other owner's lock alone.
    assert lock_path.read_text(encoding="utf-8") == "4242\n"


def test_lock_left_by_a_killed_run_is_reclaimed(tmp_path: Path) -> None:
    script = (
        "import os, sys\n"
        "from pathlib import Path\n"
        "from sumgen.runtime.dir_lock import directory_lock\n"
        "with directory_lock(Path(sys.argv[1])):\n"
        "    os._exit(9)\n"
    )
    env = dict(os.environ, PYTHONPATH=str(Path(__file__).resolve().parents[1] / "src"))
    completed = subprocess.run([sys.executable, "-c", script, str(tmp_path)], env=env)
    assert completed.returncode == 9
    assert (tmp_path / DEFAULT_LOCK_NAME).exists()
    with directory_lock(tmp_path) as lock_path:
        assert lock_path.read_text(encoding="utf-8").strip() == str(os.getpid())
    assert not lock_path.exists()


def test_nested_acquisition_is_contention(tmp_path: Path) -> None:
    with directory_lock(tmp_path):
        with pytest.raises(LockUnavailableError):
            with directory_lock(tmp_path):
                pass


def test_atomic_write_replaces_content(tmp_path: Path) -> None:
    target = tmp_path / "out.go"
    target.write_text("old\n", encoding="utf-8")
    os.chmod(target, 0o640)
    atomic_write_text(target, "new\n")
    assert target.read_text(encoding="utf-8") == "new\n"
    assert target.stat().st_mode & 0o777 == 0o640
    assert sorted(path.name for path in tmp_path.iterdir()) == ["out.go"]


def test_atomic_write_failure_leaves_old_file(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "out.go"
    target.write_text("old\n", encoding="utf-8")

    def _fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(atomic_io.os, "replace", _fail)
    with pytest.raises(ArtifactError, match="disk full"):
        atomic_write_text(target, "new\n")
    assert target.read_text(encoding="utf-8") == "old\n"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["out.go"]


def test_atomic_write_refuses_symlink(tmp_path: Path) -> None:
    real = tmp_path / "real.go"
    real.write_text("x\n", encoding="utf-8")
    link = tmp_path / "link.go"
    link.symlink_to(real)
    with pytest.raises(ArtifactError):
        atomic_write_text(link, "y\n")
    assert real.read_text(encoding="utf-8") == "x\n"
