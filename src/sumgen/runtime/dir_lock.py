"""Directory-scoped advisory lock.

The lock is an exclusive ``flock`` on a file in the directory that records
the owner pid. The kernel drops the lock when its holder exits, so a file
left behind by a killed run does not block later runs. Acquisition never
waits.
"""

from __future__ import annotations

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sumgen.exceptions import LockUnavailableError

DEFAULT_LOCK_NAME = ".sumgen.lock"


def _owner(fd: int) -> str:
    try:
        os.lseek(fd, 0, os.SEEK_SET)
        return os.read(fd, 64).decode("ascii", "replace").strip()
    except OSError:
        return ""


def _same_file(fd: int, lock_path: Path) -> bool:
    try:
        current = os.stat(lock_path)
    except FileNotFoundError:
        return False
    opened = os.fstat(fd)
    return (opened.st_dev, opened.st_ino) == (current.st_dev, current.st_ino)


@contextmanager
def directory_lock(directory: Path, *, name: str = DEFAULT_LOCK_NAME) -> Iterator[Path]:
    lock_path = directory / name
    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_RDWR, 0o644)
    except OSError as exc:
        raise LockUnavailableError(str(lock_path)) from exc
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            raise LockUnavailableError(str(lock_path), _owner(fd)) from None
        if not _same_file(fd, lock_path):
            # The previous holder removed the file after we opened it.
            raise LockUnavailableError(str(lock_path))
        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode("ascii"))
        try:
            yield lock_path
        finally:
            lock_path.unlink(missing_ok=True)
    finally:
        os.close(fd)
