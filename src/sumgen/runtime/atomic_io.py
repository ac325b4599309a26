from __future__ import annotations

import os
import tempfile
from pathlib import Path

from sumgen.exceptions import ArtifactError


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``text`` so readers see the old or new file, never a mix."""
    tmp_path: Path | None = None
    existing_mode: int | None = None
    try:
        if path.is_symlink():
            raise ArtifactError(f"refusing to replace symlink {path}")
        if path.exists():
            existing_mode = path.stat().st_mode & 0o777
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            delete=False,
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        if existing_mode is not None:
            os.chmod(tmp_path, existing_mode)
        else:
            # NamedTemporaryFile creates 0600; new artifacts follow the umask.
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp_path, 0o666 & ~umask)
        os.replace(tmp_path, path)
        tmp_path = None
        if hasattr(os, "O_DIRECTORY"):
            dir_fd = os.open(path.parent, os.O_DIRECTORY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
    except OSError as exc:
        raise ArtifactError(f"cannot write {path}: {exc}") from exc
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
