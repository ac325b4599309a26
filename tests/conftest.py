from __future__ import annotations

import sys
import textwrap
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest


@pytest.fixture
def go_package(tmp_path: Path):
    """Write Go files into a fresh package directory and return it."""

    def _write(files: dict[str, str], *, name: str = "shapes", module: str | None = None) -> Path:
        directory = tmp_path / name
        directory.mkdir(exist_ok=True)
        if module is not None:
            (directory / "go.mod").write_text(f"module {module}\n\ngo 1.21\n", encoding="utf-8")
        for filename, source in files.items():
            (directory / filename).write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        return directory

    return _write
