from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from sumgen.catalog.model import Catalog


@runtime_checkable
class CatalogAdapter(Protocol):
    adapter_id: str
    file_extensions: tuple[str, ...]

    def discover_files(self, directory: Path, *, source: Path | None = None) -> list[Path]: ...

    def load(self, directory: Path, *, source: Path | None = None) -> Catalog: ...
