from __future__ import annotations

from pathlib import Path

from sumgen.exceptions import CatalogError
from sumgen.ingest.adapter_contract import CatalogAdapter
from sumgen.ingest.catalog_file import CatalogFileAdapter
from sumgen.ingest.go_source import GoSourceAdapter

_ADAPTERS_BY_ID: dict[str, CatalogAdapter] = {}
_ADAPTERS_BY_EXTENSION: dict[str, CatalogAdapter] = {}


def register_adapter(adapter: CatalogAdapter) -> None:
    _ADAPTERS_BY_ID[adapter.adapter_id] = adapter
    for extension in adapter.file_extensions:
        _ADAPTERS_BY_EXTENSION[extension.lower()] = adapter


def adapter_for_extension(extension: str) -> CatalogAdapter | None:
    return _ADAPTERS_BY_EXTENSION.get(extension.lower())


def resolve_adapter(*, source: Path | None = None, default_adapter_id: str = "go") -> CatalogAdapter:
    """Pick the adapter by the source file's extension, else the default."""
    if source is not None:
        adapter = adapter_for_extension(source.suffix)
        if adapter is None:
            raise CatalogError(f"no catalog adapter for {source.name!r}")
        return adapter
    # Import-time registration guarantees the default adapter exists.
    return _ADAPTERS_BY_ID[default_adapter_id.lower()]


register_adapter(GoSourceAdapter())
register_adapter(CatalogFileAdapter())
