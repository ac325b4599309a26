from sumgen.ingest.adapter_contract import CatalogAdapter


def resolve_adapter(*, source=None, default_adapter_id="go"):
    from sumgen.ingest.registry import resolve_adapter as _resolve_adapter

    return _resolve_adapter(source=source, default_adapter_id=default_adapter_id)


__all__ = ["CatalogAdapter", "resolve_adapter"]
