from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from sumgen.catalog.builder import CatalogBuilder
from sumgen.catalog.model import INTERFACE, Catalog, Embed, Member
from sumgen.catalog.schema import CatalogDTO
from sumgen.exceptions import CatalogError, SourceSyntaxError, UnresolvedNameError
from sumgen.golang.parser import parse_signature_text
from sumgen.golang.types import Signature


def _read_payload(path: Path) -> object:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"cannot read catalog {path}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise CatalogError(f"invalid catalog {path}: {exc}") from exc


def catalog_from_dto(dto: CatalogDTO, *, origin: str = "") -> Catalog:
    local_path = dto.package.path

    def resolve(alias: str) -> str:
        path = dto.imports.get(alias)
        if path is None:
            raise UnresolvedNameError(alias, f"{origin}: undefined package qualifier {alias!r}")
        return "" if path == local_path else path

    def signature(owner: str, name: str, text: str) -> Signature:
        try:
            return parse_signature_text(text, resolve=resolve)
        except SourceSyntaxError as exc:
            raise CatalogError(f"{origin}: bad signature for {owner}.{name}: {exc}") from exc

    def embed(owner: str, text: str) -> Embed:
        pointer = text.startswith("*")
        alias, _, name = text.lstrip("*").rpartition(".")
        if not name.isidentifier() or (alias and not alias.isidentifier()):
            raise CatalogError(f"{origin}: bad embedded type {text!r} in {owner}")
        return Embed(name, resolve(alias) if alias else "", pointer)

    builder = CatalogBuilder(
        package_name=dto.package.name,
        package_path=local_path,
        package_names=dict(dto.packages),
    )
    for type_name, entry in dto.types.items():
        members: list[Member] = []
        if entry.kind == INTERFACE:
            pointer_embeds = any(text.startswith("*") for text in entry.embeds)
            if entry.pointer_methods or entry.fields or pointer_embeds:
                raise CatalogError(f"{origin}: interface {type_name} cannot have fields or receivers")
            members = [
                Member(name, signature(type_name, name, text))
                for name, text in entry.methods.items()
            ]
        builder.add_type(
            type_name,
            entry.kind,
            doc=entry.doc,
            members=members,
            embeds=[embed(type_name, text) for text in entry.embeds],
            fields=set(entry.fields),
            generic=entry.generic,
            origin=origin,
        )
        if entry.kind == INTERFACE:
            continue
        for name, text in entry.methods.items():
            builder.add_method(type_name, name, signature(type_name, name, text), pointer=False)
        for name, text in entry.pointer_methods.items():
            builder.add_method(type_name, name, signature(type_name, name, text), pointer=True)
    return builder.build()


class CatalogFileAdapter:
    """Reads a JSON or YAML catalog produced by an external front end."""

    adapter_id = "catalog"
    file_extensions = (".json", ".yaml", ".yml")

    def discover_files(self, directory: Path, *, source: Path | None = None) -> list[Path]:
        if source is None:
            raise CatalogError("catalog adapter requires a catalog file")
        path = source if source.is_absolute() else directory / source
        return [path]

    def load(self, directory: Path, *, source: Path | None = None) -> Catalog:
        (path,) = self.discover_files(directory, source=source)
        payload = _read_payload(path)
        try:
            dto = CatalogDTO.model_validate(payload)
        except ValidationError as exc:
            raise CatalogError(f"invalid catalog {path}: {exc}") from exc
        return catalog_from_dto(dto, origin=str(path))
