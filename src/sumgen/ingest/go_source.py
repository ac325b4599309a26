from __future__ import annotations

import re
from pathlib import Path

from sumgen.catalog.builder import CatalogBuilder
from sumgen.catalog.model import INTERFACE, OTHER, Catalog, Embed, Member
from sumgen.exceptions import CatalogError, UnresolvedNameError
from sumgen.golang.parser import SourceFile, parse_file
from sumgen.golang.types import EmptyInterface, Named, Pointer, TypeExpr

_MODULE_RE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)


def module_import_path(directory: Path) -> str:
    """Import path of ``directory`` according to the nearest go.mod, or ""."""
    directory = directory.resolve()
    for candidate in (directory, *directory.parents):
        go_mod = candidate / "go.mod"
        if not go_mod.is_file():
            continue
        try:
            match = _MODULE_RE.search(go_mod.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CatalogError(f"cannot read {go_mod}: {exc}") from exc
        if match is None:
            return ""
        module = match.group(1).strip('"')
        relative = directory.relative_to(candidate).as_posix()
        return module if relative == "." else f"{module}/{relative}"
    return ""


def _embed(owner: str, expr: TypeExpr, filename: str) -> Embed | None:
    pointer = isinstance(expr, Pointer)
    if pointer:
        expr = expr.elem
    if isinstance(expr, EmptyInterface):
        return None
    if not isinstance(expr, Named) or expr.args:
        raise UnresolvedNameError(
            str(expr), f"{filename}: type {owner} embeds a type sumgen cannot resolve"
        )
    return Embed(expr.spelling or expr.name, expr.package, pointer)


class GoSourceAdapter:
    """Builds the catalog by scanning the directory's non-test Go files."""

    adapter_id = "go"
    file_extensions = (".go",)

    def discover_files(self, directory: Path, *, source: Path | None = None) -> list[Path]:
        if source is not None:
            return [source if source.is_absolute() else directory / source]
        return sorted(
            path
            for path in directory.glob("*.go")
            if path.is_file() and not path.name.endswith("_test.go")
        )

    def parse_files(self, paths: list[Path], *, local_path: str) -> list[SourceFile]:
        parsed: list[SourceFile] = []
        for path in paths:
            try:
                source = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise CatalogError(f"cannot read {path}: {exc}") from exc
            parsed.append(parse_file(source, filename=path.name, local_path=local_path))
        return parsed

    def load(self, directory: Path, *, source: Path | None = None) -> Catalog:
        paths = self.discover_files(directory, source=source)
        if not paths:
            raise CatalogError(f"could not find Go package in {directory}")
        local_path = module_import_path(directory)
        files = self.parse_files(paths, local_path=local_path)
        names = sorted({parsed.package for parsed in files})
        if len(names) != 1:
            raise CatalogError(f"found packages {', '.join(names)} in {directory}")
        builder = CatalogBuilder(package_name=names[0], package_path=local_path)
        for parsed in files:
            for spec in parsed.types:
                if spec.constraint:
                    # Constraint interfaces cannot be used as method contracts.
                    builder.add_type(spec.name, OTHER, doc=spec.doc, origin=parsed.filename)
                    continue
                embeds = [
                    embed
                    for embed in (_embed(spec.name, item, parsed.filename) for item in spec.embeds)
                    if embed is not None
                ]
                builder.add_type(
                    spec.name,
                    spec.kind,
                    doc=spec.doc,
                    members=[Member(item.name, item.signature) for item in spec.methods]
                    if spec.kind == INTERFACE
                    else None,
                    embeds=embeds,
                    fields=set(spec.fields),
                    generic=spec.generic,
                    origin=parsed.filename,
                )
        for parsed in files:
            for method in parsed.methods:
                builder.add_method(
                    method.receiver, method.name, method.signature, pointer=method.pointer
                )
        return builder.build()
