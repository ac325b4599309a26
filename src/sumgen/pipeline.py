"""One generation run over a package directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from sumgen.catalog.model import Catalog
from sumgen.config import GenerateSettings
from sumgen.exceptions import CatalogError, GrammarError
from sumgen.ingest import resolve_adapter
from sumgen.runtime.atomic_io import atomic_write_text
from sumgen.runtime.dir_lock import directory_lock
from sumgen.synthesis.artifact import (
    artifact_path,
    load_artifact,
    reconcile,
    render_artifact,
)
from sumgen.synthesis.definition import parse_definition, scan_catalog
from sumgen.synthesis.gaps import analyze
from sumgen.synthesis.model import MissingMember, SkippedDirective, SumDefinition


@dataclass(frozen=True)
class GenerateRequest:
    directory: Path
    # None selects annotation mode.
    definition: str | None = None
    settings: GenerateSettings = field(default_factory=GenerateSettings)


@dataclass(frozen=True)
class GenerateResult:
    artifact: Path
    written: bool
    added: tuple[MissingMember, ...] = ()
    definitions: tuple[SumDefinition, ...] = ()
    skipped: tuple[SkippedDirective, ...] = ()


def load_catalog(directory: Path, settings: GenerateSettings) -> Catalog:
    adapter = resolve_adapter(source=settings.catalog)
    return adapter.load(directory, source=settings.catalog)


def collect_definitions(
    request: GenerateRequest, catalog: Catalog
) -> tuple[list[SumDefinition], list[SkippedDirective]]:
    if request.definition is not None:
        return [parse_definition(request.definition)], []
    scan = scan_catalog(catalog, keyword=request.settings.directive)
    if request.settings.strict_directives and scan.skipped:
        first = scan.skipped[0]
        raise GrammarError(
            first.text, f"directive for {first.contract} (doc line {first.line}): {first.reason}"
        )
    return list(scan.definitions), list(scan.skipped)


def generate(request: GenerateRequest) -> GenerateResult:
    """Add the missing stubs for every definition to the directory's artifact.

    Every check runs before the artifact is touched; when nothing is
    missing the file is left as it was (or left absent).
    """
    directory = request.directory
    settings = request.settings
    if not directory.is_dir():
        raise CatalogError(f"{directory} is not a directory")
    with directory_lock(directory, name=settings.lock_name):
        catalog = load_catalog(directory, settings)
        definitions, skipped = collect_definitions(request, catalog)
        target = artifact_path(directory, suffix=settings.suffix)
        missing = analyze(catalog, definitions)
        artifact = load_artifact(
            target, package_name=catalog.package_name, local_path=catalog.package_path
        )
        fresh = reconcile(artifact, missing)
        if not fresh:
            return GenerateResult(
                artifact=target,
                written=False,
                definitions=tuple(definitions),
                skipped=tuple(skipped),
            )
        text = render_artifact(artifact, fresh, package_names=dict(catalog.package_names))
        atomic_write_text(target, text)
        return GenerateResult(
            artifact=target,
            written=True,
            added=tuple(fresh),
            definitions=tuple(definitions),
            skipped=tuple(skipped),
        )
