"""The generated file: loading, reconciliation and rendering.

The artifact is append-only. Stubs already present are kept byte for byte
(doc comments and edited bodies included) and new stubs are slotted in by
(receiver type, receiver form, name).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from sumgen.catalog.model import Receiver
from sumgen.exceptions import (
    ArtifactError,
    DuplicateSignatureError,
    SignatureCollisionError,
    SourceSyntaxError,
    UnresolvedNameError,
)
from sumgen.golang.parser import ImportSpec, parse_file
from sumgen.golang.types import Signature
from sumgen.order_contract import sort_once
from sumgen.synthesis.model import MissingMember, member_sort_key
from sumgen.synthesis.stubs import ImportPlan, plan_imports, render_imports, render_stub

HEADER = '// Code generated by "sumgen"; DO NOT EDIT.'
DEFAULT_SUFFIX = "_sumgen.go"


def artifact_path(directory: Path, *, suffix: str = DEFAULT_SUFFIX) -> Path:
    return directory / f"{directory.resolve().name}{suffix}"


@dataclass(frozen=True)
class Stub:
    receiver: Receiver
    name: str
    signature: Signature
    text: str

    @property
    def key(self) -> tuple[Receiver, str]:
        return (self.receiver, self.name)


@dataclass
class Artifact:
    path: Path
    package: str
    header: str = HEADER
    imports: list[ImportSpec] = field(default_factory=list)
    stubs: list[Stub] = field(default_factory=list)
    exists: bool = False

    def signatures(self) -> dict[tuple[Receiver, str], Signature]:
        return {stub.key: stub.signature for stub in self.stubs}


def load_artifact(path: Path, *, package_name: str, local_path: str = "") -> Artifact:
    """Read the artifact at ``path``; a missing file yields an empty one."""
    if not path.exists():
        return Artifact(path=path, package=package_name)
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArtifactError(f"cannot read {path}: {exc}") from exc
    try:
        parsed = parse_file(source, filename=path.name, local_path=local_path)
    except (SourceSyntaxError, UnresolvedNameError) as exc:
        raise ArtifactError(f"cannot parse {path}: {exc}") from exc
    if parsed.package != package_name:
        raise ArtifactError(
            f"{path} declares package {parsed.package}, expected {package_name}"
        )
    if parsed.types or parsed.others:
        raise ArtifactError(f"{path} holds declarations other than methods")
    stubs: list[Stub] = []
    seen: set[tuple[Receiver, str]] = set()
    previous = parsed.preamble_end
    for method in parsed.methods:
        receiver = Receiver(method.receiver, method.pointer)
        forms = {receiver.value_form, Receiver(method.receiver, True)}
        if any((form, method.name) in seen for form in forms):
            raise ArtifactError(f"{path} declares {receiver}.{method.name} twice")
        seen.add((receiver, method.name))
        stubs.append(
            Stub(
                receiver=receiver,
                name=method.name,
                signature=method.signature,
                text=parsed.text(previous, method.end).strip(),
            )
        )
        previous = method.end
    return Artifact(
        path=path,
        package=parsed.package,
        header=parsed.text(0, parsed.header_end).rstrip(),
        imports=list(parsed.imports),
        stubs=stubs,
        exists=True,
    )


def reconcile(artifact: Artifact, required: Iterable[MissingMember]) -> list[MissingMember]:
    """Members still to be written once the artifact's own stubs are counted."""
    present = artifact.signatures()
    fresh: list[MissingMember] = []
    for member in required:
        receiver = member.receiver
        existing = present.get(member.key)
        if existing is None and receiver.pointer:
            existing = present.get((receiver.value_form, member.name))
        if existing is not None:
            if not existing.identical(member.signature):
                raise DuplicateSignatureError(str(receiver), member.name)
            continue
        if not receiver.pointer and (Receiver(receiver.type_name, True), member.name) in present:
            raise SignatureCollisionError(
                receiver.type_name, member.name, pointer_receiver=True
            )
        fresh.append(member)
    return fresh


def render_artifact(
    artifact: Artifact,
    fresh: Iterable[MissingMember],
    *,
    package_names: dict[str, str] | None = None,
) -> str:
    """Full text of the artifact with ``fresh`` stubs added."""
    plan: ImportPlan = plan_imports(artifact.imports, package_names=package_names)
    required: set[str] = set()
    stubs = list(artifact.stubs)
    # Alias clashes are numbered in stub order.
    for member in sort_once(
        fresh,
        source="render_artifact.fresh",
        key=lambda item: member_sort_key(item.receiver, item.name),
    ):
        rendered = render_stub(member, plan)
        required |= rendered.imports
        stubs.append(Stub(member.receiver, member.name, member.signature, rendered.text))
    ordered = sort_once(
        stubs,
        source="render_artifact",
        key=lambda stub: member_sort_key(stub.receiver, stub.name),
    )
    sections = []
    if artifact.header:
        sections.append(artifact.header)
    sections.append(f"package {artifact.package}")
    imports = render_imports(plan, required)
    if imports:
        sections.append(imports)
    sections.extend(stub.text for stub in ordered)
    return "\n\n".join(sections) + "\n"
