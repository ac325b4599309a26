"""Placeholder method rendering and import planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from sumgen.golang.parser import ImportSpec, default_package_name
from sumgen.golang.types import Signature
from sumgen.order_contract import sort_once
from sumgen.synthesis.model import MissingMember

PLACEHOLDER_BODY = 'panic("default implementation")'


def receiver_variable(type_name: str, signature: Signature, *, reserved: Iterable[str] = ()) -> str:
    taken = {type_name, *signature.names(), *reserved}
    for candidate in (type_name[:1].lower(), type_name.lower()):
        if candidate and candidate not in taken:
            return candidate
    return "_"


def _last_segment(path: str) -> str:
    return path.rsplit("/", 1)[-1]


@dataclass
class ImportPlan:
    """Package paths mapped to the identifier the artifact uses for them.

    Paths the artifact already imports keep their names. Other paths get a
    name the first time a stub qualifies a type with them; a name already
    in use gets a numeric suffix.
    """

    names: dict[str, str] = field(default_factory=dict)
    existing: set[str] = field(default_factory=set)
    # Blank and dot imports are carried through untouched.
    passthrough: list[ImportSpec] = field(default_factory=list)
    hints: Mapping[str, str] = field(default_factory=dict)

    def qualify(self, path: str) -> str:
        name = self.names.get(path)
        if name is None:
            name = self._assign(path)
        return name

    def _assign(self, path: str) -> str:
        used = set(self.names.values())
        base = self.hints.get(path) or default_package_name(path)
        name = base
        suffix = 2
        while name in used:
            name = f"{base}{suffix}"
            suffix += 1
        self.names[path] = name
        return name

    def aliases(self) -> frozenset[str]:
        return frozenset(self.names.values())


def plan_imports(
    existing: Iterable[ImportSpec],
    *,
    package_names: Mapping[str, str] | None = None,
) -> ImportPlan:
    plan = ImportPlan(hints=dict(package_names or {}))
    for spec in existing:
        if spec.alias in {"_", "."}:
            if any((spec.path, spec.alias) == (kept.path, kept.alias) for kept in plan.passthrough):
                continue
            plan.passthrough.append(spec)
            continue
        if spec.path in plan.names:
            continue
        plan.names[spec.path] = spec.name
        plan.existing.add(spec.path)
    return plan


def render_imports(plan: ImportPlan, required: Iterable[str] = ()) -> str:
    """Import block for the artifact's own imports plus ``required`` paths."""
    wanted = plan.existing | set(required)
    specs: list[tuple[str, str]] = []
    for path in sorted(wanted):
        name = plan.qualify(path)
        specs.append((path, "" if name == _last_segment(path) else name))
    for spec in plan.passthrough:
        specs.append((spec.path, spec.alias))
    lines = [
        f'{alias} "{path}"' if alias else f'"{path}"'
        for path, alias in sort_once(specs, source="render_imports")
    ]
    if not lines:
        return ""
    if len(lines) == 1:
        return f"import {lines[0]}"
    return "import (\n" + "".join(f"\t{line}\n" for line in lines) + ")"


@dataclass(frozen=True)
class RenderedStub:
    text: str
    imports: frozenset[str]


def render_stub(member: MissingMember, plan: ImportPlan) -> RenderedStub:
    """Go source for one placeholder method and the packages it references."""
    rendered = member.render(plan.qualify)
    receiver = member.receiver
    var = receiver_variable(receiver.type_name, member.signature, reserved=plan.aliases())
    text = (
        f"func ({var} {receiver}) {member.name}{rendered.text} {{\n"
        f"\t{PLACEHOLDER_BODY}\n"
        "}"
    )
    return RenderedStub(text=text, imports=rendered.imports)
