from __future__ import annotations

from dataclasses import dataclass, field

from sumgen.catalog.model import INTERFACE, Catalog, Embed, Member, TypeEntry
from sumgen.catalog.wellknown import interface_members, struct_methods
from sumgen.exceptions import CatalogError, UnresolvedNameError
from sumgen.golang.types import Signature

# Predeclared types that may be embedded but carry no members.
_PREDECLARED = frozenset(
    {
        "bool", "byte", "complex64", "complex128", "float32", "float64", "int", "int8",
        "int16", "int32", "int64", "rune", "string", "uint", "uint8", "uint16", "uint32",
        "uint64", "uintptr",
    }
)


@dataclass(frozen=True)
class _Found:
    # None marks a field.
    signature: Signature | None = None
    pointer_only: bool = False


_FIELD = _Found()


@dataclass
class _PendingType:
    name: str
    kind: str
    doc: str
    members: list[Member]
    embeds: list[Embed]
    fields: set[str]
    generic: bool
    origin: str


@dataclass
class CatalogBuilder:
    """Accumulates declarations; on build, flattens embedded interfaces and
    promotes fields and methods through embedded struct fields."""

    package_name: str
    package_path: str = ""
    package_names: dict[str, str] = field(default_factory=dict)
    _types: dict[str, _PendingType] = field(default_factory=dict)
    _value_methods: dict[str, dict[str, Signature]] = field(default_factory=dict)
    _pointer_methods: dict[str, dict[str, Signature]] = field(default_factory=dict)

    def add_type(
        self,
        name: str,
        kind: str,
        *,
        doc: str = "",
        members: list[Member] | None = None,
        embeds: list[Embed] | None = None,
        fields: set[str] | None = None,
        generic: bool = False,
        origin: str = "",
    ) -> None:
        previous = self._types.get(name)
        if previous is not None:
            raise CatalogError(
                f"type {name} declared twice ({previous.origin or '?'} and {origin or '?'})"
            )
        self._types[name] = _PendingType(
            name=name,
            kind=kind,
            doc=doc,
            members=list(members or []),
            embeds=list(embeds or []),
            fields=set(fields or set()),
            generic=generic,
            origin=origin,
        )

    def add_method(self, receiver: str, name: str, signature: Signature, *, pointer: bool) -> None:
        other = self._value_methods if pointer else self._pointer_methods
        if name in other.get(receiver, {}):
            raise CatalogError(f"method {receiver}.{name} declared on both T and *T")
        table = self._pointer_methods if pointer else self._value_methods
        methods = table.setdefault(receiver, {})
        if name in methods:
            raise CatalogError(f"method {receiver}.{name} already declared")
        methods[name] = signature

    def _local(self, embed: Embed) -> _PendingType | None:
        if embed.package:
            return None
        return self._types.get(embed.name)

    def _flatten(self, name: str, trail: tuple[str, ...]) -> list[Member]:
        pending = self._types[name]
        members: dict[str, Member] = {}
        for member in pending.members:
            members[member.name] = member
        for embed in pending.embeds:
            target = self._local(embed)
            if target is None:
                inherited = interface_members(embed)
                if inherited is None:
                    raise UnresolvedNameError(
                        str(embed),
                        f"interface {name} embeds unknown interface {str(embed)!r}; "
                        "describe it in a catalog file instead",
                    )
            elif target.kind != INTERFACE:
                raise UnresolvedNameError(
                    embed.name, f"interface {name} embeds non-interface type {embed.name!r}"
                )
            elif embed.name in trail:
                raise CatalogError(
                    f"invalid recursive interface {' -> '.join((*trail, embed.name))}"
                )
            else:
                inherited = self._flatten(embed.name, (*trail, embed.name))
            for member in inherited:
                existing = members.get(member.name)
                if existing is not None and not existing.signature.identical(member.signature):
                    raise CatalogError(
                        f"interface {name} has duplicate method {member.name} "
                        "with different signatures"
                    )
                members.setdefault(member.name, member)
        return list(members.values())

    def _embedded(
        self,
        owner: str,
        embed: Embed,
        via_pointer: bool,
        *,
        opaque: list[Embed],
        following: list[tuple[Embed, bool]],
    ) -> list[tuple[str, _Found]]:
        """Names one embedded type contributes at its depth."""
        target = self._local(embed)
        if target is not None and target.kind == INTERFACE:
            return [
                (member.name, _Found(member.signature))
                for member in self._flatten(embed.name, (embed.name,))
            ]
        if target is not None:
            items = [(name, _FIELD) for name in target.fields]
            items.extend((inner.name, _FIELD) for inner in target.embeds)
            for method, signature in self._value_methods.get(embed.name, {}).items():
                items.append((method, _Found(signature)))
            for method, signature in self._pointer_methods.get(embed.name, {}).items():
                # Reachable from a T value only through an embedded pointer.
                items.append((method, _Found(signature, pointer_only=not via_pointer)))
            following.extend((inner, via_pointer or inner.pointer) for inner in target.embeds)
            return items
        members = interface_members(embed)
        if members is not None:
            return [(member.name, _Found(member.signature)) for member in members]
        known = struct_methods(embed)
        if known is not None:
            methods, pointer = known
            return [
                (member.name, _Found(member.signature, pointer_only=pointer and not via_pointer))
                for member in methods
            ]
        if embed.package:
            opaque.append(embed)
            return []
        if embed.name in _PREDECLARED:
            return []
        raise UnresolvedNameError(embed.name, f"type {owner} embeds unknown type {embed.name!r}")

    def _promote(self, name: str) -> tuple[dict[str, _Found], list[Embed]]:
        """Every field and method selectable on ``name``, shallowest first.

        A name found twice at the same depth is ambiguous and selects nothing,
        but still hides deeper occurrences.
        """
        pending = self._types[name]
        found: dict[str, _Found] = {}
        for field_name in pending.fields:
            found[field_name] = _FIELD
        for embed in pending.embeds:
            found[embed.name] = _FIELD
        for method, signature in self._value_methods.get(name, {}).items():
            found[method] = _Found(signature)
        for method, signature in self._pointer_methods.get(name, {}).items():
            found[method] = _Found(signature, pointer_only=True)
        settled = set(found)
        opaque: list[Embed] = []
        seen = {name}
        frontier = [(embed, embed.pointer) for embed in pending.embeds]
        while frontier:
            level: dict[str, list[_Found]] = {}
            following: list[tuple[Embed, bool]] = []
            visited: set[str] = set()
            for embed, via_pointer in frontier:
                if not embed.package and embed.name in seen:
                    continue
                visited.add(embed.name)
                for member_name, item in self._embedded(
                    name, embed, via_pointer, opaque=opaque, following=following
                ):
                    level.setdefault(member_name, []).append(item)
            seen |= visited
            for member_name, items in level.items():
                if member_name in settled:
                    continue
                settled.add(member_name)
                if len(items) == 1:
                    found[member_name] = items[0]
            frontier = following
        return found, opaque

    def build(self) -> Catalog:
        types: dict[str, TypeEntry] = {}
        for name, pending in self._types.items():
            if pending.kind == INTERFACE:
                types[name] = TypeEntry(
                    name=name,
                    kind=pending.kind,
                    doc=pending.doc,
                    members=tuple(self._flatten(name, (name,))),
                    generic=pending.generic,
                )
                continue
            found, opaque = self._promote(name)
            types[name] = TypeEntry(
                name=name,
                kind=pending.kind,
                doc=pending.doc,
                fields=frozenset(key for key, item in found.items() if item.signature is None),
                value_methods={
                    key: item.signature
                    for key, item in found.items()
                    if item.signature is not None and not item.pointer_only
                },
                pointer_methods={
                    key: item.signature
                    for key, item in found.items()
                    if item.signature is not None and item.pointer_only
                },
                opaque=tuple(opaque),
                generic=pending.generic,
            )
        return Catalog(
            package_name=self.package_name,
            package_path=self.package_path,
            types=types,
            package_names=dict(self.package_names),
        )
