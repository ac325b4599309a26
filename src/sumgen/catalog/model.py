"""Pre-resolved view of one Go package's types.

A front end (see ``sumgen.ingest``) produces a ``Catalog`` once per run; the
analysis reads it and never parses source itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from sumgen.exceptions import UnresolvedNameError
from sumgen.golang.types import Signature

INTERFACE = "interface"
STRUCT = "struct"
OTHER = "other"


@dataclass(frozen=True, order=True)
class Receiver:
    """A method receiver: a type name in value form ``T`` or pointer form ``*T``."""

    type_name: str
    pointer: bool = False

    def __str__(self) -> str:
        return f"*{self.type_name}" if self.pointer else self.type_name

    @property
    def value_form(self) -> "Receiver":
        return Receiver(self.type_name, False)


@dataclass(frozen=True)
class Member:
    name: str
    signature: Signature


@dataclass(frozen=True)
class Embed:
    """An embedded type: an interface inside an interface, or a struct's embedded field."""

    name: str
    # Import path of the declaring package; empty for local and predeclared types.
    package: str = ""
    pointer: bool = False

    def __str__(self) -> str:
        qualified = f"{self.package}.{self.name}" if self.package else self.name
        return f"*{qualified}" if self.pointer else qualified


@dataclass(frozen=True)
class TypeEntry:
    """One declared type.

    For non-interface types ``fields`` and the method tables already include
    what is promoted through embedded fields: ``value_methods`` is the method
    set of ``T`` and ``pointer_methods`` what ``*T`` adds to it. ``opaque``
    lists embedded types from other packages whose members are unknown.
    """

    name: str
    kind: str
    doc: str = ""
    members: tuple[Member, ...] = ()
    fields: frozenset[str] = frozenset()
    value_methods: Mapping[str, Signature] = field(default_factory=dict)
    pointer_methods: Mapping[str, Signature] = field(default_factory=dict)
    opaque: tuple[Embed, ...] = ()
    generic: bool = False


@dataclass(frozen=True)
class Contract:
    name: str
    members: tuple[Member, ...]
    doc: str = ""


@dataclass(frozen=True)
class Variant:
    name: str
    pointer: bool
    fields: frozenset[str]
    value_methods: Mapping[str, Signature]
    pointer_methods: Mapping[str, Signature]
    opaque: tuple[Embed, ...] = ()

    @property
    def receiver(self) -> Receiver:
        return Receiver(self.name, self.pointer)

    def method_set(self) -> Mapping[str, Signature]:
        """Methods callable on this variant's form without taking an address."""
        if not self.pointer:
            return self.value_methods
        return {**self.pointer_methods, **self.value_methods}


@dataclass(frozen=True)
class Catalog:
    package_name: str
    package_path: str = ""
    types: Mapping[str, TypeEntry] = field(default_factory=dict)
    package_names: Mapping[str, str] = field(default_factory=dict)

    def contract(self, name: str) -> Contract:
        entry = self.types.get(name)
        if entry is None or entry.kind != INTERFACE:
            raise UnresolvedNameError(name, f"no interface type with name {name!r}")
        if entry.generic:
            raise UnresolvedNameError(name, f"generic interface {name!r} is not supported")
        return Contract(name=entry.name, members=entry.members, doc=entry.doc)

    def variant(self, name: str, pointer: bool = False) -> Variant:
        entry = self.types.get(name)
        if entry is None:
            raise UnresolvedNameError(name, f"no type with name {name!r}")
        if entry.kind == INTERFACE:
            raise UnresolvedNameError(
                name, f"type {name!r} is an interface and cannot declare methods"
            )
        if entry.generic:
            raise UnresolvedNameError(name, f"generic type {name!r} is not supported")
        return Variant(
            name=entry.name,
            pointer=pointer,
            fields=entry.fields,
            value_methods=entry.value_methods,
            pointer_methods=entry.pointer_methods,
            opaque=entry.opaque,
        )

    def interfaces(self) -> list[TypeEntry]:
        return [entry for entry in self.types.values() if entry.kind == INTERFACE]
