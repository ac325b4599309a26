"""Gap analysis between a contract and its variants."""

from __future__ import annotations

from typing import Iterable

from sumgen.catalog.model import Catalog, Contract, Variant
from sumgen.exceptions import (
    FieldCollisionError,
    SignatureCollisionError,
    UnresolvedNameError,
)
from sumgen.synthesis.merge import merge_missing, union_definitions
from sumgen.synthesis.model import MissingMember, SumDefinition


def find_missing(contract: Contract, variant: Variant) -> list[MissingMember]:
    """Members of ``contract`` that ``variant`` lacks, in contract order.

    Stops at the first member that cannot be added without clobbering an
    existing field or method.
    """
    receiver = variant.receiver
    method_set = variant.method_set()
    missing: list[MissingMember] = []
    for member in contract.members:
        if member.name in variant.fields:
            raise FieldCollisionError(variant.name, member.name)
        existing = method_set.get(member.name)
        if existing is not None:
            if not existing.identical(member.signature):
                raise SignatureCollisionError(variant.name, member.name)
            continue
        if not variant.pointer and member.name in variant.pointer_methods:
            # T cannot gain a method *T already declares.
            raise SignatureCollisionError(variant.name, member.name, pointer_receiver=True)
        if variant.opaque:
            embedded = ", ".join(str(embed) for embed in variant.opaque)
            raise UnresolvedNameError(
                variant.name,
                f"type {variant.name} embeds {embedded}, which may already provide "
                f"{member.name}; describe it in a catalog file instead",
            )
        missing.append(MissingMember(receiver, member.name, member.signature, contract.name))
    return missing


def analyze(catalog: Catalog, definitions: Iterable[SumDefinition]) -> list[MissingMember]:
    """Resolve every definition against ``catalog`` and merge the gaps."""
    found: list[MissingMember] = []
    for definition in union_definitions(definitions):
        contract = catalog.contract(definition.contract)
        for ref in definition.variants:
            variant = catalog.variant(ref.name, ref.pointer)
            found.extend(find_missing(contract, variant))
    return merge_missing(found)
