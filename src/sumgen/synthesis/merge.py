from __future__ import annotations

from typing import Iterable

from sumgen.catalog.model import Receiver
from sumgen.exceptions import DuplicateSignatureError
from sumgen.order_contract import sort_once
from sumgen.synthesis.model import MissingMember, SumDefinition, VariantRef, member_sort_key


def union_definitions(definitions: Iterable[SumDefinition]) -> list[SumDefinition]:
    """Combine definitions per contract.

    Variant lists are concatenated in arrival order with repeats dropped; a
    contract keeps the position and line of its first definition.
    """
    order: list[str] = []
    variants: dict[str, list[VariantRef]] = {}
    lines: dict[str, int] = {}
    for definition in definitions:
        if definition.contract not in variants:
            order.append(definition.contract)
            variants[definition.contract] = []
            lines[definition.contract] = definition.line
        seen = variants[definition.contract]
        for ref in definition.variants:
            if ref not in seen:
                seen.append(ref)
    return [
        SumDefinition(contract, tuple(variants[contract]), line=lines[contract])
        for contract in order
    ]


def _key(member: MissingMember) -> tuple[str, bool, str]:
    return member_sort_key(member.receiver, member.name)


def merge_missing(members: Iterable[MissingMember]) -> list[MissingMember]:
    """Deduplicate missing members and return them in stub order.

    Raises ``DuplicateSignatureError`` when one (receiver, name) key, or a
    ``T``/``*T`` pair sharing a name, is required with two signatures.
    """
    by_key: dict[tuple[Receiver, str], MissingMember] = {}
    for member in members:
        existing = by_key.get(member.key)
        if existing is None:
            by_key[member.key] = member
            continue
        if not existing.signature.identical(member.signature):
            raise DuplicateSignatureError(str(member.receiver), member.name)
    merged: list[MissingMember] = []
    for (receiver, name), member in by_key.items():
        if receiver.pointer:
            value_member = by_key.get((receiver.value_form, name))
            if value_member is not None:
                if not value_member.signature.identical(member.signature):
                    raise DuplicateSignatureError(str(receiver), name)
                # The value receiver stub also serves *T.
                continue
        merged.append(member)
    return sort_once(merged, source="merge_missing", key=_key)
