from __future__ import annotations

from dataclasses import dataclass, field

from sumgen.catalog.model import Receiver
from sumgen.golang.types import Qualifier, RenderedSignature, Signature, render_signature


@dataclass(frozen=True)
class VariantRef:
    name: str
    pointer: bool = False

    def __str__(self) -> str:
        return f"*{self.name}" if self.pointer else self.name


@dataclass(frozen=True)
class SumDefinition:
    contract: str
    variants: tuple[VariantRef, ...]
    line: int = field(default=0, compare=False)

    def __str__(self) -> str:
        return f"{self.contract} = " + " | ".join(str(ref) for ref in self.variants)


@dataclass(frozen=True)
class SkippedDirective:
    contract: str
    line: int
    text: str
    reason: str


@dataclass(frozen=True)
class MissingMember:
    receiver: Receiver
    name: str
    signature: Signature
    contract: str = field(default="", compare=False)

    @property
    def key(self) -> tuple[Receiver, str]:
        return (self.receiver, self.name)

    def render(self, qualify: Qualifier) -> RenderedSignature:
        return render_signature(self.signature, qualify)


def member_sort_key(receiver: Receiver, name: str) -> tuple[str, bool, str]:
    return (receiver.type_name, receiver.pointer, name)
