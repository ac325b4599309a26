"""Structural model of Go types and method signatures.

Types compare structurally: two signatures are identical when their ordered
parameter and result types and their variadic flag agree. Parameter names
and alternate spellings (``byte``/``uint8``, ``rune``/``int32``,
``any``/``interface{}``, import aliases) do not take part in identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Union

# Universe-scope aliases that denote the same type.
_ALIAS_CANONICAL = {"byte": "uint8", "rune": "int32"}

Qualifier = Callable[[str], str]


@dataclass(frozen=True)
class Named:
    """A declared type name.

    ``package`` is the import path of the declaring package, empty for the
    universe scope and for the package being analyzed.
    """

    name: str
    package: str = ""
    args: tuple["TypeExpr", ...] = ()
    spelling: str = field(default="", compare=False)

    @classmethod
    def of(cls, name: str, package: str = "", args: tuple["TypeExpr", ...] = ()) -> "Named":
        if not package and name in _ALIAS_CANONICAL:
            return cls(_ALIAS_CANONICAL[name], package, args, spelling=name)
        return cls(name, package, args, spelling=name)


@dataclass(frozen=True)
class Pointer:
    elem: "TypeExpr"


@dataclass(frozen=True)
class Slice:
    elem: "TypeExpr"


@dataclass(frozen=True)
class Array:
    length: str
    elem: "TypeExpr"


@dataclass(frozen=True)
class Map:
    key: "TypeExpr"
    value: "TypeExpr"


@dataclass(frozen=True)
class Chan:
    direction: str  # "both", "send" or "recv"
    elem: "TypeExpr"


@dataclass(frozen=True)
class Func:
    signature: "Signature"


@dataclass(frozen=True)
class EmptyInterface:
    spelling: str = field(default="interface{}", compare=False)


@dataclass(frozen=True)
class Literal:
    """Inline interface or struct type, kept as whitespace-normalized text."""

    text: str


TypeExpr = Union[Named, Pointer, Slice, Array, Map, Chan, Func, EmptyInterface, Literal]


@dataclass(frozen=True)
class Param:
    name: str
    type: TypeExpr


@dataclass(frozen=True)
class Signature:
    params: tuple[Param, ...] = ()
    results: tuple[Param, ...] = ()
    variadic: bool = False

    def identity(self) -> tuple[object, ...]:
        return (
            tuple(param.type for param in self.params),
            tuple(result.type for result in self.results),
            self.variadic,
        )

    def identical(self, other: "Signature") -> bool:
        return self.identity() == other.identity()

    def names(self) -> frozenset[str]:
        return frozenset(
            param.name for param in (*self.params, *self.results) if param.name
        )


@dataclass(frozen=True)
class RenderedSignature:
    text: str
    imports: frozenset[str]


def _render_type(expr: TypeExpr, qualify: Qualifier) -> tuple[str, frozenset[str]]:
    if isinstance(expr, Named):
        imports: set[str] = set()
        text = expr.spelling or expr.name
        if expr.package:
            text = f"{qualify(expr.package)}.{text}"
            imports.add(expr.package)
        if expr.args:
            rendered = [_render_type(arg, qualify) for arg in expr.args]
            text += "[" + ", ".join(item[0] for item in rendered) + "]"
            for item in rendered:
                imports |= item[1]
        return text, frozenset(imports)
    if isinstance(expr, Pointer):
        text, imports = _render_type(expr.elem, qualify)
        return "*" + text, imports
    if isinstance(expr, Slice):
        text, imports = _render_type(expr.elem, qualify)
        return "[]" + text, imports
    if isinstance(expr, Array):
        text, imports = _render_type(expr.elem, qualify)
        return f"[{expr.length}]{text}", imports
    if isinstance(expr, Map):
        key_text, key_imports = _render_type(expr.key, qualify)
        value_text, value_imports = _render_type(expr.value, qualify)
        return f"map[{key_text}]{value_text}", key_imports | value_imports
    if isinstance(expr, Chan):
        text, imports = _render_type(expr.elem, qualify)
        if expr.direction == "send":
            return "chan<- " + text, imports
        if expr.direction == "recv":
            return "<-chan " + text, imports
        if isinstance(expr.elem, Chan) and expr.elem.direction == "recv":
            return f"chan ({text})", imports
        return "chan " + text, imports
    if isinstance(expr, Func):
        rendered = render_signature(expr.signature, qualify)
        return "func" + rendered.text, rendered.imports
    if isinstance(expr, EmptyInterface):
        return expr.spelling, frozenset()
    return expr.text, frozenset()


def _render_params(
    params: tuple[Param, ...], qualify: Qualifier, *, variadic: bool
) -> tuple[str, frozenset[str]]:
    parts: list[str] = []
    imports: set[str] = set()
    for index, param in enumerate(params):
        text, used = _render_type(param.type, qualify)
        imports |= used
        if variadic and index == len(params) - 1:
            text = "..." + text
        parts.append(f"{param.name} {text}" if param.name else text)
    return ", ".join(parts), frozenset(imports)


def render_signature(signature: Signature, qualify: Qualifier) -> RenderedSignature:
    """Render ``(params) results`` and return the import paths it references."""
    params_text, imports = _render_params(
        signature.params, qualify, variadic=signature.variadic
    )
    text = f"({params_text})"
    results = signature.results
    if results:
        results_text, result_imports = _render_params(results, qualify, variadic=False)
        imports = imports | result_imports
        if len(results) == 1 and not results[0].name:
            text += " " + results_text
        else:
            text += f" ({results_text})"
    return RenderedSignature(text=text, imports=imports)
