"""Declaration-level Go reader built on the tree-sitter Go grammar.

Reads the parts of a Go file that sum-type generation needs: the package
clause, imports, ``type`` declarations (interface method sets, struct fields
and embedded types), method declarations with their receivers and source
spans, and the doc comments attached to them. Everything else is recorded
only by kind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Iterator

import tree_sitter_language_pack
from tree_sitter import Node, Parser

from sumgen.exceptions import SourceSyntaxError, UnresolvedNameError
from sumgen.golang.types import (
    Array,
    Chan,
    EmptyInterface,
    Func,
    Literal,
    Map,
    Named,
    Param,
    Pointer,
    Signature,
    Slice,
    TypeExpr,
)

Resolver = Callable[[str], str]

_WHITESPACE_RE = re.compile(r"\s+")
_VERSION_SEGMENT_RE = re.compile(r"^v[0-9]+$")
_GOPKG_SUFFIX_RE = re.compile(r"\.v[0-9]+$")

# Interface elements across grammar releases.
_METHOD_ELEMS = frozenset({"method_elem", "method_spec"})
_EMBED_ELEMS = frozenset({"type_elem", "interface_type_name", "constraint_elem", "struct_elem"})

_OTHER_KEYWORDS = {
    "function_declaration": "func",
    "const_declaration": "const",
    "var_declaration": "var",
}


@lru_cache(maxsize=None)
def _go_parser() -> Parser:
    return tree_sitter_language_pack.get_parser("go")


def default_package_name(path: str) -> str:
    """Best guess at the package name declared by the package at ``path``."""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "_"
    name = segments[-1]
    if _VERSION_SEGMENT_RE.match(name) and len(segments) > 1:
        name = segments[-2]
    name = _GOPKG_SUFFIX_RE.sub("", name)
    if name.startswith("go-"):
        name = name[3:]
    name = re.sub(r"\W", "_", name)
    if not name or name[0].isdigit():
        name = "_" + name
    return name


def unquote_import_path(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"`":
        return text[1:-1]
    raise SourceSyntaxError(f"malformed import path {text}")


@dataclass(frozen=True)
class ImportSpec:
    path: str
    alias: str = ""
    line: int = 0

    @property
    def name(self) -> str:
        """Identifier the file uses to refer to this package."""
        return self.alias or default_package_name(self.path)


@dataclass(frozen=True)
class InterfaceMethod:
    name: str
    signature: Signature


@dataclass(frozen=True)
class TypeSpec:
    name: str
    kind: str  # "interface", "struct" or "other"
    line: int
    doc: str = ""
    methods: tuple[InterfaceMethod, ...] = ()
    # Embedded interfaces, or a struct's embedded fields (Named or Pointer).
    embeds: tuple[TypeExpr, ...] = ()
    fields: tuple[str, ...] = ()
    generic: bool = False
    constraint: bool = False


@dataclass(frozen=True)
class MethodDecl:
    receiver: str
    receiver_var: str
    pointer: bool
    name: str
    signature: Signature
    line: int
    # Byte offsets into the encoded source.
    start: int
    end: int


@dataclass(frozen=True)
class OtherDecl:
    keyword: str
    line: int


@dataclass
class SourceFile:
    filename: str
    package: str
    package_line: int
    data: bytes = field(default=b"", repr=False)
    package_doc: str = ""
    imports: list[ImportSpec] = field(default_factory=list)
    types: list[TypeSpec] = field(default_factory=list)
    methods: list[MethodDecl] = field(default_factory=list)
    others: list[OtherDecl] = field(default_factory=list)
    header_end: int = 0
    preamble_end: int = 0

    def import_aliases(self) -> dict[str, str]:
        return {spec.name: spec.path for spec in self.imports if spec.name not in {"_", "."}}

    def text(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _first_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
    return None


def _compact(text: str) -> str:
    compact = _WHITESPACE_RE.sub(" ", text)
    return compact.replace("{ ", "{").replace(" }", "}").replace(" {", "{")


def _comment_lines(text: str) -> list[str]:
    if text.startswith("//"):
        return [text[2:]]
    return text[2:-2].split("\n")


class NodeReader:
    """Converts tree-sitter Go nodes into the structural type model."""

    def __init__(self, data: bytes, *, filename: str = "", resolve: Resolver | None = None) -> None:
        self.data = data
        self.filename = filename
        self.resolve = resolve

    def text(self, node: Node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8")

    def error(self, message: str, node: Node | None = None) -> SourceSyntaxError:
        return SourceSyntaxError(
            message, filename=self.filename, line=_line(node) if node is not None else 0
        )

    def check(self, root: Node) -> None:
        if not root.has_error:
            return
        bad = _first_error(root) or root
        if bad.is_missing:
            raise self.error(f"missing {bad.type!r}", bad)
        snippet = self.text(bad).strip().split("\n", 1)[0][:40]
        raise self.error(f"syntax error near {snippet!r}", bad)

    # -- types ---------------------------------------------------------

    def qualify(self, alias: str, node: Node) -> str:
        if self.resolve is None:
            raise self.error(f"undefined package qualifier {alias!r}", node)
        return self.resolve(alias)

    def named_children(self, node: Node) -> list[Node]:
        return [child for child in node.named_children if child.type != "comment"]

    def type_of(self, node: Node) -> TypeExpr:
        kind = node.type
        if kind == "type_identifier":
            name = self.text(node)
            if name == "any":
                return EmptyInterface(spelling="any")
            return Named.of(name)
        if kind == "qualified_type":
            alias = self.text(node.child_by_field_name("package"))
            name = self.text(node.child_by_field_name("name"))
            return Named.of(name, self.qualify(alias, node))
        if kind == "generic_type":
            base = self.type_of(node.child_by_field_name("type"))
            if not isinstance(base, Named):
                raise self.error("unsupported generic base type", node)
            arguments = node.child_by_field_name("type_arguments")
            args = tuple(self.type_of(arg) for arg in self.named_children(arguments))
            return Named.of(base.spelling or base.name, base.package, args)
        if kind == "type_elem" and len(self.named_children(node)) == 1:
            return self.type_of(self.named_children(node)[0])
        if kind == "pointer_type":
            return Pointer(self.type_of(self.named_children(node)[-1]))
        if kind == "parenthesized_type":
            return self.type_of(self.named_children(node)[0])
        if kind == "slice_type":
            return Slice(self.type_of(node.child_by_field_name("element")))
        if kind == "array_type":
            length = _compact(self.text(node.child_by_field_name("length")))
            return Array(length, self.type_of(node.child_by_field_name("element")))
        if kind == "implicit_length_array_type":
            return Array("...", self.type_of(node.child_by_field_name("element")))
        if kind == "map_type":
            return Map(
                self.type_of(node.child_by_field_name("key")),
                self.type_of(node.child_by_field_name("value")),
            )
        if kind == "channel_type":
            tokens = [child.type for child in node.children if not child.is_named]
            if tokens and tokens[0] == "<-":
                direction = "recv"
            elif "<-" in tokens:
                direction = "send"
            else:
                direction = "both"
            return Chan(direction, self.type_of(node.child_by_field_name("value")))
        if kind == "function_type":
            return Func(
                self.signature(
                    node.child_by_field_name("parameters"), node.child_by_field_name("result")
                )
            )
        if kind == "interface_type":
            if not self.named_children(node):
                return EmptyInterface(spelling="interface{}")
            return Literal(_compact(self.text(node)))
        if kind == "struct_type":
            return Literal(_compact(self.text(node)))
        raise self.error(f"unsupported type {self.text(node)!r}", node)

    def params(self, node: Node) -> tuple[tuple[Param, ...], bool]:
        params: list[Param] = []
        named: list[bool] = []
        variadic = False
        declarations = self.named_children(node)
        for index, declaration in enumerate(declarations):
            expr = self.type_of(declaration.child_by_field_name("type"))
            if declaration.type == "variadic_parameter_declaration":
                if index != len(declarations) - 1:
                    raise self.error("can only use ... with final parameter", declaration)
                variadic = True
            names = declaration.children_by_field_name("name")
            if not names:
                params.append(Param("", expr))
                named.append(False)
                continue
            for name in names:
                params.append(Param(self.text(name), expr))
                named.append(True)
        if any(named) and not all(named):
            raise self.error("mixed named and unnamed parameters", node)
        return tuple(params), variadic

    def signature(self, parameters: Node, result: Node | None) -> Signature:
        params, variadic = self.params(parameters)
        results: tuple[Param, ...] = ()
        if result is not None:
            if result.type == "parameter_list":
                results, result_variadic = self.params(result)
                if result_variadic:
                    raise self.error("result list cannot be variadic", result)
            else:
                results = (Param("", self.type_of(result)),)
        return Signature(params=params, results=results, variadic=variadic)


def parse_signature_text(text: str, *, resolve: Resolver | None = None) -> Signature:
    """Parse ``(params) results`` written in Go syntax."""
    source = text.strip()
    if source.startswith("func"):
        source = source[4:]
    data = f"package p\n\ntype sig func{source}\n".encode("utf-8")
    reader = NodeReader(data, resolve=resolve)
    root = _go_parser().parse(data).root_node
    reader.check(root)
    specs = [
        spec
        for node in root.named_children
        if node.type == "type_declaration"
        for spec in node.named_children
        if spec.type == "type_spec"
    ]
    function = specs[0].child_by_field_name("type") if len(specs) == 1 else None
    if function is None or function.type != "function_type":
        raise SourceSyntaxError(f"not a method signature: {text!r}")
    return reader.signature(
        function.child_by_field_name("parameters"), function.child_by_field_name("result")
    )


class FileReader(NodeReader):
    def __init__(self, source: str, *, filename: str = "", local_path: str = "") -> None:
        super().__init__(source.encode("utf-8"), filename=filename, resolve=self._resolve_alias)
        self.local_path = local_path
        self._aliases: dict[str, str] = {}

    def _resolve_alias(self, alias: str) -> str:
        path = self._aliases.get(alias)
        if path is None:
            raise UnresolvedNameError(
                alias, f"{self.filename or '<source>'}: undefined package qualifier {alias!r}"
            )
        if path == self.local_path:
            return ""
        return path

    def doc_for(self, node: Node) -> str:
        """Text of the comment group ending on the line above ``node``."""
        group: list[Node] = []
        expected_row = node.start_point[0] - 1
        sibling = node.prev_sibling
        while sibling is not None and sibling.type == "comment" and sibling.end_point[0] == expected_row:
            before = sibling.prev_sibling
            code = before
            while code is not None and not code.is_named:
                code = code.prev_sibling
            if code is not None and code.type != "comment" and code.end_point[0] == sibling.start_point[0]:
                # Trailing comment of the previous line's code.
                break
            group.append(sibling)
            expected_row = sibling.start_point[0] - 1
            sibling = before
        lines: list[str] = []
        for comment in reversed(group):
            for raw in _comment_lines(self.text(comment)):
                lines.append(raw[1:] if raw.startswith(" ") else raw)
        return "\n".join(line.rstrip() for line in lines)

    def parse(self) -> SourceFile:
        root = _go_parser().parse(self.data).root_node
        self.check(root)
        nodes = self.named_children(root)
        if not nodes or nodes[0].type != "package_clause":
            raise self.error("expected 'package' clause", nodes[0] if nodes else None)
        package = nodes[0]
        result = SourceFile(
            filename=self.filename,
            package=self.text(self.named_children(package)[0]),
            package_line=_line(package),
            data=self.data,
            package_doc=self.doc_for(package),
            header_end=package.start_byte,
            preamble_end=package.end_byte,
        )
        body = nodes[1:]
        while body and body[0].type == "import_declaration":
            for spec in self._import_specs(body[0]):
                result.imports.append(spec)
            result.preamble_end = body[0].end_byte
            body = body[1:]
        self._aliases = result.import_aliases()
        for node in body:
            if node.type == "type_declaration":
                self._read_type_decl(node, result)
            elif node.type == "method_declaration":
                result.methods.append(self._read_method(node))
            elif node.type in _OTHER_KEYWORDS:
                result.others.append(OtherDecl(_OTHER_KEYWORDS[node.type], _line(node)))
            elif node.type == "import_declaration":
                raise self.error("imports must appear before other declarations", node)
            else:
                raise self.error(f"unexpected {node.type} at top level", node)
        return result

    def _import_specs(self, node: Node) -> Iterator[ImportSpec]:
        for child in self.named_children(node):
            if child.type == "import_spec_list":
                yield from self._import_specs(child)
                continue
            if child.type != "import_spec":
                continue
            alias_node = child.child_by_field_name("name")
            path = unquote_import_path(self.text(child.child_by_field_name("path")))
            alias = self.text(alias_node) if alias_node is not None else ""
            yield ImportSpec(path=path, alias=alias, line=_line(child))

    def _read_type_decl(self, node: Node, result: SourceFile) -> None:
        specs = [child for child in self.named_children(node) if child.type in {"type_spec", "type_alias"}]
        group_doc = self.doc_for(node)
        for spec in specs:
            doc = self.doc_for(spec)
            if not doc and len(specs) == 1:
                # A lone spec in a group takes the group's doc.
                doc = group_doc
            result.types.append(self._read_type_spec(spec, doc))

    def _read_type_spec(self, spec: Node, doc: str) -> TypeSpec:
        name_node = spec.child_by_field_name("name")
        name = self.text(name_node)
        generic = spec.child_by_field_name("type_parameters") is not None
        body = spec.child_by_field_name("type")
        if body.type == "interface_type":
            return self._read_interface(name, _line(name_node), body, doc, generic)
        if body.type == "struct_type":
            return self._read_struct(name, _line(name_node), body, doc, generic)
        return TypeSpec(name=name, kind="other", line=_line(name_node), doc=doc, generic=generic)

    def _read_interface(self, name: str, line: int, body: Node, doc: str, generic: bool) -> TypeSpec:
        methods: list[InterfaceMethod] = []
        embeds: list[TypeExpr] = []
        constraint = False
        for element in self.named_children(body):
            if element.type in _METHOD_ELEMS:
                methods.append(
                    InterfaceMethod(
                        self.text(element.child_by_field_name("name")),
                        self.signature(
                            element.child_by_field_name("parameters"),
                            element.child_by_field_name("result"),
                        ),
                    )
                )
                continue
            terms = self.named_children(element) if element.type in _EMBED_ELEMS else [element]
            if element.type in {"constraint_elem", "struct_elem"} or len(terms) != 1:
                constraint = True
                continue
            term = terms[0]
            if term.type not in {"type_identifier", "qualified_type", "generic_type"}:
                # ~T and non-interface terms only appear in constraints.
                constraint = True
                continue
            embeds.append(self.type_of(term))
        return TypeSpec(
            name=name,
            kind="interface",
            line=line,
            doc=doc,
            methods=tuple(methods),
            embeds=tuple(embeds),
            generic=generic,
            constraint=constraint,
        )

    def _read_struct(self, name: str, line: int, body: Node, doc: str, generic: bool) -> TypeSpec:
        fields: list[str] = []
        embeds: list[TypeExpr] = []
        declarations = [
            child
            for container in self.named_children(body)
            if container.type == "field_declaration_list"
            for child in self.named_children(container)
            if child.type == "field_declaration"
        ]
        for declaration in declarations:
            names = declaration.children_by_field_name("name")
            if names:
                fields.extend(self.text(item) for item in names)
                continue
            embedded = self.type_of(declaration.child_by_field_name("type"))
            if not isinstance(embedded, Named):
                raise self.error("unsupported embedded field", declaration)
            fields.append(embedded.spelling or embedded.name)
            pointer = any(child.type == "*" for child in declaration.children)
            embeds.append(Pointer(embedded) if pointer else embedded)
        return TypeSpec(
            name=name,
            kind="struct",
            line=line,
            doc=doc,
            fields=tuple(fields),
            embeds=tuple(embeds),
            generic=generic,
        )

    def _read_receiver(self, receiver: Node) -> tuple[str, str, bool]:
        declarations = self.named_children(receiver)
        if len(declarations) != 1:
            raise self.error("method has multiple receivers", receiver)
        declaration = declarations[0]
        names = declaration.children_by_field_name("name")
        var = self.text(names[0]) if names else ""
        node = declaration.child_by_field_name("type")
        pointer = False
        while node.type in {"pointer_type", "parenthesized_type"}:
            pointer = pointer or node.type == "pointer_type"
            node = self.named_children(node)[-1]
        if node.type == "generic_type":
            node = node.child_by_field_name("type")
        if node.type != "type_identifier":
            raise self.error("invalid receiver type", node)
        return self.text(node), var, pointer

    def _read_method(self, node: Node) -> MethodDecl:
        receiver, receiver_var, pointer = self._read_receiver(node.child_by_field_name("receiver"))
        return MethodDecl(
            receiver=receiver,
            receiver_var=receiver_var,
            pointer=pointer,
            name=self.text(node.child_by_field_name("name")),
            signature=self.signature(
                node.child_by_field_name("parameters"), node.child_by_field_name("result")
            ),
            line=_line(node),
            start=node.start_byte,
            end=node.end_byte,
        )


def parse_file(source: str, *, filename: str = "", local_path: str = "") -> SourceFile:
    return FileReader(source, filename=filename, local_path=local_path).parse()
