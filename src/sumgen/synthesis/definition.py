"""Sum-type declaration parsing.

Both input surfaces share one tokenizer and one grammar::

    Definition   = ContractName "=" Variant { "|" Variant } .
    ContractName = identifier .
    Variant      = [ "*" ] identifier .

Explicit definitions arrive as one string. Annotation directives are found in
the doc comment of an interface declaration, e.g.::

    // Shape is a closed set of shapes.
    //
    // sumgen: Shape = Circle | *Square |
    //     Triangle
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Sequence

from sumgen.catalog.model import Catalog
from sumgen.exceptions import GrammarError
from sumgen.invariants import never
from sumgen.synthesis.merge import union_definitions
from sumgen.synthesis.model import SkippedDirective, SumDefinition, VariantRef

DEFAULT_DIRECTIVE = "sumgen:"


def _is_ident_rune(ch: str, index: int) -> bool:
    return ch.isalpha() or (ch == "*" and index == 0) or (ch.isdecimal() and index > 0)


def is_identifier(text: str, *, allow_pointer: bool = True) -> bool:
    if not text or not all(_is_ident_rune(ch, index) for index, ch in enumerate(text)):
        return False
    if text.startswith("*"):
        return allow_pointer and len(text) > 1
    return True


@dataclass(frozen=True)
class DefToken:
    text: str
    column: int


def tokenize_definition(text: str) -> list[DefToken]:
    """Split into identifier-rune runs and single-character tokens."""
    tokens: list[DefToken] = []
    index = 0
    while index < len(text):
        ch = text[index]
        if ch.isspace():
            index += 1
            continue
        if _is_ident_rune(ch, 0):
            start = index
            index += 1
            while index < len(text) and _is_ident_rune(text[index], index - start):
                index += 1
            tokens.append(DefToken(text[start:index], start))
            continue
        tokens.append(DefToken(ch, index))
        index += 1
    return tokens


class _State(Enum):
    CONTRACT = "contract name"
    EQUALS = '"="'
    VARIANT = "variant"
    AFTER_VARIANT = '"|" or end of definition'


class GrammarDeviation(Exception):
    """A token the grammar does not allow at this point."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


@dataclass
class DefinitionBuilder:
    """Incremental recognizer; tokens may be fed across several lines."""

    state: _State = _State.CONTRACT
    contract: str = ""
    variants: list[VariantRef] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.state is _State.AFTER_VARIANT

    def feed(self, token: DefToken) -> None:
        text = token.text
        if self.state is _State.CONTRACT:
            if not is_identifier(text, allow_pointer=False):
                raise GrammarDeviation(f"expected contract name, found {text!r}")
            self.contract = text
            self.state = _State.EQUALS
        elif self.state is _State.EQUALS:
            if text != "=":
                raise GrammarDeviation(f'expected "=", found {text!r}')
            self.state = _State.VARIANT
        elif self.state is _State.VARIANT:
            if not is_identifier(text):
                raise GrammarDeviation(f"expected variant name, found {text!r}")
            if text.startswith("*"):
                self.variants.append(VariantRef(text[1:], pointer=True))
            else:
                self.variants.append(VariantRef(text))
            self.state = _State.AFTER_VARIANT
        elif self.state is _State.AFTER_VARIANT:
            if text != "|":
                raise GrammarDeviation(f'expected "|", found {text!r}')
            self.state = _State.VARIANT
        else:
            never("unknown definition state", state=self.state)

    def expected(self) -> str:
        return self.state.value

    def build(self, *, line: int = 0) -> SumDefinition:
        if not self.complete:
            never("definition built before completion", state=self.state)
        return SumDefinition(self.contract, tuple(self.variants), line=line)


def parse_definition(text: str) -> SumDefinition:
    """Parse one explicit definition, raising ``GrammarError`` on any deviation."""
    builder = DefinitionBuilder()
    for token in tokenize_definition(text):
        try:
            builder.feed(token)
        except GrammarDeviation as exc:
            raise GrammarError(text, f"column {token.column + 1}: {exc.detail}") from None
    if not builder.complete:
        raise GrammarError(text, f"unexpected end of definition, expected {builder.expected()}")
    return builder.build()


def join_words(words: Sequence[str]) -> str:
    """Command-line words are concatenated without separators."""
    return "".join(words)


@dataclass(frozen=True)
class DirectiveScan:
    definitions: tuple[SumDefinition, ...] = ()
    skipped: tuple[SkippedDirective, ...] = ()


def _directive_body(line: str, keyword: str) -> str | None:
    stripped = line.lstrip()
    if not stripped.startswith(keyword):
        return None
    return stripped[len(keyword):]


def iter_directive_starts(lines: Sequence[str], keyword: str) -> Iterator[int]:
    """Indexes of lines that open a directive; each one is an independent candidate."""
    for index, line in enumerate(lines):
        if _directive_body(line, keyword) is not None:
            yield index


def _continues(line: str, keyword: str) -> bool:
    return bool(line.strip()) and _directive_body(line, keyword) is None


def read_directive(
    lines: Sequence[str],
    start: int,
    *,
    contract: str,
    keyword: str = DEFAULT_DIRECTIVE,
) -> SumDefinition | SkippedDirective | None:
    """Read the directive opened at ``lines[start]``.

    Returns the definition, a ``SkippedDirective`` when the text breaks the
    grammar, or ``None`` when the directive names another contract.
    """
    body = _directive_body(lines[start], keyword)
    if body is None:
        never("directive read from a non-directive line", line=start)
    builder = DefinitionBuilder()
    index = start
    text = body
    consumed = [lines[start].strip()]

    def skipped(reason: str) -> SkippedDirective:
        return SkippedDirective(contract, start + 1, "\n".join(consumed), reason)

    while True:
        for token in tokenize_definition(text):
            try:
                builder.feed(token)
            except GrammarDeviation as exc:
                return skipped(exc.detail)
            if builder.state is _State.EQUALS and builder.contract != contract:
                return None
        following = index + 1
        has_next = following < len(lines) and _continues(lines[following], keyword)
        if builder.complete:
            if not has_next:
                break
            next_tokens = tokenize_definition(lines[following])
            if not next_tokens or next_tokens[0].text != "|":
                break
        elif not has_next:
            return skipped(f"directive ends early, expected {builder.expected()}")
        index = following
        text = lines[following]
        consumed.append(text.strip())
    return builder.build(line=start + 1)


def scan_directives(
    doc: str,
    *,
    contract: str,
    keyword: str = DEFAULT_DIRECTIVE,
) -> DirectiveScan:
    """Collect every directive for ``contract`` in one doc comment, unioned."""
    lines = doc.splitlines()
    definitions: list[SumDefinition] = []
    skipped: list[SkippedDirective] = []
    for start in iter_directive_starts(lines, keyword):
        outcome = read_directive(lines, start, contract=contract, keyword=keyword)
        if isinstance(outcome, SumDefinition):
            definitions.append(outcome)
        elif isinstance(outcome, SkippedDirective):
            skipped.append(outcome)
    return DirectiveScan(
        definitions=tuple(union_definitions(definitions)),
        skipped=tuple(skipped),
    )


def scan_catalog(catalog: Catalog, *, keyword: str = DEFAULT_DIRECTIVE) -> DirectiveScan:
    """Scan the doc comment of every interface in ``catalog``."""
    definitions: list[SumDefinition] = []
    skipped: list[SkippedDirective] = []
    for entry in catalog.interfaces():
        if not entry.doc:
            continue
        scan = scan_directives(entry.doc, contract=entry.name, keyword=keyword)
        definitions.extend(scan.definitions)
        skipped.extend(scan.skipped)
    return DirectiveScan(
        definitions=tuple(union_definitions(definitions)),
        skipped=tuple(skipped),
    )
