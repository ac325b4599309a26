from __future__ import annotations

import textwrap

import pytest

from sumgen.exceptions import GrammarError
from sumgen.synthesis.definition import (
    join_words,
    parse_definition,
    scan_directives,
    tokenize_definition,
)
from sumgen.synthesis.model import SumDefinition, VariantRef


def _doc(text: str) -> str:
    return textwrap.dedent(text).strip("\n")


def test_parse_definition_reads_value_and_pointer_variants() -> None:
    definition = parse_definition("Shape = Circle | *Square|Tri2")
    assert definition == SumDefinition(
        "Shape",
        (VariantRef("Circle"), VariantRef("Square", pointer=True), VariantRef("Tri2")),
    )
    assert str(definition) == "Shape = Circle | *Square | Tri2"


def test_join_words_concatenates_without_separators() -> None:
    text = join_words(["Shape", "=", "Circle", "|", "*Square"])
    assert text == "Shape=Circle|*Square"
    assert parse_definition(text).variants[1] == VariantRef("Square", pointer=True)


def test_tokenizer_keeps_star_only_in_leading_position() -> None:
    assert [token.text for token in tokenize_definition("A=*B|C*D")] == [
        "A",
        "=",
        "*B",
        "|",
        "C",
        "*D",
    ]
    assert [token.text for token in tokenize_definition("9x")] == ["9", "x"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "Shape",
        "Shape =",
        "Shape = Circle |",
        "*Shape = Circle",
        "Shape = * Circle",
        "Shape = Circle Square",
        "Shape = Circle, Square",
        "Shape == Circle",
        "Shape = 1Circle",
    ],
)
def test_parse_definition_rejects_malformed_text(text: str) -> None:
    with pytest.raises(GrammarError) as excinfo:
        parse_definition(text)
    assert 'Definition = ContractName "=" Variant { "|" Variant }' in str(excinfo.value)


def test_scan_directives_reads_single_line_directive() -> None:
    scan = scan_directives(
        _doc(
            """
            Shape is a shape.

            sumgen: Shape = Circle | *Square
            """
        ),
        contract="Shape",
    )
    assert [str(item) for item in scan.definitions] == ["Shape = Circle | *Square"]
    assert scan.skipped == ()


def test_scan_directives_continues_while_a_variant_is_pending() -> None:
    scan = scan_directives(
        _doc(
            """
            sumgen: Shape =
                Circle |
                *Square
            """
        ),
        contract="Shape",
    )
    assert [str(item) for item in scan.definitions] == ["Shape = Circle | *Square"]


def test_scan_directives_continues_on_leading_bar() -> None:
    scan = scan_directives(
        _doc(
            """
            sumgen: Shape = Circle
              | Square
              | Triangle
            Trailing prose does not belong to the directive.
            """
        ),
        contract="Shape",
    )
    assert [str(item) for item in scan.definitions] == ["Shape = Circle | Square | Triangle"]
    assert scan.skipped == ()


def test_scan_directives_unions_several_directives() -> None:
    scan = scan_directives(
        _doc(
            """
            sumgen: Shape = Circle | Square
            sumgen: Shape = Square | *Triangle | Circle
            """
        ),
        contract="Shape",
    )
    (definition,) = scan.definitions
    assert definition.variants == (
        VariantRef("Circle"),
        VariantRef("Square"),
        VariantRef("Triangle", pointer=True),
    )


def test_scan_directives_ignores_other_contracts() -> None:
    scan = scan_directives(
        _doc(
            """
            sumgen: Other = Circle
            sumgen: Shape = Square
            """
        ),
        contract="Shape",
    )
    assert [str(item) for item in scan.definitions] == ["Shape = Square"]
    assert scan.skipped == ()


def test_abandoned_directive_does_not_affect_later_candidates() -> None:
    scan = scan_directives(
        _doc(
            """
            sumgen: Shape = Circle |

            sumgen: Shape = Square
            sumgen: Shape = Triangle | !
            """
        ),
        contract="Shape",
    )
    assert [str(item) for item in scan.definitions] == ["Shape = Square"]
    assert [(item.line, item.contract) for item in scan.skipped] == [(1, "Shape"), (4, "Shape")]
    assert "expected variant" in scan.skipped[0].reason


def test_directive_line_interrupts_a_pending_directive() -> None:
    scan = scan_directives(
        _doc(
            """
            sumgen: Shape = Circle |
            sumgen: Shape = Square
            """
        ),
        contract="Shape",
    )
    assert [str(item) for item in scan.definitions] == ["Shape = Square"]
    assert len(scan.skipped) == 1


def test_custom_keyword_is_honored() -> None:
    scan = scan_directives("+union: Shape = Circle", contract="Shape", keyword="+union:")
    assert [str(item) for item in scan.definitions] == ["Shape = Circle"]


def test_keyword_must_lead_the_line() -> None:
    scan = scan_directives("See sumgen: Shape = Circle", contract="Shape")
    assert scan.definitions == ()
