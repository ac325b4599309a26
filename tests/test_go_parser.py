from __future__ import annotations

import textwrap

import pytest

from sumgen.exceptions import SourceSyntaxError, UnresolvedNameError
from sumgen.golang.parser import default_package_name, parse_file, parse_signature_text
from sumgen.golang.types import (
    Array,
    Chan,
    EmptyInterface,
    Func,
    Literal,
    Map,
    Named,
    Pointer,
    Slice,
)


def _parse(source: str, **kwargs):
    return parse_file(textwrap.dedent(source).lstrip(), filename="x.go", **kwargs)


def _param_types(text: str, **kwargs):
    return [param.type for param in parse_signature_text(text, **kwargs).params]


def test_unterminated_string_is_a_syntax_error() -> None:
    with pytest.raises(SourceSyntaxError) as excinfo:
        parse_file('package p\n\nvar s = "open\n', filename="bad.go")
    assert "bad.go" in str(excinfo.value)


def test_default_package_name_strips_versions_and_prefixes() -> None:
    assert default_package_name("io") == "io"
    assert default_package_name("github.com/x/go-yaml") == "yaml"
    assert default_package_name("gopkg.in/yaml.v3") == "yaml"
    assert default_package_name("example.com/mod/v2") == "mod"
    assert default_package_name("example.com/my-lib") == "my_lib"


def test_parse_signature_text_groups_named_parameters() -> None:
    signature = parse_signature_text("(a, b int, rest ...string) (n int, err error)")
    assert [param.name for param in signature.params] == ["a", "b", "rest"]
    assert signature.params[0].type == Named("int")
    assert signature.params[2].type == Named("string")
    assert signature.variadic
    assert [result.name for result in signature.results] == ["n", "err"]


def test_signature_identity_ignores_names_and_alias_spellings() -> None:
    left = parse_signature_text("(data []byte, r rune) any")
    right = parse_signature_text("([]uint8, int32) interface{}")
    assert left.identical(right)
    assert not left.identical(parse_signature_text("([]byte, rune) error"))


def test_variadic_flag_is_part_of_identity() -> None:
    assert not parse_signature_text("(...int)").identical(parse_signature_text("([]int)"))


def test_signature_parameters_cover_composite_types() -> None:
    types = _param_types(
        "(a *[]map[string]int, b [4]byte, c <-chan int, d chan<- int, e func(int) error,"
        " f interface{}, g struct{ X int }, h any)"
    )
    assert types == [
        Pointer(Slice(Map(Named("string"), Named("int")))),
        Array("4", Named("uint8")),
        Chan("recv", Named("int")),
        Chan("send", Named("int")),
        Func(parse_signature_text("(int) error")),
        EmptyInterface(),
        Literal("struct{X int}"),
        EmptyInterface(),
    ]


def test_qualified_type_requires_resolver() -> None:
    with pytest.raises(SourceSyntaxError):
        parse_signature_text("(w io.Writer)")
    assert _param_types("(w io.Writer)", resolve=lambda alias: "io") == [Named("Writer", "io")]


def test_generic_arguments_are_part_of_the_type() -> None:
    assert _param_types("(b Box[int, string])") == [
        Named("Box", args=(Named("int"), Named("string")))
    ]


def test_malformed_signature_text_is_rejected() -> None:
    with pytest.raises(SourceSyntaxError):
        parse_signature_text("(a int")
    with pytest.raises(SourceSyntaxError):
        parse_signature_text("int")


def test_parse_file_reads_declarations() -> None:
    parsed = _parse(
        """
        // Package shapes holds shapes.
        package shapes

        import (
            "io"
            str "strings"
        )

        // Shape is a shape.
        //
        // sumgen: Shape = Circle
        type Shape interface {
            fmtStringer
            Area() float64
            Write(w io.Writer, b *str.Builder) error
        }

        type fmtStringer interface {
            String() string
        }

        type (
            Circle struct {
                Radius, Diameter float64
                io.Reader
                *Square
            }

            Square struct{ Side float64 }

            Label string
        )

        const pi = 3

        func (c Circle) Area() float64 {
            return pi * c.Radius
        }

        func (s *Square) String() string { return "square" }

        func helper() {}
        """
    )
    assert parsed.package == "shapes"
    assert parsed.package_doc == "Package shapes holds shapes."
    assert [(spec.alias, spec.path) for spec in parsed.imports] == [("", "io"), ("str", "strings")]
    shape = parsed.types[0]
    assert shape.name == "Shape"
    assert shape.kind == "interface"
    assert "sumgen: Shape = Circle" in shape.doc
    assert [method.name for method in shape.methods] == ["Area", "Write"]
    write = shape.methods[1].signature
    assert write.params[0].type == Named("Writer", "io")
    assert write.params[1].type == Pointer(Named("Builder", "strings"))
    assert shape.embeds == (Named("fmtStringer"),)
    circle = next(spec for spec in parsed.types if spec.name == "Circle")
    assert circle.kind == "struct"
    assert set(circle.fields) == {"Radius", "Diameter", "Reader", "Square"}
    assert circle.embeds == (Named("Reader", "io"), Pointer(Named("Square")))
    label = next(spec for spec in parsed.types if spec.name == "Label")
    assert label.kind == "other"
    assert [(method.receiver, method.pointer, method.name) for method in parsed.methods] == [
        ("Circle", False, "Area"),
        ("Square", True, "String"),
    ]
    assert [method.receiver_var for method in parsed.methods] == ["c", "s"]
    assert [other.keyword for other in parsed.others] == ["const", "func"]


def test_parse_file_marks_constraint_and_generic_types() -> None:
    parsed = _parse(
        """
        package p

        type Number interface {
            ~int | ~float64
        }

        type Box[T any] struct {
            Value T
        }
        """
    )
    number, box = parsed.types
    assert number.constraint
    assert box.generic


def test_method_span_covers_body() -> None:
    source = "package p\n\n// Größe\nfunc (t T) M() {\n\tpanic(\"ü\")\n}\n"
    parsed = parse_file(source)
    (method,) = parsed.methods
    assert parsed.text(method.start, method.end) == 'func (t T) M() {\n\tpanic("ü")\n}'


def test_lone_spec_in_type_group_takes_group_doc() -> None:
    parsed = _parse(
        """
        package p

        // sumgen: Shape = Circle
        type (
            Shape interface {
                Area() float64
            }
        )

        // Not attached to either spec.
        type (
            // A is documented.
            A int
            B int
        )
        """
    )
    shape, a, b = parsed.types
    assert shape.doc == "sumgen: Shape = Circle"
    assert a.doc == "A is documented."
    assert b.doc == ""


def test_trailing_comment_is_not_a_doc_comment() -> None:
    parsed = _parse(
        """
        package p

        type A int // about A
        type B interface{}
        """
    )
    assert [spec.doc for spec in parsed.types] == ["", ""]


def test_inline_struct_result_is_not_mistaken_for_body() -> None:
    parsed = _parse(
        """
        package p

        func make() struct{ X int } {
            return struct{ X int }{}
        }

        func (t T) M() {}
        """
    )
    assert [method.name for method in parsed.methods] == ["M"]


def test_unknown_qualifier_raises_unresolved_name() -> None:
    with pytest.raises(UnresolvedNameError):
        _parse(
            """
            package p

            type I interface {
                M() bytes.Buffer
            }
            """
        )


def test_missing_package_clause_is_a_syntax_error() -> None:
    with pytest.raises(SourceSyntaxError):
        parse_file("type T struct{}\n", filename="bad.go")
