from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from sumgen import __version__, cli

from tests.go_fixtures import SHAPES


def _invoke(args: list[str]):
    runner = CliRunner()
    return runner.invoke(cli.app, args)


def test_cli_version() -> None:
    result = _invoke(["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"sumgen {__version__}"


def test_cli_annotation_mode_writes_artifact(go_package) -> None:
    directory = go_package({"shapes.go": SHAPES})
    result = _invoke(["-C", str(directory), "--verbose"])
    assert result.exit_code == 0, result.output
    assert "sumgen: Shape = Circle | *Square" in result.output
    assert "wrote 3 stub(s)" in result.output
    assert (directory / "shapes_sumgen.go").exists()


def test_cli_joins_definition_words(go_package) -> None:
    directory = go_package({"shapes.go": SHAPES})
    result = _invoke(["--dir", str(directory), "Shape", "=", "Circle"])
    assert result.exit_code == 0, result.output
    text = (directory / "shapes_sumgen.go").read_text(encoding="utf-8")
    assert "func (c Circle) WriteTo" in text
    assert "Square" not in text


def test_cli_reports_errors_with_prefix(go_package) -> None:
    directory = go_package({"shapes.go": SHAPES})
    result = _invoke(["-C", str(directory), "Shape", "=", "Ghost"])
    assert result.exit_code == 1
    assert "sumgen: no type with name 'Ghost'" in result.output


def test_cli_reports_grammar(go_package) -> None:
    directory = go_package({"shapes.go": SHAPES})
    result = _invoke(["-C", str(directory), "Shape", "Circle"])
    assert result.exit_code == 1
    assert 'Definition = ContractName "=" Variant' in result.output


def test_cli_warns_on_skipped_directive_and_honors_strict_flag(go_package) -> None:
    source = SHAPES.replace("Circle | *Square", "Circle |")
    directory = go_package({"shapes.go": source})
    result = _invoke(["-C", str(directory)])
    assert result.exit_code == 0
    assert "sumgen: warning: skipped directive for Shape" in result.output
    strict = _invoke(["-C", str(directory), "--strict-directives"])
    assert strict.exit_code == 1


def test_cli_reads_config_file(go_package) -> None:
    source = SHAPES.replace("// sumgen:", "// +union:")
    directory = go_package({"shapes.go": source})
    (directory / "sumgen.toml").write_text(
        '[generate]\ndirective = "+union:"\nsuffix = "_union.go"\n', encoding="utf-8"
    )
    result = _invoke(["-C", str(directory)])
    assert result.exit_code == 0, result.output
    assert (directory / "shapes_union.go").exists()


def test_cli_catalog_option(tmp_path: Path) -> None:
    directory = tmp_path / "geo"
    directory.mkdir()
    catalog = tmp_path / "types.yaml"
    catalog.write_text(
        "package: {name: geo}\n"
        "types:\n"
        "  Node: {kind: interface, methods: {Kind: '() string'}}\n"
        "  Leaf: {kind: struct}\n",
        encoding="utf-8",
    )
    result = _invoke(["-C", str(directory), "--catalog", str(catalog), "Node=Leaf"])
    assert result.exit_code == 0, result.output
    assert "func (l Leaf) Kind() string {" in (directory / "geo_sumgen.go").read_text(
        encoding="utf-8"
    )


def test_cli_names_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "absent"
    result = _invoke(["-C", str(missing), "Shape=Circle"])
    assert result.exit_code == 1
    assert f"sumgen: {missing} is not a directory" in result.output
    assert "lock" not in result.output
