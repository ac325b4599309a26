from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from sumgen import __version__
from sumgen.config import generate_defaults, merge_payload, settings_from_table
from sumgen.exceptions import SumgenError
from sumgen.pipeline import GenerateRequest, GenerateResult, generate
from sumgen.synthesis.definition import join_words

app = typer.Typer(add_completion=False)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sumgen {__version__}")
        raise typer.Exit()


def _emit_skipped(result: GenerateResult) -> None:
    for skipped in result.skipped:
        typer.echo(
            f"sumgen: warning: skipped directive for {skipped.contract} "
            f"(doc line {skipped.line}): {skipped.reason}",
            err=True,
        )


def _emit_summary(result: GenerateResult) -> None:
    if not result.definitions:
        typer.echo("sumgen: no sum type definitions found")
        return
    for definition in result.definitions:
        typer.echo(f"sumgen: {definition}")
    if result.written:
        typer.echo(f"sumgen: wrote {len(result.added)} stub(s) to {result.artifact}")
    else:
        typer.echo(f"sumgen: {result.artifact} is up to date")


@app.command()
def main(
    definition: List[str] = typer.Argument(
        None,
        help='Sum type definition, e.g. "Shape = Circle | *Square". '
        "Without it, doc comment directives are used.",
    ),
    directory: Path = typer.Option(Path("."), "--dir", "-C", help="Go package directory."),
    catalog: Optional[Path] = typer.Option(
        None, "--catalog", help="JSON or YAML type catalog used instead of Go sources."
    ),
    config: Optional[Path] = typer.Option(None, "--config"),
    strict_directives: Optional[bool] = typer.Option(
        None,
        "--strict-directives/--no-strict-directives",
        help="Treat malformed doc comment directives as errors.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True
    ),
) -> None:
    """Generate placeholder methods so every variant satisfies its sum type."""
    defaults = generate_defaults(root=directory, config_path=config)
    payload = merge_payload(
        {
            "catalog": str(catalog.resolve()) if catalog is not None else None,
            "strict_directives": strict_directives,
        },
        defaults,
    )
    settings = settings_from_table(payload, root=directory)
    request = GenerateRequest(
        directory=directory,
        definition=join_words(definition) if definition else None,
        settings=settings,
    )
    try:
        result = generate(request)
    except SumgenError as exc:
        typer.echo(f"sumgen: {exc}", err=True)
        raise typer.Exit(code=1)
    _emit_skipped(result)
    if verbose:
        _emit_summary(result)
