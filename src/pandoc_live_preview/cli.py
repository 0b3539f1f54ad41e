"""Command-line interface for pandoc-live-preview.

Provides commands for auditing and previewing Pandoc cross-references in a
Markdown file from the terminal.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .config import XrefConfig, load_config
from .decorations import SelectionRange, apply_decorations, plan_decorations
from .errors import PreviewError
from .index import scan_document
from .report import generate_audit_report
from .suggestions import accept_suggestion, find_trigger, get_suggestions
from .tags import make_definition_tag

app = typer.Typer(
    name="pandoc-live-preview",
    help="Audit and preview Pandoc figure/table cross-references.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="YAML or JSON settings file")
]
CursorOption = Annotated[
    list[int] | None,
    typer.Option("--cursor", help="Cursor offset to leave undecorated (repeatable)"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pandoc-live-preview version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Audit and preview Pandoc figure/table cross-references."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def _load(file: Path, config: Path | None) -> tuple[str, XrefConfig]:
    text = file.read_text(encoding="utf-8")
    settings = load_config(config) if config else XrefConfig()
    return text, settings


@app.command()
def scan(
    file: Annotated[Path, typer.Argument(help="Path to the Markdown file")],
    format: Annotated[
        str, typer.Option("--format", "-f", help="Report format: markdown or json")
    ] = "markdown",
    config: ConfigOption = None,
) -> None:
    """Report definitions, broken references and untagged images.

    Exits with status 2 when the document has broken references.
    """
    if format not in ("markdown", "json"):
        typer.echo(f"Error: Unsupported format '{format}'", err=True)
        raise typer.Exit(1)

    try:
        text, settings = _load(file, config)
        index = scan_document(text, settings)
        typer.echo(generate_audit_report(index, text, format=format))
    except (PreviewError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if index.orphan_references:
        raise typer.Exit(2)


@app.command()
def preview(
    file: Annotated[Path, typer.Argument(help="Path to the Markdown file")],
    config: ConfigOption = None,
    cursor: CursorOption = None,
) -> None:
    """Print the text with references and definitions rendered as labels."""
    try:
        text, settings = _load(file, config)
        index = scan_document(text, settings)
        selections = [SelectionRange(c, c) for c in cursor or []]
        instructions = plan_decorations(text, index, settings, selections)
        typer.echo(apply_decorations(text, instructions), nl=False)
    except (PreviewError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def decorations(
    file: Annotated[Path, typer.Argument(help="Path to the Markdown file")],
    config: ConfigOption = None,
    cursor: CursorOption = None,
) -> None:
    """Print the decoration instructions as JSON."""
    try:
        text, settings = _load(file, config)
        index = scan_document(text, settings)
        selections = [SelectionRange(c, c) for c in cursor or []]
        instructions = plan_decorations(text, index, settings, selections)
        typer.echo(json.dumps([d.to_dict() for d in instructions], indent=2, ensure_ascii=False))
    except (PreviewError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def suggest(
    file: Annotated[Path, typer.Argument(help="Path to the Markdown file")],
    line: Annotated[int, typer.Option("--line", "-l", help="Cursor line (1-based)")],
    column: Annotated[int, typer.Option("--column", help="Cursor column (0-based)")],
    config: ConfigOption = None,
) -> None:
    """List completions for the reference being typed at a cursor position."""
    try:
        text, settings = _load(file, config)
    except (PreviewError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    lines = text.split("\n")
    if not 1 <= line <= len(lines):
        typer.echo(f"Error: Line {line} is out of range (1-{len(lines)})", err=True)
        raise typer.Exit(1)

    trigger = find_trigger(lines[line - 1], column, line - 1)
    if trigger is None:
        typer.echo("No reference being typed at the cursor")
        return

    index = scan_document(text, settings)
    for suggestion in get_suggestions(index, trigger.query, settings.suggestion_limit):
        replacement = accept_suggestion(suggestion, trigger, settings)
        typer.echo(f"{suggestion}\t{replacement.text}")


@app.command("new-tag")
def new_tag(
    kind: Annotated[str, typer.Argument(help="fig or tbl")],
) -> None:
    """Print a new definition tag with a timestamp id."""
    try:
        typer.echo(make_definition_tag(kind))
    except PreviewError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
