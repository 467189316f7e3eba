"""Command-line interface for richtoken."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from richtoken import __version__
from richtoken.config import get_settings
from richtoken.core.facade import DocumentFacade, FacadeError
from richtoken.core.ranges import RangeApplicationError
from richtoken.core.search import find_text_ranges
from richtoken.core.tooltip import Rect, Size, Viewport, compute_placement, MemoryOverlayLayer
from richtoken.formatting.ir import Document, Embed
from richtoken.formatting.markup import render_with_escaped_spaces
from richtoken.formatting.payloads import HighlightRequest, TooltipPlacement
from richtoken.host.base import SurfaceError
from richtoken.host.memory import MemorySurface

app = typer.Typer(
    name="richtoken",
    help="Convert between placeholder/highlight storage text and editor documents.",
    add_completion=False,
)
console = Console()

# Options shared by every command, set in the app callback
state = {"verbose": False}

HANDLED_ERRORS = (FacadeError, SurfaceError, RangeApplicationError, ValidationError, OSError)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"richtoken v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def parse_numbers(value: str, count: int, option: str) -> list[float]:
    """Parse a comma-separated list of numbers."""
    try:
        numbers = [float(part) for part in value.split(",")]
    except ValueError:
        raise typer.BadParameter(f"{option} must be numbers separated by commas")
    if len(numbers) != count:
        raise typer.BadParameter(f"{option} needs exactly {count} numbers")
    return numbers


def fail(error: Exception) -> None:
    """Report an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error}")
    if state["verbose"]:
        console.print_exception()
    raise typer.Exit(1)


def read_storage(path: Path) -> str:
    if not path.is_file():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def build_facade(highlights: Optional[list[str]] = None) -> DocumentFacade:
    facade = DocumentFacade(MemorySurface())
    if highlights:
        facade.set_highlight_requests([HighlightRequest(text=text) for text in highlights])
    return facade


def document_rows(document: Document) -> list[dict]:
    rows = []
    for offset, op in document.iter_offsets():
        if isinstance(op, Embed):
            rows.append({"offset": offset, "embed": op.kind, "value": op.value.model_dump(mode="json")})
        else:
            rows.append(
                {
                    "offset": offset,
                    "text": op.text,
                    "attributes": sorted(op.attributes),
                }
            )
    return rows


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Placeholder and highlight token bridge for rich-text editors.

    Examples:

        richtoken load letter.html --highlight "Dear"

        richtoken roundtrip letter.html

        richtoken find letter.html "regards"

        richtoken place --anchor 10,4,60,16 --viewport 800,600 --text "Hint"
    """
    state["verbose"] = verbose
    configure_logging(verbose)


@app.command()
def load(
    path: Path = typer.Argument(..., help="Storage text file"),
    highlight: Optional[list[str]] = typer.Option(
        None,
        "--highlight",
        "-h",
        help="Phrase to highlight (repeatable)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print ops as JSON"),
) -> None:
    """Load storage text and print the resulting document ops."""
    storage = read_storage(path)
    try:
        facade = build_facade(highlight)
        facade.load(storage)
    except HANDLED_ERRORS as e:
        fail(e)
    rows = document_rows(facade.surface.get_document())

    if as_json:
        console.print_json(json.dumps(rows))
        return

    table = Table(title=str(path))
    table.add_column("Offset", justify="right")
    table.add_column("Kind")
    table.add_column("Content")
    table.add_column("Attributes")
    for row in rows:
        if "embed" in row:
            table.add_row(str(row["offset"]), row["embed"], json.dumps(row["value"]), "")
        else:
            table.add_row(str(row["offset"]), "text", repr(row["text"]), ", ".join(row["attributes"]))
    console.print(table)


@app.command()
def roundtrip(
    path: Path = typer.Argument(..., help="Storage text file"),
) -> None:
    """Load storage text and extract it again, failing if it changed."""
    original = read_storage(path)
    try:
        facade = build_facade()
        facade.load(original)
        extracted = facade.extract()
    except HANDLED_ERRORS as e:
        fail(e)

    console.print(extracted, markup=False, highlight=False)
    if extracted != original:
        console.print("[yellow]Round trip changed the content[/yellow]")
        raise typer.Exit(1)
    console.print("[green]Round trip is lossless[/green]")


@app.command()
def find(
    path: Path = typer.Argument(..., help="Storage text file"),
    phrase: str = typer.Argument(..., help="Phrase to locate"),
    case_sensitive: bool = typer.Option(
        False,
        "--case-sensitive",
        "-c",
        help="Match case exactly",
    ),
) -> None:
    """Locate a phrase in the loaded document (offsets count embeds as one)."""
    storage = read_storage(path)
    try:
        facade = build_facade()
        facade.load(storage)
    except HANDLED_ERRORS as e:
        fail(e)
    ranges = find_text_ranges(
        facade.surface.get_document(), phrase, case_sensitive=case_sensitive
    )
    if not ranges:
        console.print(f"[yellow]No matches for[/yellow] {phrase!r}")
        raise typer.Exit(1)
    for located in ranges:
        console.print(f"start={located.start} length={located.length}")


@app.command()
def place(
    anchor: str = typer.Option(..., "--anchor", "-a", help="Anchor rect: left,top,width,height"),
    viewport: str = typer.Option(..., "--viewport", "-w", help="Viewport: width,height"),
    text: str = typer.Option(..., "--text", "-t", help="Tooltip text"),
    placement: TooltipPlacement = typer.Option(
        TooltipPlacement.TOP,
        "--placement",
        "-p",
        help="Preferred side",
    ),
) -> None:
    """Compute where a tooltip overlay would be placed."""
    left, top, width, height = parse_numbers(anchor, 4, "--anchor")
    vw, vh = parse_numbers(viewport, 2, "--viewport")
    size: Size = MemoryOverlayLayer().measure(text)
    result = compute_placement(
        Rect(left, top, width, height), size, Viewport(vw, vh), preferred=placement
    )
    side = result.side.value if result.side else "clamped"
    rect = result.rect
    console.print(
        f"side={side} left={rect.left:g} top={rect.top:g} "
        f"width={rect.width:g} height={rect.height:g}"
    )


@app.command()
def preview(
    path: Path = typer.Argument(..., help="Storage text file"),
    highlight: Optional[list[str]] = typer.Option(
        None,
        "--highlight",
        "-h",
        help="Phrase to highlight (repeatable)",
    ),
) -> None:
    """Print the editor markup with spaces shown as &nbsp;."""
    storage = read_storage(path)
    try:
        markup = build_facade(highlight).serialize(storage)
    except HANDLED_ERRORS as e:
        fail(e)
    console.print(render_with_escaped_spaces(markup), markup=False, highlight=False)


if __name__ == "__main__":
    app()
