# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""CLI interface for VAST operations.

Provides commands for:
- Parsing a VAST document
- Unwrapping a wrapper chain to its InLine ads
- Stitching the chain's tracking into a single VAST document
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.pretty import Pretty

from ...api import async_resolve_chain, async_stitch, parse, resolve_chain, stitch
from ...clients import ContentSource
from ...config import get_settings
from ...errors import FetchError, VastError
from ...models.vast import VastDocument

app = typer.Typer(
    name="vast-stitcher",
    help="VAST Stitcher CLI - Parse, unwrap and stitch VAST wrapper chains",
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
):
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load(input_locator: str) -> str:
    """Fetch the root document, exiting on failure."""
    try:
        with ContentSource() as source:
            return source.fetch(input_locator)
    except FetchError as e:
        console.print(f"[red]✗ Could not read {input_locator}: {e}[/red]")
        raise typer.Exit(1)


def _show(document: VastDocument, pretty: bool) -> None:
    if pretty:
        console.print(Pretty(document, expand_all=True))
    else:
        console.print(repr(document), markup=False)


@app.command("parse")
def parse_command(
    input_locator: str = typer.Option(..., "--input", "-i", help="Path, file:// URI or URL"),
    pretty: bool = typer.Option(False, "--pretty", "-p", help="Pretty print the output"),
):
    """Parse a VAST file or URL."""
    content = _load(input_locator)
    try:
        document = parse(content)
    except VastError as e:
        console.print(f"[red]✗ Invalid VAST: {e}[/red]")
        raise typer.Exit(1)
    _show(document, pretty)


@app.command()
def unwrap(
    input_locator: str = typer.Option(..., "--input", "-i", help="Path, file:// URI or URL"),
    pretty: bool = typer.Option(False, "--pretty", "-p", help="Pretty print the output"),
    use_async: bool = typer.Option(False, "--async", help="Fetch hops with the async client"),
):
    """Unwrap a VAST file or URL to find the InLine ads."""
    content = _load(input_locator)
    try:
        if use_async:
            document = asyncio.run(async_resolve_chain(content))
        else:
            document = resolve_chain(content)
    except VastError as e:
        console.print(f"[red]✗ Invalid VAST: {e}[/red]")
        raise typer.Exit(1)

    if document.error:
        console.print(Panel(document.error, title="Unwrap", style="yellow"))
    _show(document, pretty)


@app.command("stitch")
def stitch_command(
    input_locator: str = typer.Option(..., "--input", "-i", help="Path, file:// URI or URL"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
    use_async: bool = typer.Option(False, "--async", help="Fetch hops with the async client"),
):
    """Stitch a complete VAST XML with merged tracking elements."""
    content = _load(input_locator)
    try:
        if use_async:
            stitched_xml = asyncio.run(async_stitch(content))
        else:
            stitched_xml = stitch(content)
    except VastError as e:
        console.print(f"[red]✗ Invalid VAST: {e}[/red]")
        raise typer.Exit(1)

    if output:
        output.write_text(stitched_xml, encoding="utf-8")
        console.print(f"[green]✓[/green] Stitched VAST written to {output}")
    else:
        typer.echo(stitched_xml)


if __name__ == "__main__":
    app()
