"""
Extract command.

Runs a pattern file against a local document or a URL and prints the
records as JSON.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.markup import escape

from sievepath.core.config import (
    AppConfig,
    ConfigError,
    ContentType,
    EngineMode,
    ScrapeRequest,
    load_pattern_set,
)
from sievepath.core.errors import SieveError
from sievepath.core.service import ScraperService

err_console = Console(stderr=True, legacy_windows=False)


def _read_document(document: Path) -> str:
    if str(document) == "-":
        return sys.stdin.read()
    return document.read_text(encoding="utf-8", errors="replace")


def extract_command(
    ctx: typer.Context,
    document: Optional[Path] = typer.Argument(
        None,
        help="HTML/XML file ('-' for stdin); fetched from --url when omitted",
    ),
    patterns: Path = typer.Option(
        ...,
        "--patterns",
        "-p",
        help="Pattern file (YAML or JSON)",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Document URL (fetched when no DOCUMENT is given, base URL for transforms)",
    ),
    engine: Optional[EngineMode] = typer.Option(
        None,
        "--engine",
        "-e",
        help="Tree engine (native, browser)",
    ),
    xml: bool = typer.Option(
        False,
        "--xml",
        help="Parse the document as XML",
    ),
    proxy: Optional[str] = typer.Option(
        None,
        "--proxy",
        help="Proxy URL, or 'env' for HTTP_PROXY/HTTPS_PROXY",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write records to this file instead of stdout",
    ),
) -> None:
    """Extract records from a document using a pattern file."""
    settings: AppConfig = ctx.obj or AppConfig()

    try:
        pattern_set = load_pattern_set(patterns)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    html: str | None = None
    if document is not None:
        try:
            html = _read_document(document)
        except OSError as e:
            err_console.print(f"[red]Cannot read document:[/red] {e}")
            raise typer.Exit(1)

    request = ScrapeRequest(
        url=url or pattern_set.url,
        html=html,
        patterns=pattern_set.fields,
        use_proxy=True if proxy == "env" else (proxy or False),
        content_type=ContentType.XML if xml else pattern_set.content_type,
        engine=engine or pattern_set.engine,
    )

    service = ScraperService(settings=settings)
    try:
        result = asyncio.run(service.evaluate_website(request))
    except SieveError as e:
        err_console.print(f"[red]Extraction failed:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    data = orjson.dumps(result.records, option=orjson.OPT_INDENT_2)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        err_console.print(
            f"[green]Wrote {result.record_count} record(s) to[/green] {output} "
            f"[dim]({result.elapsed_ms:.0f}ms, {result.engine})[/dim]"
        )
    else:
        typer.echo(data.decode("utf-8"))

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")
