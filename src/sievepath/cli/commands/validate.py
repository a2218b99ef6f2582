"""
Validate command.

Checks XPath expressions against a document and reports match counts.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sievepath.core.config import AppConfig, ContentType, EngineMode
from sievepath.core.service import validate_selectors

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)


def validate_command(
    ctx: typer.Context,
    document: Path = typer.Argument(..., help="HTML/XML file"),
    expressions: List[str] = typer.Option(
        ...,
        "--xpath",
        "-x",
        help="XPath expression to check (repeatable)",
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
) -> None:
    """Check XPath expressions against a document."""
    settings: AppConfig = ctx.obj or AppConfig()

    try:
        html = document.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        err_console.print(f"[red]Cannot read document:[/red] {e}")
        raise typer.Exit(1)

    report = validate_selectors(
        html,
        expressions,
        engine=engine or settings.engine.engine,
        content_type=ContentType.XML if xml else ContentType.HTML,
    )

    table = Table(title="XPath Validation", show_header=True, header_style="bold magenta")
    table.add_column("Expression", style="cyan")
    table.add_column("Valid", justify="center")
    table.add_column("Matches", justify="right")
    table.add_column("Sample / Error")

    for result in report.results:
        if result.valid:
            table.add_row(
                escape(result.expression),
                "[green]OK[/green]",
                str(result.match_count),
                escape(result.sample) if result.sample else "[dim]-[/dim]",
            )
        else:
            table.add_row(
                escape(result.expression),
                "[red]x[/red]",
                "[dim]-[/dim]",
                f"[red]{escape(result.error or '')}[/red]",
            )

    console.print(table)

    if not report.valid:
        raise typer.Exit(1)
