"""
Check command.

Probes URLs with HEAD requests and reports which are alive.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sievepath.core.config import AppConfig
from sievepath.core.service import ScraperService

console = Console(legacy_windows=False)


def check_command(
    ctx: typer.Context,
    urls: List[str] = typer.Argument(..., help="URLs to check"),
    proxy: Optional[str] = typer.Option(
        None,
        "--proxy",
        help="Proxy URL, or 'env' for HTTP_PROXY/HTTPS_PROXY",
    ),
) -> None:
    """Check whether URLs answer with a 2xx/3xx status."""
    settings: AppConfig = ctx.obj or AppConfig()
    service = ScraperService(settings=settings)

    use_proxy: bool | str = True if proxy == "env" else (proxy or False)
    results = asyncio.run(service.check_url_alive(urls, use_proxy=use_proxy))

    table = Table(title="URL Health", show_header=True, header_style="bold magenta")
    table.add_column("URL", style="cyan")
    table.add_column("Alive", justify="center")
    table.add_column("Status", justify="right")
    table.add_column("Error")

    for health in results:
        table.add_row(
            health.url,
            "[green]OK[/green]" if health.alive else "[red]x[/red]",
            str(health.status_code) if health.status_code is not None else "[dim]-[/dim]",
            escape(health.error or ""),
        )

    console.print(table)

    if not all(h.alive for h in results):
        raise typer.Exit(1)
