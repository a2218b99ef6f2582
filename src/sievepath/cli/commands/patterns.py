"""
Pattern file commands.

Commands for validating and inspecting pattern files.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sievepath.core.config import ConfigError, load_pattern_set, validate_pattern_file

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)

app = typer.Typer(
    help="Inspect pattern files",
    no_args_is_help=True,
)


@app.command("lint")
def lint_patterns(
    path: Path = typer.Argument(..., help="Pattern file (YAML or JSON)"),
) -> None:
    """Validate a pattern file without running it."""
    errors = validate_pattern_file(path)

    if errors:
        err_console.print(f"[red]Invalid pattern file:[/red] {path}")
        for error in errors:
            err_console.print(f"  - {escape(error)}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] {path}")


@app.command("show")
def show_patterns(
    path: Path = typer.Argument(..., help="Pattern file (YAML or JSON)"),
) -> None:
    """List the fields of a pattern file."""
    try:
        pattern_set = load_pattern_set(path)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    table = Table(title=pattern_set.name or str(path), show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Returns")
    table.add_column("Patterns")
    table.add_column("Flags")

    for descriptor in pattern_set.fields:
        flags = []
        if descriptor.is_container:
            flags.append("container")
        if descriptor.multiple:
            flags.append("multiple" if descriptor.multiple is True else descriptor.multiple)
        if descriptor.multiline:
            flags.append("multiline")
        if descriptor.pipes.custom:
            flags.append("transforms: " + ", ".join(c.type for c in descriptor.pipes.custom))

        patterns = "\n".join(escape(p) for p in descriptor.patterns)
        if descriptor.fallback_patterns:
            patterns += "\n[dim]" + "\n".join(escape(p) for p in descriptor.fallback_patterns) + "[/dim]"

        table.add_row(descriptor.key, descriptor.return_type.value, patterns, ", ".join(flags))

    console.print(table)
