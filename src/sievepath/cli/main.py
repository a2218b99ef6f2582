"""
sievepath CLI - Main entry point.

Declarative XPath extraction from the terminal: run pattern files against
local documents or URLs, check selectors and URL liveness.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from sievepath import __app_name__, __version__
from sievepath.core.config import ConfigError, load_app_config
from sievepath.core.logging import setup_logging

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)

# Create main app
app = typer.Typer(
    name=__app_name__,
    help="Declarative XPath extraction with value pipelines",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Application config file (default: ./sievepath.yaml)",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Override the configured log level",
    ),
) -> None:
    """sievepath - Extract structured records from HTML/XML."""
    try:
        settings = load_app_config(config)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    setup_logging(
        level=log_level or settings.logging.level,
        log_file=settings.logging.file,
        json_format=settings.logging.json_format,
        rich_console=settings.logging.rich_console,
    )
    ctx.obj = settings


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import check, extract, patterns, validate  # noqa: E402

app.command("extract")(extract.extract_command)
app.command("validate")(validate.validate_command)
app.command("check")(check.check_command)
app.add_typer(patterns.app, name="patterns", help="Inspect pattern files")


# =============================================================================
# Init Command
# =============================================================================


DEFAULT_APP_CONFIG = """\
# sievepath configuration

engine:
  engine: native          # native | browser
  suppress_errors: false

fetch:
  max_retries: 3
  timeout_seconds: 30
  backoff_max_seconds: 10
  proxy: ${SIEVEPATH_PROXY:-}

logging:
  level: INFO
  file: logs/sievepath.log
  json_format: true
  rich_console: true
"""

EXAMPLE_PATTERNS = """\
# Example pattern file: one record per <article>
name: example-articles
fields:
  - key: item
    patterns: ['//article']
    is_container: true
  - key: title
    patterns: ['.//h2/text()']
    fallback_patterns: ['.//h1/text()']
    pipes:
      trim: true
  - key: link
    patterns: ['.//a/@href']
    pipes:
      custom:
        - type: parse-as-url
  - key: published
    patterns: ['.//time/@datetime']
    pipes:
      custom:
        - type: date-format
"""


@app.command()
def init(
    directory: Path = typer.Argument(Path("."), help="Where to write the files"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing files",
    ),
) -> None:
    """Write a default sievepath.yaml and an example pattern file."""
    files = {
        directory / "sievepath.yaml": DEFAULT_APP_CONFIG,
        directory / "patterns" / "example.yaml": EXAMPLE_PATTERNS,
    }

    for path, content in files.items():
        if path.exists() and not force:
            console.print(f"[yellow]Skipped[/yellow] {path} [dim](exists, use --force)[/dim]")
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        console.print(f"[green]Created[/green] {path}")

    console.print(
        "\nNext: [yellow]sievepath extract page.html -p patterns/example.yaml[/yellow]"
    )


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
