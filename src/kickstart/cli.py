"""
kickstart.cli - Command Line Interface
======================================

This module provides the command-line interface for kickstart using Typer.

Architecture
------------
    app (main entry point)
    └── web  - Create a new Express web app

The ``web`` command only collects input. Flags become a ``ConfigLayer``,
the optional preset file becomes another, and ``normalize_options`` merges
them (prompting for anything missing unless ``--silent``). The resulting
configuration is handed to ``create_project``.

Usage Examples
--------------
Interactive mode (prompts for features and database credentials):
    $ kickstart web myapp

Non-interactive mode:
    $ kickstart web myapp --pg --session --passport local,google --silent

From a preset file (implies --silent):
    $ kickstart web myapp --preset answers.json

Inspect the plan without writing anything:
    $ kickstart web myapp --passport bearer --dry-run --silent

See Also
--------
- normalizer.py: Option merging and prerequisite rules
- generator.py: Generation pipeline
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kickstart import __version__
from kickstart.errors import KickstartError
from kickstart.generator import create_project
from kickstart.models import ConfigLayer, ProjectConfig, select_strategies
from kickstart.normalizer import load_preset, normalize_options
from kickstart.prompts import QuestionaryPrompter
from kickstart.registry import StrategyKind


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="kickstart",
    help="Scaffold a new Node.js web project.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Console for rich output
console = Console()
err_console = Console(stderr=True, soft_wrap=True)

STRATEGY_HELP = ", ".join(kind.value for kind in StrategyKind)


# =============================================================================
# Version Callback
# =============================================================================

def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]kickstart[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]Scaffold a ready-to-run Node.js web project[/]\n"
            f"[dim]Stack: express + ejs + pg + passport[/]",
            border_style="green",
        ))
        raise typer.Exit()


def fail(message: str) -> typer.Exit:
    """Print an error to stderr and return the exit to raise."""
    err_console.print(f"[bold red]❌ Error creating project:[/] {escape(message)}")
    return typer.Exit(1)


def show_configuration(config: ProjectConfig) -> None:
    """Print the resolved configuration as a table."""
    table = Table(title="Project Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Name", config.project_name)
    table.add_row("Slug", config.project_slug)
    table.add_row("PostgreSQL", "yes" if config.include_database else "no")
    if config.database_credentials:
        creds = config.database_credentials
        table.add_row(
            "Database",
            f"{creds.user}@{creds.host}:{creds.port}/{creds.database}",
        )
    table.add_row("Sessions", "yes" if config.include_sessions else "no")
    table.add_row("Axios", "yes" if config.include_http_client else "no")
    table.add_row("Auth", ", ".join(config.auth_strategies) or "none")
    table.add_row("Port", config.port)
    table.add_row("Output", str(config.project_dir))

    console.print(table)
    console.print()


# =============================================================================
# Main Application Callback
# =============================================================================

@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold]kickstart[/] - Scaffold a new Node.js project.

    [bold]Quick Start:[/]

        kickstart web myapp

    [bold]Non-interactive:[/]

        kickstart web myapp --pg --session --passport local --silent
    """


# =============================================================================
# Web Command - Create a New Express Web App
# =============================================================================

@app.command()
def web(
    project_name: Annotated[
        str,
        typer.Argument(help="Name of the project to create"),
    ],
    pg: Annotated[
        bool | None,
        typer.Option("--pg/--no-pg", help="Include PostgreSQL support"),
    ] = None,
    session: Annotated[
        bool | None,
        typer.Option(
            "--session/--no-session",
            help="Enable session management (enables PostgreSQL)",
        ),
    ] = None,
    axios: Annotated[
        bool | None,
        typer.Option("--axios/--no-axios", help="Include Axios for HTTP requests"),
    ] = None,
    passport: Annotated[
        str | None,
        typer.Option(
            "--passport",
            help=f"Comma-separated auth strategies: {STRATEGY_HELP}",
        ),
    ] = None,
    port: Annotated[
        str | None,
        typer.Option("--port", help="Set the default PORT (default: 3000)"),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--no-dry-run",
            help="Print steps without writing files or installing",
        ),
    ] = None,
    verbose: Annotated[
        bool | None,
        typer.Option("--verbose/--no-verbose", help="Enable detailed logging"),
    ] = None,
    silent: Annotated[
        bool | None,
        typer.Option(
            "--silent/--interactive",
            help="Never prompt; use flags, preset, and defaults",
        ),
    ] = None,
    preset: Annotated[
        Path | None,
        typer.Option(
            "--preset",
            help="JSON (or TOML) preset answers file; implies --silent",
        ),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory to create the project in (default: current directory)",
        ),
    ] = None,
    no_git: Annotated[
        bool,
        typer.Option("--no-git", help="Skip git initialization"),
    ] = False,
) -> None:
    """
    Create a new Express web app.

    [bold]Examples:[/]

        # Interactive mode
        kickstart web myapp

        # PostgreSQL + sessions + local login
        kickstart web myapp --pg --session --passport local --silent

        # Bearer tokens (auto-enables PostgreSQL and sessions)
        kickstart web myapi --passport bearer --silent
    """
    try:
        flags = ConfigLayer(
            include_database=pg,
            include_sessions=session,
            include_http_client=axios,
            auth_strategies=select_strategies(passport, None),
            port=port,
            dry_run=dry_run,
            verbose=verbose,
            non_interactive=silent,
            output_dir=output_dir,
            init_git=False if no_git else None,
        )
        preset_layer = load_preset(preset) if preset is not None else None
        resolved = normalize_options(
            project_name,
            flags,
            preset=preset_layer,
            prompter=QuestionaryPrompter(),
        )
    except (KickstartError, ValidationError) as e:
        raise fail(str(e)) from e

    config = resolved.config

    console.print()
    console.print("[cyan bold]🚀 Kickstart Node — Create a ready-to-run Node.js web project[/]")
    for notice in resolved.notices:
        console.print(f"[yellow]⚠ {notice}[/]")

    if config.verbose:
        console.print()
        show_configuration(config)

    try:
        result = create_project(config, output=console)
    except (FileExistsError, KickstartError) as e:
        raise fail(str(e)) from e
    except Exception as e:
        raise fail(f"Unexpected error: {e}") from e

    if not result.success:
        raise typer.Exit(1)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    app()
