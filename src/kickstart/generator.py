"""
kickstart.generator - Project Generation Pipeline
=================================================

This module wires the pieces together for one invocation:

    1. Plan            build_plan(config)              (planner.py)
    2. Verify          check_sources(plan)             (executor.py)
    3. Guard           refuse a non-empty target directory
    4. Execute         execute_plan(plan, mode)        (executor.py)
    5. Report          build_next_steps + write        (reporter.py)

The configuration must already be normalized (see normalizer.py). Any
failure propagates to the caller; files written before the failure stay on
disk.

Usage Example
-------------
>>> from kickstart.generator import create_project
>>> from kickstart.models import ProjectConfig
>>>
>>> config = ProjectConfig(project_name="myapp", dry_run=True)
>>> result = create_project(config)
>>> result.success
True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from kickstart.executor import (
    TEMPLATE_ROOT,
    CommandRunner,
    ExecutionMode,
    check_sources,
    execute_plan,
)
from kickstart.models import ProjectConfig
from kickstart.planner import GenerationPlan, build_plan
from kickstart.reporter import NextStepsDocument, build_next_steps, write_next_steps


# Console for rich output
console = Console()


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class GenerationResult:
    """
    Result of a project generation run.

    Attributes
    ----------
    success : bool
        Whether every action completed.

    project_path : Path
        Path of the generated project.

    mode : ExecutionMode
        Live or dry run.

    plan : GenerationPlan | None
        The plan that was executed.

    files_created : list[Path]
        Files written (empty in dry run).

    commands_run : list[list[str]]
        External commands invoked (empty in dry run).

    warnings : list[str]
        Non-fatal problems, such as skipped unknown strategies.

    next_steps : NextStepsDocument | None
        Guidance document built after generation.

    Examples
    --------
    >>> result = GenerationResult(success=True, project_path=Path("/tmp/app"))
    >>> result.warnings
    []
    """

    success: bool
    project_path: Path
    mode: ExecutionMode = ExecutionMode.LIVE
    plan: GenerationPlan | None = None
    files_created: list[Path] = field(default_factory=list)
    commands_run: list[list[str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    next_steps: NextStepsDocument | None = None


# =============================================================================
# Helpers
# =============================================================================


def ensure_target_available(project_dir: Path) -> None:
    """
    Refuse to generate into an existing, non-empty directory.

    Raises
    ------
    FileExistsError
        If ``project_dir`` exists and is not an empty directory.
    """
    if not project_dir.exists():
        return
    if project_dir.is_dir() and not any(project_dir.iterdir()):
        return
    raise FileExistsError(
        f"Directory '{project_dir}' already exists. "
        "Use a different name or remove the existing directory."
    )


# =============================================================================
# Main Generation Function
# =============================================================================


def create_project(
    config: ProjectConfig,
    *,
    runner: CommandRunner | None = None,
    template_root: Path = TEMPLATE_ROOT,
    output: Console | None = None,
) -> GenerationResult:
    """
    Generate a project from a normalized configuration.

    Parameters
    ----------
    config : ProjectConfig
        Normalized configuration.

    runner : CommandRunner | None
        Runner for npm and git; defaults to subprocess.

    template_root : Path
        Template directory (``render/`` and ``static/``).

    output : Console | None
        Console for progress output.

    Returns
    -------
    GenerationResult
        Outcome including plan, files, commands, and next steps.

    Raises
    ------
    MissingTemplateError
        Before anything is written, if a template source is missing.
    FileExistsError
        In live mode, if the target directory is not empty.
    RenderError
        If any template fails; earlier output remains on disk.
    CollaboratorError
        If npm or git fails.
    """
    out = output or console
    mode = ExecutionMode.from_flag(config.dry_run)
    project_dir = config.project_dir

    result = GenerationResult(success=False, project_path=project_dir, mode=mode)

    out.print()
    out.print(
        Panel(
            f"[bold blue]Creating project:[/] [green]{config.project_name}[/]\n"
            f"[dim]Slug: {config.project_slug} | Port: {config.port} | "
            f"Mode: {mode.value.replace('_', ' ')}[/]",
            title="[bold]kickstart[/]",
            border_style="blue",
        )
    )

    plan = build_plan(config)
    result.plan = plan
    result.warnings.extend(plan.warnings)
    for warning in plan.warnings:
        out.print(f"[yellow]⚠ {warning}[/]")

    check_sources(plan, template_root)

    if mode is ExecutionMode.LIVE:
        ensure_target_available(project_dir)
    elif project_dir.exists():
        message = f"Directory '{project_dir}' already exists; a live run would refuse it."
        result.warnings.append(message)
        out.print(f"[yellow]⚠ {message}[/]")

    report = execute_plan(
        plan,
        project_dir,
        mode=mode,
        template_root=template_root,
        runner=runner,
        output=out,
        verbose=config.verbose,
    )
    result.files_created.extend(report.files_written)
    result.commands_run.extend(report.commands)

    document = build_next_steps(
        config.project_name,
        config,
        config.known_strategies,
        config.project_slug,
    )
    result.next_steps = document
    written = write_next_steps(project_dir, document, mode)
    if written is not None:
        result.files_created.append(written)

    result.success = True

    if mode is ExecutionMode.DRY_RUN:
        out.print()
        out.print(
            Panel(
                f"[bold green]✅ Project \"{config.project_name}\" ready to generate[/]\n\n"
                f"[dim]{len(plan.actions)} actions planned, nothing written.[/]",
                title="[bold green]Dry Run[/]",
                border_style="green",
            )
        )
    else:
        out.print()
        out.print(
            Panel(
                f"[bold green]✅ Project \"{config.project_name}\" created successfully![/]\n\n"
                f"[dim]Location:[/] {project_dir}\n\n"
                f"[bold]Next steps:[/]\n"
                f"  cd {config.project_name}\n"
                f"  npm run dev\n\n"
                f"[dim]See NEXT_STEPS.md for the full checklist.[/]",
                title="[bold green]Success[/]",
                border_style="green",
            )
        )

    return result
