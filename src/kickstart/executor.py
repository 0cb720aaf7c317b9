"""
kickstart.executor - Plan Execution
===================================

This module performs the actions of a ``GenerationPlan``: copying static
trees, rendering Jinja2 templates, patching ``package.json``, and invoking
the package manager and git.

Execution Mode
--------------
The caller passes an explicit ``ExecutionMode``:

- ``LIVE`` performs every action.
- ``DRY_RUN`` performs nothing, never runs a command, and logs each action
  with a ``[skipped]`` marker. The plan itself is identical in both modes.

Failure Semantics
-----------------
Actions run one at a time in plan order. The first failure stops the run:

- Template/write failures raise ``RenderError`` naming source and destination.
- Command failures raise ``CollaboratorError``.

Files already written stay on disk; there is no rollback.

``check_sources`` verifies that every template and static tree the plan
refers to exists. Call it before execution so a broken installation fails
before anything is written.

Template System
---------------
Templates live under ``kickstart/templates/``:

    templates/
    ├── render/   - Jinja2 templates (``*.j2``), addressed by action.source
    └── static/   - trees copied verbatim (public/, views/)

Each template receives the action's ``template_data`` (always including
``config``) plus ``kickstart_version``. The ``generate_secret()`` global
produces fresh random secrets at render time.
"""

from __future__ import annotations

import json
import os
import secrets
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError
from rich.console import Console

from kickstart import __version__
from kickstart.errors import CollaboratorError, MissingTemplateError, RenderError
from kickstart.planner import ActionKind, GenerationAction, GenerationPlan


# =============================================================================
# Module-Level Configuration
# =============================================================================

# Console for rich output
console = Console()

TEMPLATE_ROOT = Path(__file__).parent / "templates"

# Identity used for the initial commit when git has no user configured.
GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "kickstart",
    "GIT_AUTHOR_EMAIL": "kickstart@example.com",
    "GIT_COMMITTER_NAME": "kickstart",
    "GIT_COMMITTER_EMAIL": "kickstart@example.com",
}


class ExecutionMode(str, Enum):
    """Whether the executor mutates anything."""

    LIVE = "live"
    DRY_RUN = "dry_run"

    @classmethod
    def from_flag(cls, dry_run: bool) -> ExecutionMode:
        return cls.DRY_RUN if dry_run else cls.LIVE


# =============================================================================
# External Collaborators
# =============================================================================


class CommandRunner(Protocol):
    """Runs an external command in a directory, raising on failure."""

    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> None: ...


class SubprocessRunner:
    """
    ``CommandRunner`` backed by ``subprocess.run``.

    Output is captured so it can be attached to ``CollaboratorError``.
    """

    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> None:
        try:
            subprocess.run(
                list(args),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
                env={**os.environ, **env} if env else None,
            )
        except subprocess.CalledProcessError as e:
            raise CollaboratorError(args, e.returncode, e.stderr or "") from e
        except FileNotFoundError as e:
            raise CollaboratorError(args) from e


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class ExecutionReport:
    """
    What the executor did.

    Attributes
    ----------
    mode : ExecutionMode
        The mode the plan ran in.

    files_written : list[Path]
        Files created or overwritten (static copies expanded per file).

    commands : list[list[str]]
        External commands that were run.

    skipped : list[GenerationAction]
        Actions not performed (every action in dry run).
    """

    mode: ExecutionMode
    files_written: list[Path] = field(default_factory=list)
    commands: list[list[str]] = field(default_factory=list)
    skipped: list[GenerationAction] = field(default_factory=list)


# =============================================================================
# Template Engine Setup
# =============================================================================

# Quote characters dotenv accepts, in order of preference. Single quotes keep
# the value literal; double quotes expand \n.
DOTENV_QUOTES = ("'", "\"", "`")


def dotenv_quote(value: object) -> str:
    """
    Quote a value for a ``.env`` file.

    Unquoted values lose everything after a ``#``, so every value is wrapped
    in the first quote character it does not itself contain.

    Examples
    --------
    >>> print(dotenv_quote("ab#cd"))
    'ab#cd'
    >>> print(dotenv_quote("it's"))
    "it's"
    """
    text = str(value)
    quote = next((q for q in DOTENV_QUOTES if q not in text), "\"")
    return f"{quote}{text}{quote}"


def create_jinja_env(template_root: Path = TEMPLATE_ROOT) -> Environment:
    """
    Create the Jinja2 environment for rendering project files.

    Autoescaping is disabled because the output is JavaScript, EJS, and
    markdown rather than HTML produced by Jinja itself. Undefined variables
    are errors so a broken template fails loudly instead of writing blanks.
    """
    env = Environment(
        loader=FileSystemLoader(template_root / "render"),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.globals["generate_secret"] = lambda nbytes=32: secrets.token_hex(nbytes)
    env.filters["dotenv"] = dotenv_quote
    return env


# =============================================================================
# Source Verification
# =============================================================================


def check_sources(plan: GenerationPlan, template_root: Path = TEMPLATE_ROOT) -> None:
    """
    Ensure every template and static tree referenced by the plan exists.

    Raises
    ------
    MissingTemplateError
        Naming the first missing path.
    """
    for action in plan.actions:
        if action.kind is ActionKind.STATIC_COPY and action.source:
            path = template_root / action.source
            if not path.is_dir():
                raise MissingTemplateError(path)
        elif action.kind is ActionKind.RENDER and action.source:
            path = template_root / "render" / action.source
            if not path.is_file():
                raise MissingTemplateError(path)


# =============================================================================
# Action Handlers
# =============================================================================


def copy_static_tree(source: Path, destination: Path) -> list[Path]:
    """Copy a static tree, merging into any existing directory."""
    shutil.copytree(source, destination, dirs_exist_ok=True)
    return sorted(p for p in destination.rglob("*") if p.is_file())


def render_action(
    env: Environment,
    action: GenerationAction,
    project_dir: Path,
) -> Path:
    """
    Render one template action and write the result.

    Raises
    ------
    RenderError
        If the template fails to load or render, or the file cannot be
        written.
    """
    source = action.source or ""
    destination = action.destination or ""
    output = project_dir / destination
    try:
        template = env.get_template(source)
        content = template.render(**action.template_data, kickstart_version=__version__)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
    except (TemplateError, OSError) as e:
        raise RenderError(source, destination, e) from e
    return output


def make_executable(path: Path) -> None:
    """Add execute permission for everyone who can read the file."""
    mode = path.stat().st_mode
    path.chmod(mode | ((mode & 0o444) >> 2))


def patch_manifest(project_dir: Path, data: Mapping[str, Any]) -> Path:
    """
    Apply kickstart's settings to ``package.json``.

    Sets ``name`` (npm init copies the raw directory name, which may not
    be a valid package name), ``type`` and the required scripts. Default
    scripts are added only where missing, and each group of conditional
    scripts only when its guarding file exists in the project.
    """
    manifest_path = project_dir / "package.json"
    if manifest_path.exists():
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    else:
        manifest = {"name": project_dir.name, "version": "1.0.0"}

    manifest["name"] = data.get("name", manifest.get("name", project_dir.name))
    manifest["type"] = data.get("type", "module")
    scripts = manifest.setdefault("scripts", {})
    scripts.update(data.get("scripts", {}))
    for name, command in data.get("default_scripts", {}).items():
        scripts.setdefault(name, command)
    for required, extra in data.get("conditional_scripts", {}).items():
        if (project_dir / required).exists():
            scripts.update(extra)

    manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return manifest_path


# =============================================================================
# Main Execution Function
# =============================================================================


def execute_plan(
    plan: GenerationPlan,
    project_dir: Path,
    *,
    mode: ExecutionMode,
    template_root: Path = TEMPLATE_ROOT,
    runner: CommandRunner | None = None,
    output: Console | None = None,
    verbose: bool = False,
) -> ExecutionReport:
    """
    Run every action of a plan in order.

    Parameters
    ----------
    plan : GenerationPlan
        The plan to execute.

    project_dir : Path
        Root of the project being generated.

    mode : ExecutionMode
        ``LIVE`` or ``DRY_RUN``.

    template_root : Path
        Directory holding ``render/`` and ``static/``.

    runner : CommandRunner | None
        External command runner; defaults to ``SubprocessRunner``.

    output : Console | None
        Console for progress lines.

    verbose : bool, default=False
        Log every action (dry run always logs).

    Returns
    -------
    ExecutionReport
        Files written, commands run, and skipped actions.
    """
    out = output or console
    report = ExecutionReport(mode=mode)
    dry = mode is ExecutionMode.DRY_RUN

    if dry:
        for action in plan.actions:
            out.print(f"[dim]⏳ {action.describe()} \\[skipped][/]")
            report.skipped.append(action)
        return report

    runner = runner or SubprocessRunner()
    env = create_jinja_env(template_root)
    pending: list[str] = []

    def run(args: list[str], extra_env: Mapping[str, str] | None = None) -> None:
        runner.run(args, project_dir, extra_env)
        report.commands.append(args)

    def flush_dependencies() -> None:
        if pending:
            if verbose:
                out.print(f"[dim]⏳ Installing {len(pending)} dependencies[/]")
            run(["npm", "install", *pending])
            pending.clear()

    project_dir.mkdir(parents=True, exist_ok=True)

    for action in plan.actions:
        if action.kind is not ActionKind.ADD_DEPENDENCY:
            flush_dependencies()

        if verbose:
            out.print(f"[dim]⏳ {action.describe()}[/]")

        destination = project_dir / (action.destination or "")

        if action.kind is ActionKind.STATIC_COPY:
            report.files_written.extend(
                copy_static_tree(template_root / (action.source or ""), destination)
            )
        elif action.kind is ActionKind.RENDER:
            report.files_written.append(render_action(env, action, project_dir))
        elif action.kind is ActionKind.MAKE_EXECUTABLE:
            make_executable(destination)
        elif action.kind is ActionKind.WRITE_FILE:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(action.template_data.get("content", ""), encoding="utf-8")
            report.files_written.append(destination)
        elif action.kind is ActionKind.INIT_MANIFEST:
            run(["npm", "init", "-y"])
        elif action.kind is ActionKind.PATCH_MANIFEST:
            report.files_written.append(patch_manifest(project_dir, action.template_data))
        elif action.kind is ActionKind.ADD_DEPENDENCY:
            pending.append(action.source or "")
        elif action.kind is ActionKind.INIT_VCS:
            run(["git", "init"])
            run(["git", "add", "."])
            identity = {k: v for k, v in GIT_IDENTITY.items() if k not in os.environ}
            run(
                ["git", "commit", "-m", action.template_data.get("message", "Initial commit")],
                identity or None,
            )

    flush_dependencies()
    return report
