"""
kickstart.planner - Generation Planning
=======================================

This module expands a ``ProjectConfig`` into an ordered list of
``GenerationAction``s. Planning never touches the filesystem and never runs
commands; it only decides *what* happens and in *which order*.

Phase Order
-----------
Each phase appends actions; a phase contributes nothing when its feature is
off.

    1. Static assets       public/ and views/ trees (always)
    2. Base render         app.js, .env, docs index, architecture doc,
                           env validation helper (always)
    3. HTTP client         axios guide
    4. Database            config/database.js, postgres guide
    5. Sessions            sessions guide; standalone encryption helper only
                           when no authentication strategy is selected
    6. Authentication      per strategy in request order, then the shared
                           user store, routes, login view, header partial,
                           and register view (local only)
    7. Dependencies        sorted, deduplicated package list
    8. Tail                .gitignore, manifest init/patch, dependency
                           installs, git init

The tail comes strictly after every file-content action because the
manifest patch inspects the files left on disk and the initial commit must
see the complete tree.

Determinism
-----------
The plan depends only on the configuration: no timestamps, random values,
or directory listings are consulted. Secrets for ``.env`` are produced at
render time by the executor, not stored in the plan.

Usage Example
-------------
>>> from kickstart.models import ProjectConfig
>>> plan = build_plan(ProjectConfig(project_name="demo"))
>>> plan.dependencies
['dotenv', 'ejs', 'express']
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kickstart.models import ProjectConfig
from kickstart.registry import (
    ARCHITECTURE_DOC,
    AXIOS_DOC,
    POSTGRES_DOC,
    SESSIONS_DOC,
    StrategyKind,
    lookup_strategy,
)


# =============================================================================
# Module-Level Configuration
# =============================================================================

# (source under templates/, destination in the project)
STATIC_ASSETS: tuple[tuple[str, str], ...] = (
    ("static/public", "public"),
    ("static/views", "views"),
)

BASE_DEPENDENCIES = ("express", "dotenv", "ejs")
DATABASE_DEPENDENCIES = ("pg",)
SESSION_DEPENDENCIES = ("express-session", "connect-pg-simple")
HTTP_CLIENT_DEPENDENCIES = ("axios",)
AUTH_DEPENDENCIES = ("passport", "bcrypt")

TOKEN_CLI_PATH = "scripts/auth-cli.js"

# Token-store artifacts rendered for strategies that require them.
TOKEN_STORE_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("bearer/token-store.js.j2", "utils/token-store.js"),
    ("bearer/scopes.js.j2", "utils/scopes.js"),
    ("bearer/routes-api.js.j2", "routes/api.js"),
    ("bearer/auth-cli.js.j2", TOKEN_CLI_PATH),
)

GITIGNORE_CONTENT = ".env\nnode_modules\n.DS_Store\n"

MANIFEST_SCRIPTS = {"dev": "node app.js"}
MANIFEST_DEFAULT_SCRIPTS = {"start": "node app.js"}

# Script entries added to package.json only if the guarding file exists.
CONDITIONAL_SCRIPTS: dict[str, dict[str, str]] = {
    TOKEN_CLI_PATH: {
        "user:create": f"node {TOKEN_CLI_PATH} user:create",
        "token:issue": f"node {TOKEN_CLI_PATH} token:issue",
    },
}


# =============================================================================
# Plan Data Classes
# =============================================================================


class ActionKind(str, Enum):
    """Kinds of work a plan can contain."""

    STATIC_COPY = "static_copy"
    RENDER = "render"
    MAKE_EXECUTABLE = "make_executable"
    WRITE_FILE = "write_file"
    INIT_MANIFEST = "init_manifest"
    PATCH_MANIFEST = "patch_manifest"
    ADD_DEPENDENCY = "add_dependency"
    INIT_VCS = "init_vcs"

    @property
    def writes_content(self) -> bool:
        """Whether the action produces project file content."""
        return self in {
            ActionKind.STATIC_COPY,
            ActionKind.RENDER,
            ActionKind.MAKE_EXECUTABLE,
            ActionKind.WRITE_FILE,
        }


@dataclass(frozen=True)
class GenerationAction:
    """
    One step of a generation plan.

    Attributes
    ----------
    kind : ActionKind
        What the executor should do.

    source : str | None
        Template id or static tree under ``templates/``; for
        ``add_dependency`` the package name.

    destination : str | None
        Output path relative to the project root.

    template_data : Mapping[str, Any]
        Context for rendering, or parameters for manifest/file actions.
    """

    kind: ActionKind
    source: str | None = None
    destination: str | None = None
    template_data: Mapping[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        """One-line human description used in logs."""
        descriptions = {
            ActionKind.STATIC_COPY: f"Copying static {self.source} → {self.destination}",
            ActionKind.RENDER: f"Rendering {self.destination}",
            ActionKind.MAKE_EXECUTABLE: f"Marking {self.destination} executable",
            ActionKind.WRITE_FILE: f"Writing {self.destination}",
            ActionKind.INIT_MANIFEST: "Initializing package.json",
            ActionKind.PATCH_MANIFEST: "Patching package.json",
            ActionKind.ADD_DEPENDENCY: f"Adding dependency {self.source}",
            ActionKind.INIT_VCS: "Initializing git repository",
        }
        return descriptions[self.kind]


@dataclass
class GenerationPlan:
    """
    Ordered actions for one configuration.

    Attributes
    ----------
    config : ProjectConfig
        The configuration the plan was built from.

    actions : list[GenerationAction]
        Totally ordered actions.

    dependencies : list[str]
        Sorted, deduplicated package names.

    warnings : list[str]
        Non-fatal problems found while planning (unknown strategies).
    """

    config: ProjectConfig
    actions: list[GenerationAction] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def rendered_paths(self) -> list[str]:
        """Destinations of all render actions, in plan order."""
        return [
            a.destination
            for a in self.actions
            if a.kind is ActionKind.RENDER and a.destination is not None
        ]

    def actions_of(self, kind: ActionKind) -> list[GenerationAction]:
        return [a for a in self.actions if a.kind is kind]


# =============================================================================
# Phase Builders
# =============================================================================


def _render(source: str, destination: str, config: ProjectConfig, **extra: Any) -> GenerationAction:
    return GenerationAction(
        kind=ActionKind.RENDER,
        source=source,
        destination=destination,
        template_data={"config": config, **extra},
    )


def _plan_static_assets() -> list[GenerationAction]:
    return [
        GenerationAction(kind=ActionKind.STATIC_COPY, source=src, destination=dest)
        for src, dest in STATIC_ASSETS
    ]


def _plan_base(config: ProjectConfig) -> list[GenerationAction]:
    return [
        _render("base/app.js.j2", "app.js", config),
        _render("base/env.j2", ".env", config),
        _render("base/docs-index.md.j2", "docs/index.md", config, docs=config.documentation),
        _render(ARCHITECTURE_DOC.template, ARCHITECTURE_DOC.path, config),
        _render("base/validate-env.js.j2", "utils/validate-env.js", config),
    ]


def _plan_http_client(config: ProjectConfig) -> list[GenerationAction]:
    if not config.include_http_client:
        return []
    return [_render(AXIOS_DOC.template, AXIOS_DOC.path, config)]


def _plan_database(config: ProjectConfig) -> list[GenerationAction]:
    if not config.include_database:
        return []
    return [
        _render("pg/database.js.j2", "config/database.js", config),
        _render(POSTGRES_DOC.template, POSTGRES_DOC.path, config),
    ]


def _plan_sessions(config: ProjectConfig) -> list[GenerationAction]:
    if not config.include_sessions:
        return []
    actions = [_render(SESSIONS_DOC.template, SESSIONS_DOC.path, config)]
    # Strategies bring their own session-integrated credential handling.
    if not config.has_auth:
        actions.append(
            _render("session/encryption-handler.js.j2", "utils/encryption-handler.js", config)
        )
    return actions


def _plan_strategy(config: ProjectConfig, kind: StrategyKind) -> list[GenerationAction]:
    descriptor = kind.descriptor
    actions = [
        _render(
            descriptor.template,
            descriptor.output_path,
            config,
            strategy=kind,
            descriptor=descriptor,
        )
    ]

    if descriptor.requires_token_store:
        actions.extend(
            _render(source, destination, config, strategy=kind)
            for source, destination in TOKEN_STORE_TEMPLATES
        )
        actions.append(
            GenerationAction(kind=ActionKind.MAKE_EXECUTABLE, destination=TOKEN_CLI_PATH)
        )

    actions.extend(
        _render(doc.template, doc.path, config, strategy=kind) for doc in descriptor.docs
    )
    return actions


def _plan_authentication(
    config: ProjectConfig,
    warnings: list[str],
) -> list[GenerationAction]:
    if not config.auth_strategies:
        return []

    actions: list[GenerationAction] = []
    planned: list[StrategyKind] = []

    for identifier in config.auth_strategies:
        kind = lookup_strategy(identifier)
        if kind is None:
            warnings.append(
                f"Unknown authentication strategy '{identifier}' skipped. "
                f"Valid strategies: {', '.join(k.value for k in StrategyKind)}"
            )
            continue
        if kind in planned:
            continue
        planned.append(kind)
        actions.extend(_plan_strategy(config, kind))

    if not planned:
        return actions

    actions.extend(
        [
            _render("auth/users.js.j2", "config/users.js", config),
            _render("auth/routes-auth.js.j2", "routes/auth.js", config),
            _render("auth/login.ejs.j2", "views/login.ejs", config),
            _render("auth/header.ejs.j2", "views/partials/header.ejs", config),
        ]
    )
    if StrategyKind.LOCAL in planned:
        actions.append(_render("auth/register.ejs.j2", "views/register.ejs", config))
    return actions


# =============================================================================
# Dependencies
# =============================================================================


def assemble_dependencies(config: ProjectConfig) -> list[str]:
    """
    Build the package list for a configuration.

    Starts from ``express``, ``dotenv`` and ``ejs`` and adds packages for
    each enabled feature and each known strategy. The result is
    deduplicated and sorted so manifests diff cleanly.

    Examples
    --------
    >>> from kickstart.models import ProjectConfig
    >>> assemble_dependencies(ProjectConfig(project_name="x", include_http_client=True))
    ['axios', 'dotenv', 'ejs', 'express']
    """
    deps: set[str] = set(BASE_DEPENDENCIES)
    if config.include_database:
        deps.update(DATABASE_DEPENDENCIES)
    if config.include_sessions:
        deps.update(SESSION_DEPENDENCIES)
    if config.include_http_client:
        deps.update(HTTP_CLIENT_DEPENDENCIES)
    if config.has_auth:
        deps.update(AUTH_DEPENDENCIES)
        for kind in config.known_strategies:
            deps.update(kind.descriptor.dependencies)
    return sorted(deps)


def _plan_tail(config: ProjectConfig, dependencies: list[str]) -> list[GenerationAction]:
    actions = [
        GenerationAction(
            kind=ActionKind.WRITE_FILE,
            destination=".gitignore",
            template_data={"content": GITIGNORE_CONTENT},
        ),
        GenerationAction(kind=ActionKind.INIT_MANIFEST, destination="package.json"),
        GenerationAction(
            kind=ActionKind.PATCH_MANIFEST,
            destination="package.json",
            template_data={
                "name": config.project_slug,
                "type": "module",
                "scripts": dict(MANIFEST_SCRIPTS),
                "default_scripts": dict(MANIFEST_DEFAULT_SCRIPTS),
                "conditional_scripts": {
                    path: dict(scripts) for path, scripts in CONDITIONAL_SCRIPTS.items()
                },
            },
        ),
    ]
    actions.extend(
        GenerationAction(kind=ActionKind.ADD_DEPENDENCY, source=name, destination="package.json")
        for name in dependencies
    )
    if config.init_git:
        actions.append(
            GenerationAction(
                kind=ActionKind.INIT_VCS,
                template_data={"message": "Initial commit"},
            )
        )
    return actions


# =============================================================================
# Main Planning Function
# =============================================================================


def build_plan(config: ProjectConfig) -> GenerationPlan:
    """
    Expand a configuration into an ordered generation plan.

    Parameters
    ----------
    config : ProjectConfig
        A normalized configuration.

    Returns
    -------
    GenerationPlan
        Actions, dependency list, and planning warnings.

    Notes
    -----
    An unknown strategy identifier adds a warning and contributes no
    actions; the remaining strategies and the base project are planned
    normally. Shared authentication artifacts are planned once, after the
    per-strategy actions, and only if at least one strategy was known.
    """
    plan = GenerationPlan(config=config)

    plan.actions.extend(_plan_static_assets())
    plan.actions.extend(_plan_base(config))
    plan.actions.extend(_plan_http_client(config))
    plan.actions.extend(_plan_database(config))
    plan.actions.extend(_plan_sessions(config))
    plan.actions.extend(_plan_authentication(config, plan.warnings))

    plan.dependencies = assemble_dependencies(config)
    plan.actions.extend(_plan_tail(config, plan.dependencies))

    return plan
