"""
kickstart.normalizer - Option Resolution
========================================

This module turns raw, possibly contradictory input into one consistent
``ProjectConfig``. Three sources feed it, in ascending precedence:

    1. preset-answers file  (``load_preset``)
    2. interactive answers  (``prompt_features`` / credential prompts)
    3. explicit CLI flags

Each source is a ``ConfigLayer``. ``fold_layers`` combines them: a later
layer replaces an earlier value only where the later layer actually has one.
The fold is pure, so precedence can be tested without any I/O.

After folding, two prerequisite rules are enforced:

- **Auto-enable**: any requested authentication strategy turns on both the
  database and sessions.
- **Downgrade**: sessions without a database turn on the database.

Neither rule is an error. Each correction produces a notice that the CLI
prints. Applying the rules to an already-normalized configuration changes
nothing and produces no notices.

Prompting goes through the ``Prompter`` protocol so the normalizer never
talks to a terminal directly; ``kickstart.prompts`` supplies the questionary
implementation and tests supply scripted fakes.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import tomli
from pydantic import ValidationError

from kickstart.errors import PresetError
from kickstart.models import (
    CREDENTIAL_FIELDS,
    DEFAULT_CREDENTIALS,
    DEFAULT_PORT,
    ConfigLayer,
    DatabaseCredentials,
    PartialCredentials,
    ProjectConfig,
    slugify,
)
from kickstart.registry import StrategyKind


# =============================================================================
# Prompting Protocol
# =============================================================================


class Prompter(Protocol):
    """
    Interactive question source.

    Implementations raise ``kickstart.errors.PromptAborted`` when the user
    cancels a question.
    """

    def confirm(self, message: str, *, default: bool = False) -> bool: ...

    def checkbox(self, message: str, choices: Sequence[tuple[str, str]]) -> list[str]: ...

    def text(self, message: str, *, default: str = "", secret: bool = False) -> str: ...


# Credential prompts in the order they are asked.
CREDENTIAL_PROMPTS: dict[str, str] = {
    "user": "Postgres username:",
    "password": "Postgres password:",
    "database": "Postgres database name:",
    "host": "Postgres host:",
    "port": "Postgres port:",
}


# =============================================================================
# Result
# =============================================================================


@dataclass
class NormalizationResult:
    """
    Outcome of option resolution.

    Attributes
    ----------
    config : ProjectConfig
        The consistent configuration.

    notices : list[str]
        Informational messages about automatic corrections.
    """

    config: ProjectConfig
    notices: list[str] = field(default_factory=list)


# =============================================================================
# Preset Loading
# =============================================================================


def load_preset(path: Path) -> ConfigLayer:
    """
    Read a preset-answers file into a configuration layer.

    JSON is the primary format. Files ending in ``.toml`` are read with
    tomli. Keys mirror ``ProjectConfig`` fields (snake_case or camelCase).

    Parameters
    ----------
    path : Path
        Location of the preset file.

    Returns
    -------
    ConfigLayer
        The preset as a partial configuration.

    Raises
    ------
    PresetError
        If the file is missing, unparsable, not a mapping, or contains
        invalid values.
    """
    try:
        if path.suffix.lower() == ".toml":
            with path.open("rb") as f:
                data: Any = tomli.load(f)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise PresetError(path, "file not found") from e
    except (OSError, ValueError) as e:
        # json.JSONDecodeError and tomli.TOMLDecodeError are ValueErrors
        raise PresetError(path, str(e)) from e

    if not isinstance(data, dict):
        raise PresetError(path, "expected a JSON object at the top level")

    try:
        return ConfigLayer.model_validate(data)
    except ValidationError as e:
        raise PresetError(path, _format_validation_error(e)) from e


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


# =============================================================================
# Layer Folding
# =============================================================================


def fold_layers(*layers: ConfigLayer | None) -> ConfigLayer:
    """
    Combine layers given in ascending precedence.

    A value from a later layer replaces an earlier one only when the later
    value is present (not ``None``). Database credentials are merged field
    by field, so a preset can supply the host while prompts supply the
    password.

    Examples
    --------
    >>> preset = ConfigLayer(include_database=True, port="8080")
    >>> cli = ConfigLayer(port="4000")
    >>> merged = fold_layers(preset, cli)
    >>> merged.include_database, merged.port
    (True, '4000')
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        if layer is None:
            continue
        for name in ConfigLayer.model_fields:
            value = getattr(layer, name)
            if value is None:
                continue
            if name == "database_credentials" and merged.get(name) is not None:
                value = merged[name].merged_with(value)
            merged[name] = value
    return ConfigLayer(**merged)


# =============================================================================
# Interactive Prompts
# =============================================================================


def prompt_features(prompter: Prompter) -> ConfigLayer:
    """
    Ask for each feature in a fixed order.

    database → sessions (only if database) → HTTP client →
    authentication on/off → strategy multi-select (only if authentication).
    Later questions depend on earlier answers, so the order is fixed.
    """
    include_database = prompter.confirm("Include PostgreSQL?", default=False)

    include_sessions = False
    if include_database:
        include_sessions = prompter.confirm("Enable session management?", default=False)

    include_http_client = prompter.confirm("Include Axios?", default=False)

    strategies: list[str] = []
    if prompter.confirm("Use Passport.js authentication?", default=False):
        strategies = prompter.checkbox(
            "Select authentication strategies:",
            [(kind.title, kind.value) for kind in StrategyKind],
        )

    return ConfigLayer(
        include_database=include_database,
        include_sessions=include_sessions,
        include_http_client=include_http_client,
        auth_strategies=tuple(strategies),
    )


def complete_credentials(
    supplied: PartialCredentials | None,
    slug: str,
    prompter: Prompter | None = None,
) -> DatabaseCredentials:
    """
    Fill in whichever credential fields are missing.

    With a prompter, exactly the missing fields are asked for. Without one,
    fixed defaults are used: user ``postgres``, host ``localhost``, port
    ``5432``, database named after the project slug, empty password.
    """
    supplied = supplied or PartialCredentials()
    defaults = {**DEFAULT_CREDENTIALS, "database": slug}

    values = {name: getattr(supplied, name) for name in CREDENTIAL_FIELDS}
    for name in supplied.missing_fields():
        if prompter is None:
            values[name] = defaults[name]
        else:
            values[name] = prompter.text(
                CREDENTIAL_PROMPTS[name],
                default=defaults[name],
                secret=name == "password",
            )
    return DatabaseCredentials(**values)


# =============================================================================
# Invariants
# =============================================================================


def enforce_prerequisites(
    *,
    include_database: bool,
    include_sessions: bool,
    auth_strategies: Sequence[str],
) -> tuple[bool, bool, list[str]]:
    """
    Apply the feature prerequisite rules.

    Returns
    -------
    tuple[bool, bool, list[str]]
        ``(include_database, include_sessions, notices)``.
    """
    notices: list[str] = []

    if auth_strategies and not (include_database and include_sessions):
        missing = [
            label
            for label, enabled in (("PostgreSQL", include_database), ("sessions", include_sessions))
            if not enabled
        ]
        notices.append(
            "Authentication requires PostgreSQL and sessions. "
            f"Enabling {' and '.join(missing)}."
        )
        include_database = True
        include_sessions = True

    if include_sessions and not include_database:
        notices.append("Sessions require PostgreSQL as a backing store. Enabling PostgreSQL.")
        include_database = True

    return include_database, include_sessions, notices


def apply_invariants(config: ProjectConfig) -> tuple[ProjectConfig, list[str]]:
    """
    Bring a complete configuration into a consistent state.

    Enforces the prerequisite rules, fills missing database credentials with
    the non-interactive defaults, and drops credentials when the database is
    disabled. Running it on its own output is a no-op.

    Returns
    -------
    tuple[ProjectConfig, list[str]]
        The consistent configuration and any notices.
    """
    include_database, include_sessions, notices = enforce_prerequisites(
        include_database=config.include_database,
        include_sessions=config.include_sessions,
        auth_strategies=config.auth_strategies,
    )

    credentials = config.database_credentials
    if include_database and credentials is None:
        credentials = complete_credentials(None, config.project_slug)
    elif not include_database:
        credentials = None

    updates: dict[str, Any] = {
        "include_database": include_database,
        "include_sessions": include_sessions,
        "database_credentials": credentials,
    }
    if all(getattr(config, k) == v for k, v in updates.items()):
        return config, notices
    return config.model_copy(update=updates), notices


# =============================================================================
# Main Entry Point
# =============================================================================


def resolve_non_interactive(cli: ConfigLayer, preset: ConfigLayer | None) -> bool:
    """
    Decide whether prompting is allowed.

    An explicit flag wins; otherwise a preset's own ``nonInteractive`` key;
    otherwise supplying a preset at all implies non-interactive mode.
    """
    if cli.non_interactive is not None:
        return cli.non_interactive
    if preset is not None:
        return True if preset.non_interactive is None else preset.non_interactive
    return False


def normalize_options(
    project_name: str,
    cli: ConfigLayer | None = None,
    *,
    preset: ConfigLayer | None = None,
    prompter: Prompter | None = None,
) -> NormalizationResult:
    """
    Resolve all input sources into one consistent configuration.

    Parameters
    ----------
    project_name : str
        Positional project name from the command line.

    cli : ConfigLayer | None
        Explicit command-line flags (highest precedence).

    preset : ConfigLayer | None
        Preset-answers file contents (lowest precedence).

    prompter : Prompter | None
        Source of interactive answers. Ignored in non-interactive mode.

    Returns
    -------
    NormalizationResult
        The configuration plus notices about automatic corrections.

    Raises
    ------
    PromptAborted
        If the user cancels a prompt.
    pydantic.ValidationError
        If the merged values are invalid (e.g. a malformed port).
    """
    cli = cli or ConfigLayer()
    non_interactive = resolve_non_interactive(cli, preset)
    active_prompter = None if non_interactive else prompter

    explicit = fold_layers(preset, cli)

    answers: ConfigLayer | None = None
    if active_prompter is not None and not explicit.any_feature_set:
        answers = prompt_features(active_prompter)

    merged = fold_layers(preset, answers, cli)

    include_database, include_sessions, notices = enforce_prerequisites(
        include_database=bool(merged.include_database),
        include_sessions=bool(merged.include_sessions),
        auth_strategies=merged.auth_strategies or (),
    )

    credentials: DatabaseCredentials | None = None
    if include_database:
        credentials = complete_credentials(
            merged.database_credentials,
            slugify(project_name),
            active_prompter,
        )

    config = ProjectConfig(
        project_name=project_name,
        include_database=include_database,
        database_credentials=credentials,
        include_sessions=include_sessions,
        include_http_client=bool(merged.include_http_client),
        auth_strategies=merged.auth_strategies or (),
        port=merged.port or DEFAULT_PORT,
        dry_run=bool(merged.dry_run),
        verbose=bool(merged.verbose),
        non_interactive=non_interactive,
        output_dir=merged.output_dir or Path.cwd(),
        init_git=True if merged.init_git is None else merged.init_git,
    )

    config, extra_notices = apply_invariants(config)
    notices.extend(extra_notices)

    return NormalizationResult(config=config, notices=notices)
