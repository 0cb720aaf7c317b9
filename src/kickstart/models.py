"""
kickstart.models - Pydantic Models for Project Configuration
============================================================

This module defines the configuration objects that flow through kickstart:

    ConfigLayer (partial, every field optional)
        │   one per input source: preset file, prompt answers, CLI flags
        ▼
    fold_layers() in normalizer.py
        ▼
    ProjectConfig (complete, frozen)
    ├── project_name / project_slug
    ├── include_database + DatabaseCredentials
    ├── include_sessions
    ├── include_http_client
    ├── auth_strategies (ordered, deduplicated identifiers)
    └── port, dry_run, verbose, non_interactive, output_dir, init_git

``ProjectConfig`` is the single source of truth for every feature decision.
The planner and the reporter both read the derived views defined here
(``known_strategies``, ``uses_token_store``, ``documentation``) instead of
re-deciding anything from raw input.

Field names are snake_case in Python. Each field also accepts its camelCase
alias (``includeDatabase``, ``authStrategies``, ...) so preset files can use
the same names as the generated project's documentation.

Usage Example
-------------
>>> config = ProjectConfig(project_name="My Cool App!!")
>>> config.project_slug
'my-cool-app'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from kickstart.registry import (
    ARCHITECTURE_DOC,
    AXIOS_DOC,
    POSTGRES_DOC,
    SESSIONS_DOC,
    DocumentationLink,
    StrategyKind,
    parse_strategy_names,
    resolve_strategies,
)


DEFAULT_PORT = "3000"

# Defaults applied to missing credentials in non-interactive mode.
# The database name defaults to the project slug and is filled in separately.
DEFAULT_CREDENTIALS: dict[str, str] = {
    "user": "postgres",
    "password": "",
    "host": "localhost",
    "port": "5432",
}

CREDENTIAL_FIELDS = ("user", "password", "database", "host", "port")

# Option names used by earlier kickstart presets, mapped onto current fields.
_LEGACY_FLAGS = {
    "pg": "include_database",
    "session": "include_sessions",
    "axios": "include_http_client",
}
_LEGACY_CREDENTIALS = {
    "pgUser": "user",
    "pgPassword": "password",
    "pgDatabase": "database",
    "pgHost": "host",
    "pgPort": "port",
}


# =============================================================================
# Helpers
# =============================================================================


def slugify(name: str) -> str:
    """
    Derive a filesystem- and database-friendly slug from a project name.

    The name is lower-cased, every run of non-alphanumeric characters
    becomes a single hyphen, and leading/trailing hyphens are stripped.
    An empty result falls back to ``app``.

    Examples
    --------
    >>> slugify("My Cool App!!")
    'my-cool-app'
    >>> slugify("***")
    'app'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "app"


def validate_port(value: str) -> str:
    """Accept a port given as digits in the range 1..65535."""
    value = str(value).strip()
    if not value.isdigit() or not 0 < int(value) < 65536:
        msg = f"Invalid port '{value}'. Expected a number between 1 and 65535."
        raise ValueError(msg)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


# =============================================================================
# Database Credentials
# =============================================================================


class DatabaseCredentials(_CamelModel):
    """
    Complete PostgreSQL connection settings written to ``.env``.

    All values are strings because they end up as environment variables.
    """

    user: str = Field(description="Database user")
    password: str = Field(default="", description="Database password (may be empty)")
    database: str = Field(description="Database name")
    host: str = Field(description="Database host")
    port: str = Field(description="Database port")

    @field_validator("port")
    @classmethod
    def check_port(cls, v: str) -> str:
        return validate_port(v)


class PartialCredentials(_CamelModel):
    """Credential fields as supplied by one input source; any may be absent."""

    user: str | None = None
    password: str | None = None
    database: str | None = None
    host: str | None = None
    port: str | None = None

    def missing_fields(self) -> list[str]:
        """Credential fields that are still absent, in prompt order."""
        return [name for name in CREDENTIAL_FIELDS if getattr(self, name) is None]

    def merged_with(self, other: PartialCredentials) -> PartialCredentials:
        """Overlay ``other`` on top of this record, field by field."""
        updates = {
            name: getattr(other, name)
            for name in CREDENTIAL_FIELDS
            if getattr(other, name) is not None
        }
        return self.model_copy(update=updates)


# =============================================================================
# Configuration Layer (partial)
# =============================================================================


class ConfigLayer(_CamelModel):
    """
    One input source's view of the configuration.

    Every field is optional and ``None`` means "this source did not say".
    Layers are combined by ``kickstart.normalizer.fold_layers``.

    Presets written for earlier releases may use the original option names
    (``pg``, ``session``, ``axios``, ``passport``, ``pgUser`` ...); they are
    translated to the current fields before validation.
    """

    project_name: str | None = None
    include_database: bool | None = None
    database_credentials: PartialCredentials | None = None
    include_sessions: bool | None = None
    include_http_client: bool | None = None
    auth_strategies: tuple[str, ...] | None = None
    port: str | None = None
    dry_run: bool | None = None
    verbose: bool | None = None
    non_interactive: bool | None = None
    output_dir: Path | None = None
    init_git: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def translate_legacy_keys(cls, data: Any) -> Any:
        """Map original option names onto current fields."""
        if not isinstance(data, dict):
            return data

        data = dict(data)

        for old, new in _LEGACY_FLAGS.items():
            if old in data:
                value = data.pop(old)
                data.setdefault(new, value)

        flat = {
            field: data.pop(key)
            for key, field in _LEGACY_CREDENTIALS.items()
            if key in data
        }
        if flat:
            nested_key = next(
                (k for k in ("database_credentials", "databaseCredentials") if k in data),
                "database_credentials",
            )
            nested = dict(data.get(nested_key) or {})
            for name, value in flat.items():
                nested.setdefault(name, value)
            data[nested_key] = nested

        # Strategy selection may arrive as a name string and/or a list.
        # A name string that is non-empty after trimming wins over a list.
        names: str | None = None
        selection: list[str] | None = None
        present = False
        for key in ("auth_strategies", "authStrategies", "passport"):
            if key not in data:
                continue
            value = data.pop(key)
            if value is None or isinstance(value, bool):
                continue
            present = True
            if isinstance(value, str):
                if names is None or not names.strip():
                    names = value
            elif selection is None:
                selection = list(value)
        if present:
            data["auth_strategies"] = select_strategies(names, selection)

        return data

    @field_validator("auth_strategies", mode="before")
    @classmethod
    def normalize_strategies(cls, v: Any) -> Any:
        if v is None:
            return None
        return parse_strategy_names(v)

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, v: Any) -> Any:
        if v is None:
            return None
        return validate_port(str(v))

    @field_validator("database_credentials", mode="before")
    @classmethod
    def stringify_credentials(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {k: (None if val is None else str(val)) for k, val in v.items()}
        return v

    @property
    def any_feature_set(self) -> bool:
        """Whether this layer says anything about the feature toggles."""
        return any(
            value is not None
            for value in (
                self.include_database,
                self.include_sessions,
                self.include_http_client,
                self.auth_strategies,
            )
        )


def select_strategies(
    names: str | None,
    selection: Iterable[str] | None,
) -> tuple[str, ...] | None:
    """
    Choose between a strategy-name string and a list selection.

    The rule: a name string that is non-empty after trimming wins; otherwise
    the list selection is used. A blank string with no list, or no input at
    all, is ``None`` (absent), which lets lower-precedence layers decide.

    Examples
    --------
    >>> select_strategies("google", ["local"])
    ('google',)
    >>> select_strategies("  ", ["local"])
    ('local',)
    >>> select_strategies("  ", None) is None
    True
    >>> select_strategies(None, None) is None
    True
    """
    if names is not None and names.strip():
        return parse_strategy_names(names)
    if selection is not None:
        return parse_strategy_names(selection)
    return None


# =============================================================================
# Main Configuration Model
# =============================================================================


class ProjectConfig(_CamelModel):
    """
    Fully-resolved description of the project to generate.

    Instances are produced by ``kickstart.normalizer.normalize_options`` and
    are immutable. Construct one directly in tests or library code; call
    ``apply_invariants`` afterwards if the flags might contradict each other.

    Attributes
    ----------
    project_name : str
        Name given on the command line; also the target directory name.

    include_database : bool
        Generate PostgreSQL support.

    database_credentials : DatabaseCredentials | None
        Connection settings; populated only when ``include_database``.

    include_sessions : bool
        Generate express-session support. Requires the database.

    include_http_client : bool
        Add axios and its documentation.

    auth_strategies : tuple[str, ...]
        Requested strategy identifiers, insertion-ordered and deduplicated.
        Unknown identifiers are retained; see ``unknown_strategies``.

    port : str
        Dev server port.

    dry_run, verbose, non_interactive : bool
        Execution switches.

    output_dir : Path
        Parent directory of the generated project.

    init_git : bool
        Whether to initialize a git repository after generation.

    Examples
    --------
    >>> config = ProjectConfig(
    ...     project_name="shop",
    ...     include_database=True,
    ...     include_sessions=True,
    ...     auth_strategies="google,local,google",
    ... )
    >>> config.auth_strategies
    ('google', 'local')
    >>> [s.value for s in config.known_strategies]
    ['google', 'local']
    """

    project_name: str = Field(
        description="Project name (used for the project directory)",
        min_length=1,
        max_length=214,
    )
    include_database: bool = Field(default=False, description="Include PostgreSQL")
    database_credentials: DatabaseCredentials | None = Field(
        default=None,
        description="PostgreSQL connection settings",
    )
    include_sessions: bool = Field(default=False, description="Include sessions")
    include_http_client: bool = Field(default=False, description="Include axios")
    auth_strategies: tuple[str, ...] = Field(
        default=(),
        description="Authentication strategy identifiers",
    )
    port: str = Field(default=DEFAULT_PORT, description="Dev server port")
    dry_run: bool = Field(default=False, description="Plan without writing")
    verbose: bool = Field(default=False, description="Log every action")
    non_interactive: bool = Field(default=False, description="Never prompt")
    output_dir: Path = Field(
        default_factory=Path.cwd,
        description="Directory the project is created in",
    )
    init_git: bool = Field(default=True, description="Initialize a git repository")

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("project_name")
    @classmethod
    def validate_project_name(cls, v: str) -> str:
        """
        Reject names that cannot be used as a directory name.

        The name itself is kept as typed (only surrounding whitespace is
        removed); ``project_slug`` holds the normalized form.
        """
        v = v.strip()
        if not v:
            msg = "Project name must not be empty."
            raise ValueError(msg)
        if v in {".", ".."} or "/" in v or "\\" in v:
            msg = f"Invalid project name '{v}'. Path separators are not allowed."
            raise ValueError(msg)
        if not v.isprintable():
            msg = "Invalid project name. Control characters are not allowed."
            raise ValueError(msg)
        return v

    @field_validator("auth_strategies", mode="before")
    @classmethod
    def normalize_strategies(cls, v: Any) -> tuple[str, ...]:
        return parse_strategy_names(v)

    @field_validator("port", mode="before")
    @classmethod
    def check_port(cls, v: Any) -> str:
        return validate_port(str(v))

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def project_slug(self) -> str:
        """Lower-case, hyphenated form of the project name."""
        return slugify(self.project_name)

    @property
    def project_dir(self) -> Path:
        """Full path to the generated project: output_dir / project_name."""
        return self.output_dir / self.project_name

    @property
    def known_strategies(self) -> tuple[StrategyKind, ...]:
        """Requested strategies the registry knows, in request order."""
        return resolve_strategies(self.auth_strategies)[0]

    @property
    def unknown_strategies(self) -> tuple[str, ...]:
        """Requested identifiers the registry does not know."""
        return resolve_strategies(self.auth_strategies)[1]

    @property
    def has_auth(self) -> bool:
        """Whether at least one known strategy will be generated."""
        return bool(self.known_strategies)

    @property
    def uses_token_store(self) -> bool:
        """Whether any selected strategy needs the bearer token store."""
        return any(s.descriptor.requires_token_store for s in self.known_strategies)

    def has_strategy(self, kind: StrategyKind) -> bool:
        return kind in self.known_strategies

    @property
    def documentation(self) -> list[DocumentationLink]:
        """
        Documentation pages generated for this configuration, in index order.

        Architecture is always generated; feature guides follow the enabled
        flags; strategy guides come from the registry in declaration order.
        """
        docs = [ARCHITECTURE_DOC]
        if self.include_database:
            docs.append(POSTGRES_DOC)
        if self.include_sessions:
            docs.append(SESSIONS_DOC)
        if self.include_http_client:
            docs.append(AXIOS_DOC)
        for kind in StrategyKind:
            if kind in self.known_strategies:
                docs.extend(kind.descriptor.docs)
        return docs
