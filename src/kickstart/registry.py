"""
kickstart.registry - Authentication Strategy Registry
=====================================================

This module is the static table of authentication strategies kickstart knows
how to generate. Each strategy is a member of the closed ``StrategyKind``
enumeration and carries an immutable ``StrategyDescriptor`` describing the
artifacts it needs:

    StrategyKind
    ├── template / output_path   - the strategy's passport configuration module
    ├── dependencies             - npm packages the strategy pulls in
    ├── docs                     - bespoke documentation (not every strategy has one)
    ├── requires_token_store     - True only for ``bearer``
    ├── env_keys                 - .env keys the strategy reads
    └── callback_path            - OAuth redirect path (None for local/bearer)

Identifiers arrive from users as free text. ``parse_strategy_names`` cleans
them up without rejecting anything, and ``lookup_strategy`` turns a cleaned
identifier into a ``StrategyKind`` or ``None``. An unknown identifier is never
an error here: the planner decides to warn and skip it.

Usage Example
-------------
>>> parse_strategy_names("Google, local,google")
('google', 'local')
>>> lookup_strategy("bearer").descriptor.requires_token_store
True
>>> lookup_strategy("foo") is None
True
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath


# =============================================================================
# Documentation Links
# =============================================================================


@dataclass(frozen=True)
class DocumentationLink:
    """
    A generated documentation page.

    Attributes
    ----------
    label : str
        Human-readable title used in indexes.

    path : str
        Output path relative to the project root (e.g. ``docs/postgres.md``).
    """

    label: str
    path: str

    @property
    def template(self) -> str:
        """Render template id for this page (``docs/<file>.j2``)."""
        return f"docs/{PurePosixPath(self.path).name}.j2"


ARCHITECTURE_DOC = DocumentationLink("Architecture & Flows", "docs/architecture.md")
POSTGRES_DOC = DocumentationLink("PostgreSQL", "docs/postgres.md")
SESSIONS_DOC = DocumentationLink("Sessions", "docs/sessions.md")
AXIOS_DOC = DocumentationLink("Axios", "docs/axios.md")


# =============================================================================
# Strategy Descriptors
# =============================================================================


@dataclass(frozen=True)
class StrategyDescriptor:
    """
    Artifacts required by one authentication strategy.

    Attributes
    ----------
    template : str
        Jinja2 template id of the strategy's configuration module.

    output_path : str
        Where the configuration module is written, relative to the project.

    dependencies : tuple[str, ...]
        Strategy-specific npm packages (``passport`` and ``bcrypt`` are
        shared and added by the planner).

    docs : tuple[DocumentationLink, ...]
        Bespoke documentation pages, possibly empty.

    requires_token_store : bool
        Whether the strategy needs the token store, scope checks, the
        protected API route, and the token CLI helper.

    env_keys : tuple[str, ...]
        Environment variables the generated module reads.

    callback_path : str | None
        Browser redirect path for OAuth providers.
    """

    template: str
    output_path: str
    dependencies: tuple[str, ...]
    docs: tuple[DocumentationLink, ...] = ()
    requires_token_store: bool = False
    env_keys: tuple[str, ...] = ()
    callback_path: str | None = None

    def env_placeholders(self, port: str) -> list[tuple[str, str]]:
        """
        Default ``.env`` values for this strategy's keys.

        Callback and return URLs point at the local dev server, the
        Microsoft tenant defaults to ``common``, and every secret is left
        blank for the developer to fill in.
        """
        base_url = f"http://localhost:{port}"
        values: list[tuple[str, str]] = []
        for key in self.env_keys:
            if key.endswith(("_CALLBACK_URL", "_RETURN_URL")) and self.callback_path:
                values.append((key, f"{base_url}{self.callback_path}"))
            elif key.endswith("_REALM"):
                values.append((key, base_url))
            elif key == "MICROSOFT_TENANT":
                values.append((key, "common"))
            else:
                values.append((key, ""))
        return values


def _oauth(
    provider: str,
    package: str,
    *,
    prefix: str | None = None,
    id_key: str = "CLIENT_ID",
    secret_key: str = "CLIENT_SECRET",
    extra_keys: tuple[str, ...] = (),
    docs: tuple[DocumentationLink, ...] = (),
) -> StrategyDescriptor:
    prefix = prefix or provider.upper()
    return StrategyDescriptor(
        template=f"auth/passport-{provider}.js.j2",
        output_path=f"config/passport-{provider}.js",
        dependencies=(package,),
        docs=docs,
        env_keys=(
            f"{prefix}_{id_key}",
            f"{prefix}_{secret_key}",
            *extra_keys,
            f"{prefix}_CALLBACK_URL",
        ),
        callback_path=f"/auth/{provider}/callback",
    )


class StrategyKind(str, Enum):
    """
    Closed set of supported authentication strategies.

    The value is the identifier users type on the command line. Members
    are declared in the order kickstart presents them in prompts.
    """

    LOCAL = "local"
    BEARER = "bearer"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    MICROSOFT = "microsoft"
    LINKEDIN = "linkedin"
    STEAM = "steam"
    AMAZON = "amazon"

    @property
    def descriptor(self) -> StrategyDescriptor:
        """The immutable artifact descriptor for this strategy."""
        return STRATEGY_DESCRIPTORS[self]

    @property
    def title(self) -> str:
        """Display name for prompts and reports."""
        return _TITLES.get(self, self.value.capitalize())


_TITLES = {
    StrategyKind.LINKEDIN: "LinkedIn",
}


STRATEGY_DESCRIPTORS: dict[StrategyKind, StrategyDescriptor] = {
    StrategyKind.LOCAL: StrategyDescriptor(
        template="auth/passport-local.js.j2",
        output_path="config/passport-local.js",
        dependencies=("passport-local",),
        docs=(DocumentationLink("Local (email + password)", "docs/local-sessions.md"),),
    ),
    StrategyKind.BEARER: StrategyDescriptor(
        template="auth/passport-bearer.js.j2",
        output_path="config/passport-bearer.js",
        dependencies=("passport-http-bearer",),
        docs=(DocumentationLink("Bearer Tokens", "docs/bearer-tokens.md"),),
        requires_token_store=True,
        env_keys=("TOKEN_HASH_PEPPER",),
    ),
    StrategyKind.GOOGLE: _oauth(
        "google",
        "passport-google-oauth20",
        docs=(DocumentationLink("Google OAuth 2.0", "docs/google-oauth.md"),),
    ),
    StrategyKind.FACEBOOK: _oauth(
        "facebook",
        "passport-facebook",
        id_key="APP_ID",
        secret_key="APP_SECRET",
    ),
    StrategyKind.TWITTER: _oauth("twitter", "@superfaceai/passport-twitter-oauth2"),
    StrategyKind.MICROSOFT: _oauth(
        "microsoft",
        "passport-microsoft",
        extra_keys=("MICROSOFT_TENANT",),
        docs=(DocumentationLink("Microsoft OAuth 2.0", "docs/microsoft-oauth.md"),),
    ),
    StrategyKind.LINKEDIN: _oauth("linkedin", "passport-linkedin-oauth2"),
    StrategyKind.STEAM: StrategyDescriptor(
        template="auth/passport-steam.js.j2",
        output_path="config/passport-steam.js",
        dependencies=("passport-steam",),
        env_keys=("STEAM_API_KEY", "STEAM_REALM", "STEAM_RETURN_URL"),
        callback_path="/auth/steam/return",
    ),
    StrategyKind.AMAZON: _oauth("amazon", "passport-amazon"),
}


# =============================================================================
# Parsing and Lookup
# =============================================================================


def parse_strategy_names(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """
    Clean up a strategy selection.

    Accepts a comma-separated string or any iterable of strings. Each entry
    is trimmed and lower-cased; empty entries are dropped and duplicates are
    removed while keeping first-seen order. Unknown identifiers are kept.

    Parameters
    ----------
    value : str | Iterable[str] | None
        Raw selection from a flag, a preset, or a checkbox prompt.

    Returns
    -------
    tuple[str, ...]
        Normalized identifiers in insertion order.

    Examples
    --------
    >>> parse_strategy_names("google,local,google")
    ('google', 'local')
    >>> parse_strategy_names([" Bearer ", "", "bearer"])
    ('bearer',)
    """
    if value is None:
        return ()

    raw = value.split(",") if isinstance(value, str) else value

    seen: dict[str, None] = {}
    for entry in raw:
        name = str(entry).strip().lower()
        if name:
            seen.setdefault(name, None)
    return tuple(seen)


def lookup_strategy(identifier: str) -> StrategyKind | None:
    """Return the strategy for ``identifier``, or None if it is unknown."""
    try:
        return StrategyKind(identifier.strip().lower())
    except ValueError:
        return None


def resolve_strategies(
    identifiers: Iterable[str],
) -> tuple[tuple[StrategyKind, ...], tuple[str, ...]]:
    """
    Split identifiers into known strategies and unknown names.

    Both halves keep the input order.
    """
    known: list[StrategyKind] = []
    unknown: list[str] = []
    for identifier in identifiers:
        kind = lookup_strategy(identifier)
        if kind is None:
            unknown.append(identifier)
        elif kind not in known:
            known.append(kind)
    return tuple(known), tuple(unknown)
