"""
kickstart.reporter - NEXT_STEPS.md Builder
==========================================

Builds the guidance document shown to developers after generation. The
reporter only *reads* decisions already made by the normalizer; it never
decides whether a feature is on.

Document layout, in fixed order:

    # Next Steps
    📚 Docs index          (only docs that were generated)
    1) Configure Environment Variables
    2) Database
    3) Authentication Setup    (if any strategy; local first)
    n) Quick Start             (token commands when bearer is selected)
    n) Start the Dev Server
    n) What's Next
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from kickstart.executor import ExecutionMode
from kickstart.models import ProjectConfig
from kickstart.registry import DocumentationLink, StrategyKind, lookup_strategy


NEXT_STEPS_FILE = "NEXT_STEPS.md"


# =============================================================================
# Document Structure
# =============================================================================


@dataclass
class NextStepsSection:
    """A titled block of markdown lines. Numbered sections get ``n)`` prefixes."""

    title: str
    lines: list[str] = field(default_factory=list)
    numbered: bool = True


@dataclass
class NextStepsDocument:
    """
    Structured NEXT_STEPS.md content.

    Attributes
    ----------
    title : str
        Top-level heading.

    intro : list[str]
        Lines under the heading.

    sections : list[NextStepsSection]
        Body sections in output order.
    """

    title: str
    intro: list[str] = field(default_factory=list)
    sections: list[NextStepsSection] = field(default_factory=list)

    def section(self, title: str) -> NextStepsSection | None:
        return next((s for s in self.sections if s.title == title), None)

    @property
    def section_titles(self) -> list[str]:
        return [s.title for s in self.sections]

    def to_markdown(self) -> str:
        """Render the document as markdown."""
        lines = [f"# {self.title}", "", *self.intro, "", "---", ""]
        step = 1
        for section in self.sections:
            if section.numbered:
                lines.append(f"## {step}) {section.title}")
                step += 1
            else:
                lines.append(f"## {section.title}")
            lines.extend(section.lines)
            lines.append("")
        return "\n".join(lines).rstrip() + "\n"


# =============================================================================
# Per-Strategy Guidance
# =============================================================================

_PROVIDER_CONSOLES = {
    StrategyKind.GOOGLE: (
        "Create OAuth credentials in the Google Cloud Console (type: **Web application**).",
        "Authorized redirect URI",
    ),
    StrategyKind.FACEBOOK: (
        "Create an app at Facebook for Developers.",
        "Valid OAuth Redirect URI",
    ),
    StrategyKind.TWITTER: (
        "Create a Project/App at the Twitter Developer Portal.",
        "Callback URL",
    ),
    StrategyKind.MICROSOFT: (
        "Create an app registration in Azure Portal. Use `common` as the tenant "
        "for any org/personal account, or set your tenant GUID.",
        "Redirect URI (web)",
    ),
    StrategyKind.LINKEDIN: (
        "Create an app in the LinkedIn Developer Portal.",
        "Authorized redirect URL",
    ),
    StrategyKind.AMAZON: (
        "Create a Login with Amazon app.",
        "Allowed Return URL",
    ),
}

USER_CREATE_COMMAND = "npm run user:create -- --email you@example.com --password P@ssw0rd"
TOKEN_ISSUE_COMMAND = "npm run token:issue -- --email you@example.com --scopes read:me --ttl 3600"


def _curl_me(port: str) -> str:
    return f'curl -H "Authorization: Bearer <token>" http://localhost:{port}/api/me'


def strategy_guidance(kind: StrategyKind, port: str) -> list[str]:
    """Setup instructions for one strategy, without any secret values."""
    base_url = f"http://localhost:{port}"
    descriptor = kind.descriptor
    lines = [f"### {kind.title}"]

    if kind is StrategyKind.LOCAL:
        lines += [
            "- Use the **Register** form at `/register` to create a user.",
            "- Then sign in at `/login` with email + password.",
        ]
    elif kind is StrategyKind.BEARER:
        lines += [
            "- API token auth (server-to-server, CLI, or SPA fetch). No browser callback.",
            "- Tokens are random and only a **SHA-256 hash** is stored in the DB.",
            "- Optional hardening: set `TOKEN_HASH_PEPPER` in `.env`.",
            "- Create a user and issue a token with the helper scripts:",
            "  ```bash",
            f"  {USER_CREATE_COMMAND}",
            f"  {TOKEN_ISSUE_COMMAND}",
            "  ```",
        ]
    elif kind is StrategyKind.STEAM:
        lines += [
            "- Obtain a Steam Web API key.",
            "- Review/update these in `.env`:",
            "  - STEAM_API_KEY",
            f"  - STEAM_REALM (e.g. {base_url})",
            f"  - STEAM_RETURN_URL (e.g. {base_url}{descriptor.callback_path})",
        ]
    else:
        setup, redirect_label = _PROVIDER_CONSOLES[kind]
        lines += [
            f"- {setup}",
            f"- {redirect_label} (dev): `{base_url}{descriptor.callback_path}`",
            "- Review/update these in `.env`:",
            *(f"  - {key}" for key in descriptor.env_keys),
        ]

    return lines


# =============================================================================
# Section Builders
# =============================================================================


def _docs_section(docs: list[DocumentationLink]) -> NextStepsSection:
    lines = [f"- **{doc.label}** → `{doc.path}`" for doc in docs]
    lines += ["", "---"]
    return NextStepsSection("📚 Docs", lines, numbered=False)


def _env_section(config: ProjectConfig, strategies: list[StrategyKind]) -> NextStepsSection:
    lines = [
        "Review these keys in `.env` (values may already be set from your flags/prompts):",
        "",
        "- **Server**",
        "  - PORT",
        "",
    ]
    if config.include_database:
        lines += ["- **PostgreSQL**", *(f"  - {k}" for k in ("PG_USER", "PG_PASS", "PG_DB", "PG_PORT", "PG_HOST")), ""]
    if config.include_sessions:
        lines += ["- **Session**", "  - SESSION_SECRET (optional; generated at runtime if missing)", ""]

    oauth = [s for s in strategies if s.descriptor.callback_path]
    if strategies:
        lines += [
            "- **OAuth/Passport**",
            "  - Ensure client IDs/secrets and callback URLs match your local dev port.",
        ]
        for kind in oauth:
            lines.append(f"  - {kind.title}: {', '.join(kind.descriptor.env_keys)}")
        if not oauth:
            lines.append("  - No provider keys needed; login relies on SESSION_SECRET.")
        lines.append("")
    if StrategyKind.BEARER in strategies:
        lines += ["- **Bearer (optional hardening)**", "  - TOKEN_HASH_PEPPER", ""]

    lines += [
        "> **Note:** After editing `.env`, restart the dev server so changes take effect.",
        "",
        "---",
    ]
    return NextStepsSection("Configure Environment Variables", lines)


def _database_section(config: ProjectConfig, slug: str) -> NextStepsSection:
    if not config.include_database:
        return NextStepsSection(
            "Database",
            ["No database selected. You can enable Postgres later and update `.env` accordingly."],
        )
    credentials = config.database_credentials
    database = credentials.database if credentials and credentials.database else slug
    return NextStepsSection(
        "Database",
        [
            "Make sure Postgres is running and the database exists:",
            "```bash",
            f"createdb {database}",
            "```",
        ],
    )


def _auth_section(strategies: list[StrategyKind], port: str) -> NextStepsSection:
    ordered = strategies
    if StrategyKind.LOCAL in strategies:
        ordered = [StrategyKind.LOCAL, *(s for s in strategies if s is not StrategyKind.LOCAL)]
    lines: list[str] = []
    for kind in ordered:
        lines += strategy_guidance(kind, port)
        lines.append("")
    return NextStepsSection("Authentication Setup", lines[:-1])


def _quick_start_section(
    project_name: str,
    strategies: list[StrategyKind],
    port: str,
) -> NextStepsSection:
    lines = ["```bash", f"cd {project_name}"]
    if StrategyKind.BEARER in strategies:
        lines += [
            "",
            "# Create a local user (if needed)",
            USER_CREATE_COMMAND,
            "",
            "# Issue a token for that user",
            TOKEN_ISSUE_COMMAND,
            "",
            "# Call the demo protected endpoint (requires scope read:me)",
            _curl_me(port),
        ]
    lines.append("```")
    if StrategyKind.BEARER in strategies:
        lines += [
            "",
            "> Tokens are returned once, so store them securely. Only a hash is stored in the DB.",
        ]
    return NextStepsSection("Quick Start", lines)


def _dev_server_section(port: str) -> NextStepsSection:
    return NextStepsSection(
        "Start the Dev Server",
        ["```bash", "npm run dev", "```", "", f"Then open http://localhost:{port}", "", "---"],
    )


def _whats_next_section(config: ProjectConfig, strategies: list[StrategyKind]) -> NextStepsSection:
    lines = []
    if config.include_sessions:
        lines.append("- Add CSRF protection to state-changing form POSTs.")
    if StrategyKind.BEARER in strategies:
        lines.append("- Add route-level scope checks (e.g., `ensureScope('read:me')`).")
    lines += [
        "- Add rate limiting to auth endpoints.",
        "- Keep dependencies up to date.",
    ]
    return NextStepsSection("What's Next", lines)


# =============================================================================
# Main Builder
# =============================================================================


def build_next_steps(
    project_name: str,
    config: ProjectConfig,
    strategies: Iterable[StrategyKind | str],
    slug: str,
) -> NextStepsDocument:
    """
    Build the NEXT_STEPS.md document for a generated project.

    Parameters
    ----------
    project_name : str
        Name shown in the introduction and used in ``cd``.

    config : ProjectConfig
        The normalized configuration; only its flags are read.

    strategies : Iterable[StrategyKind | str]
        Selected strategies. Identifiers the registry does not know are
        ignored, matching what the planner generated.

    slug : str
        Project slug, the fallback database name.

    Returns
    -------
    NextStepsDocument
        Structured guidance; call ``to_markdown()`` for text.
    """
    selected: list[StrategyKind] = []
    for entry in strategies:
        kind = entry if isinstance(entry, StrategyKind) else lookup_strategy(entry)
        if kind is not None and kind not in selected:
            selected.append(kind)

    port = config.port
    document = NextStepsDocument(
        title="Next Steps",
        intro=[
            "Thanks for using **Kickstart Node**! 🚀",
            f"Your project **{project_name}** is ready.",
        ],
    )

    document.sections.append(_docs_section(config.documentation))
    document.sections.append(_env_section(config, selected))
    document.sections.append(_database_section(config, slug))
    if selected:
        document.sections.append(_auth_section(selected, port))
    document.sections.append(_quick_start_section(project_name, selected, port))
    document.sections.append(_dev_server_section(port))
    document.sections.append(_whats_next_section(config, selected))

    return document


def write_next_steps(
    project_dir: Path,
    document: NextStepsDocument,
    mode: ExecutionMode,
) -> Path | None:
    """Write NEXT_STEPS.md unless running dry. Returns the path written."""
    if mode is ExecutionMode.DRY_RUN:
        return None
    path = project_dir / NEXT_STEPS_FILE
    path.write_text(document.to_markdown(), encoding="utf-8")
    return path
