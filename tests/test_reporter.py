"""
Tests for kickstart.reporter
============================

Test Organization
-----------------
- TestDocumentStructure: Tests for section order and numbering
- TestSections: Tests for per-feature section content
- TestStrategyGuidance: Tests for per-strategy instructions
- TestWriteNextSteps: Tests for writing the file
"""

import pytest
from pathlib import Path

from kickstart.executor import ExecutionMode
from kickstart.models import ProjectConfig
from kickstart.reporter import (
    NEXT_STEPS_FILE,
    TOKEN_ISSUE_COMMAND,
    USER_CREATE_COMMAND,
    NextStepsDocument,
    NextStepsSection,
    build_next_steps,
    strategy_guidance,
    write_next_steps,
)
from kickstart.registry import StrategyKind


def build(config: ProjectConfig) -> NextStepsDocument:
    """Build the document the way the generator does."""
    return build_next_steps(
        config.project_name,
        config,
        config.known_strategies,
        config.project_slug,
    )


# =============================================================================
# Structure Tests
# =============================================================================

class TestDocumentStructure:
    """Tests for section order and numbering."""

    def test_sections_without_auth(self, make_config) -> None:
        """Test the section list of a plain project."""
        document = build(make_config())

        assert document.section_titles == [
            "📚 Docs",
            "Configure Environment Variables",
            "Database",
            "Quick Start",
            "Start the Dev Server",
            "What's Next",
        ]

    def test_auth_section_inserted(self, make_config) -> None:
        """Test that authentication setup follows the database section."""
        titles = build(make_config(auth_strategies="google")).section_titles

        assert titles.index("Authentication Setup") == titles.index("Database") + 1

    def test_numbering_skips_docs(self, make_config) -> None:
        """Test that the docs block is unnumbered and steps count from 1."""
        markdown = build(make_config(auth_strategies="local")).to_markdown()

        assert "## 📚 Docs" in markdown
        assert "## 1) Configure Environment Variables" in markdown
        assert "## 2) Database" in markdown
        assert "## 3) Authentication Setup" in markdown
        assert "## 6) What's Next" in markdown

    def test_intro(self, make_config) -> None:
        """Test the heading and project name."""
        markdown = build(make_config(project_name="Shop")).to_markdown()

        assert markdown.startswith("# Next Steps\n")
        assert "**Shop**" in markdown

    def test_markdown_rendering(self) -> None:
        """Test to_markdown on a hand-built document."""
        document = NextStepsDocument(
            title="T",
            intro=["hello"],
            sections=[
                NextStepsSection("Intro", ["x"], numbered=False),
                NextStepsSection("First", ["a"]),
                NextStepsSection("Second", ["b"]),
            ],
        )

        assert document.to_markdown() == (
            "# T\n\nhello\n\n---\n\n## Intro\nx\n\n## 1) First\na\n\n## 2) Second\nb\n"
        )


# =============================================================================
# Section Content Tests
# =============================================================================

class TestSections:
    """Tests for feature-dependent section content."""

    def test_docs_only_generated(self, make_config) -> None:
        """Test that the docs block lists exactly the generated guides."""
        config = make_config(include_http_client=True)
        lines = build(config).section("📚 Docs").lines
        links = [line for line in lines if line.startswith("- ")]

        assert links == [
            "- **Architecture & Flows** → `docs/architecture.md`",
            "- **Axios** → `docs/axios.md`",
        ]

    def test_no_database(self, make_config) -> None:
        """Test the database section when PostgreSQL is off."""
        lines = build(make_config()).section("Database").lines
        assert lines[0].startswith("No database selected")

    def test_createdb_uses_database_name(self, make_config) -> None:
        """Test that createdb names the configured database."""
        lines = build(make_config(project_name="My Shop", include_database=True)).section("Database").lines
        assert "createdb my-shop" in lines

    def test_env_groups(self, make_config) -> None:
        """Test the env checklist for sessions and an OAuth provider."""
        lines = build(make_config(auth_strategies="google")).section(
            "Configure Environment Variables"
        ).lines

        assert "- **PostgreSQL**" in lines
        assert "- **Session**" in lines
        assert "  - Google: GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_CALLBACK_URL" in lines

    def test_env_group_for_local_only(self, make_config) -> None:
        """Test that a local-only project still gets the Passport group."""
        lines = build(make_config(auth_strategies="local")).section(
            "Configure Environment Variables"
        ).lines

        assert "- **OAuth/Passport**" in lines
        assert "  - No provider keys needed; login relies on SESSION_SECRET." in lines

    def test_no_passport_group_without_auth(self, make_config) -> None:
        """Test that a project without strategies has no Passport group."""
        lines = build(make_config()).section("Configure Environment Variables").lines
        assert "- **OAuth/Passport**" not in lines

    def test_quick_start_bearer(self, make_config) -> None:
        """Test that bearer adds the token commands and curl example."""
        lines = build(make_config(project_name="api", auth_strategies="bearer")).section("Quick Start").lines

        assert "cd api" in lines
        assert USER_CREATE_COMMAND in lines
        assert TOKEN_ISSUE_COMMAND in lines
        assert 'curl -H "Authorization: Bearer <token>" http://localhost:3000/api/me' in lines

    def test_quick_start_plain(self, make_config) -> None:
        """Test that a plain project only changes directory."""
        lines = build(make_config()).section("Quick Start").lines
        assert lines == ["```bash", "cd demo", "```"]

    def test_dev_server_port(self, make_config) -> None:
        """Test that the dev server section uses the configured port."""
        lines = build(make_config(port="4000")).section("Start the Dev Server").lines
        assert "Then open http://localhost:4000" in lines

    def test_whats_next(self, make_config) -> None:
        """Test conditional hardening tips."""
        plain = build(make_config()).section("What's Next").lines
        bearer = build(make_config(auth_strategies="bearer")).section("What's Next").lines

        assert not any("CSRF" in line for line in plain)
        assert any("CSRF" in line for line in bearer)
        assert any("ensureScope" in line for line in bearer)
        assert "- Add rate limiting to auth endpoints." in plain

    def test_unknown_strategies_ignored(self, make_config) -> None:
        """Test that identifiers the registry does not know add nothing."""
        config = make_config(auth_strategies="foo")
        document = build_next_steps("demo", config, ["foo"], "demo")

        assert "Authentication Setup" not in document.section_titles


# =============================================================================
# Strategy Guidance Tests
# =============================================================================

class TestStrategyGuidance:
    """Tests for strategy_guidance."""

    def test_local_first(self, make_config) -> None:
        """Test that local guidance comes first regardless of request order."""
        lines = build(make_config(auth_strategies="google,local")).section("Authentication Setup").lines
        headings = [line for line in lines if line.startswith("### ")]

        assert headings == ["### Local", "### Google"]

    @pytest.mark.parametrize("kind", [k for k in StrategyKind if k.descriptor.callback_path])
    def test_oauth_redirect(self, kind: StrategyKind) -> None:
        """Test that each browser-based provider shows its redirect URL."""
        text = "\n".join(strategy_guidance(kind, "3000"))
        assert f"http://localhost:3000{kind.descriptor.callback_path}" in text

    def test_bearer_has_no_callback(self) -> None:
        """Test that bearer guidance describes tokens, not redirects."""
        text = "\n".join(strategy_guidance(StrategyKind.BEARER, "3000"))

        assert "SHA-256" in text
        assert "/auth/" not in text

    def test_no_secret_values(self, make_config) -> None:
        """Test that guidance never contains generated secrets."""
        markdown = build(make_config(auth_strategies=",".join(k.value for k in StrategyKind))).to_markdown()
        assert "SESSION_SECRET=" not in markdown


# =============================================================================
# Writing Tests
# =============================================================================

class TestWriteNextSteps:
    """Tests for write_next_steps."""

    def test_live_writes(self, make_config, tmp_path: Path) -> None:
        """Test that a live run writes NEXT_STEPS.md."""
        document = build(make_config())
        path = write_next_steps(tmp_path, document, ExecutionMode.LIVE)

        assert path == tmp_path / NEXT_STEPS_FILE
        assert path.read_text(encoding="utf-8") == document.to_markdown()

    def test_dry_run_skips(self, make_config, tmp_path: Path) -> None:
        """Test that a dry run writes nothing."""
        assert write_next_steps(tmp_path, build(make_config()), ExecutionMode.DRY_RUN) is None
        assert not (tmp_path / NEXT_STEPS_FILE).exists()
