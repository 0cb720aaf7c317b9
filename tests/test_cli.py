"""
Tests for kickstart.cli
=======================

This module contains tests for the command-line interface.
Tests use Typer's CliRunner. Runs are either dry runs or use a recording
command runner, so npm and git never execute.

Test Organization
-----------------
- TestVersionCommand: Tests for --version flag
- TestHelpOutput: Tests for help text
- TestWebCommand: Tests for non-interactive generation
- TestWebErrors: Tests for error reporting
- TestInteractive: Tests for the prompt path
"""

import json
import pytest
from pathlib import Path
from typer.testing import CliRunner

from kickstart import __version__
from kickstart.cli import app


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def recorded_commands(monkeypatch, make_runner):
    """Replace the subprocess runner and collect every command it receives."""
    fake = make_runner()
    monkeypatch.setattr("kickstart.executor.SubprocessRunner", lambda: fake)
    return fake


def web(output_dir: Path, *args: str) -> list[str]:
    """Arguments for ``kickstart web`` into ``output_dir``."""
    return ["web", *args, "--output", str(output_dir)]


# =============================================================================
# Version Command Tests
# =============================================================================

class TestVersionCommand:
    """Tests for the --version flag."""

    def test_version_flag(self, runner: CliRunner) -> None:
        """Test that --version shows version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_short_flag(self, runner: CliRunner) -> None:
        """Test that -V shows version."""
        result = runner.invoke(app, ["-V"])

        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# Help Output Tests
# =============================================================================

class TestHelpOutput:
    """Tests for help text."""

    def test_main_help(self, runner: CliRunner) -> None:
        """Test main help output."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "web" in result.output

    def test_web_help(self, runner: CliRunner) -> None:
        """Test web command help output."""
        result = runner.invoke(app, ["web", "--help"])

        assert result.exit_code == 0
        assert "--passport" in result.output
        assert "--dry-run" in result.output
        assert "--preset" in result.output


# =============================================================================
# Web Command Tests
# =============================================================================

class TestWebCommand:
    """Tests for non-interactive runs of the web command."""

    def test_dry_run_writes_nothing(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that --dry-run logs actions and creates no directory."""
        result = runner.invoke(app, web(tmp_path, "demo", "--silent", "--dry-run"))

        assert result.exit_code == 0, result.output
        assert "[skipped]" in result.output
        assert not (tmp_path / "demo").exists()

    def test_bearer_enables_prerequisites(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that --passport bearer prints the auto-enable notice."""
        result = runner.invoke(
            app, web(tmp_path, "api", "--passport", "bearer", "--silent", "--dry-run")
        )

        assert result.exit_code == 0, result.output
        assert "Authentication requires PostgreSQL" in result.output
        assert "scripts/auth-cli.js" in result.output

    def test_unknown_strategy_warns(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that an unknown strategy is reported but not fatal."""
        result = runner.invoke(
            app, web(tmp_path, "demo", "--passport", "foo,local", "--silent", "--dry-run")
        )

        assert result.exit_code == 0, result.output
        assert "'foo'" in result.output

    def test_verbose_shows_configuration(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that --verbose prints the resolved configuration."""
        result = runner.invoke(
            app, web(tmp_path, "demo", "--pg", "--silent", "--dry-run", "--verbose")
        )

        assert result.exit_code == 0, result.output
        assert "Project Configuration" in result.output

    def test_preset_implies_silent(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that a preset runs without prompting."""
        preset = tmp_path / "answers.json"
        preset.write_text(json.dumps({"includeHttpClient": True, "dryRun": True}))

        result = runner.invoke(app, web(tmp_path, "demo", "--preset", str(preset)))

        assert result.exit_code == 0, result.output
        assert "docs/axios.md" in result.output

    def test_live_run(self, runner: CliRunner, tmp_path: Path, recorded_commands) -> None:
        """Test a live run with npm and git recorded instead of executed."""
        result = runner.invoke(
            app, web(tmp_path, "shop", "--passport", "local", "--silent", "--no-git")
        )
        project = tmp_path / "shop"

        assert result.exit_code == 0, result.output
        assert (project / "config" / "passport-local.js").is_file()
        assert (project / "NEXT_STEPS.md").is_file()
        assert ["npm", "init", "-y"] in recorded_commands.commands
        assert all(cmd[0] != "git" for cmd in recorded_commands.commands)

    def test_port_written(self, runner: CliRunner, tmp_path: Path, recorded_commands) -> None:
        """Test that --port reaches the generated .env."""
        result = runner.invoke(
            app, web(tmp_path, "demo", "--port", "4000", "--silent", "--no-git")
        )

        assert result.exit_code == 0, result.output
        assert "PORT=4000" in (tmp_path / "demo" / ".env").read_text()


# =============================================================================
# Error Tests
# =============================================================================

class TestWebErrors:
    """Tests for error reporting and exit status."""

    def test_invalid_port(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that a malformed port exits non-zero."""
        result = runner.invoke(
            app, web(tmp_path, "demo", "--port", "http", "--silent", "--dry-run")
        )

        assert result.exit_code == 1
        assert "Invalid port" in result.output

    def test_missing_preset(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that an unreadable preset exits non-zero."""
        result = runner.invoke(
            app, web(tmp_path, "demo", "--preset", str(tmp_path / "nope.json"))
        )

        assert result.exit_code == 1
        assert "Invalid preset" in result.output

    def test_existing_directory(self, runner: CliRunner, tmp_path: Path, recorded_commands) -> None:
        """Test that a populated target directory exits non-zero."""
        (tmp_path / "demo").mkdir()
        (tmp_path / "demo" / "keep.txt").write_text("mine")

        result = runner.invoke(app, web(tmp_path, "demo", "--silent"))

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert recorded_commands.calls == []

    def test_invalid_name(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that a name with a path separator exits non-zero."""
        result = runner.invoke(app, web(tmp_path, "a/b", "--silent", "--dry-run"))

        assert result.exit_code == 1


# =============================================================================
# Interactive Tests
# =============================================================================

class TestInteractive:
    """Tests for the interactive prompt path."""

    def test_answers_used(
        self, runner: CliRunner, tmp_path: Path, monkeypatch, make_prompter
    ) -> None:
        """Test that prompt answers shape the plan."""
        prompter = make_prompter({"Include Axios?": True})
        monkeypatch.setattr("kickstart.cli.QuestionaryPrompter", lambda: prompter)

        result = runner.invoke(app, web(tmp_path, "demo", "--dry-run"))

        assert result.exit_code == 0, result.output
        assert "Include Axios?" in prompter.asked
        assert "docs/axios.md" in result.output

    def test_flags_skip_prompts(
        self, runner: CliRunner, tmp_path: Path, monkeypatch, make_prompter
    ) -> None:
        """Test that feature flags suppress the feature questions."""
        prompter = make_prompter()
        monkeypatch.setattr("kickstart.cli.QuestionaryPrompter", lambda: prompter)

        result = runner.invoke(app, web(tmp_path, "demo", "--axios", "--dry-run"))

        assert result.exit_code == 0, result.output
        assert prompter.asked == []

    def test_abort_exits_non_zero(
        self, runner: CliRunner, tmp_path: Path, monkeypatch, make_prompter
    ) -> None:
        """Test that cancelling a prompt exits with status 1."""
        prompter = make_prompter(abort_on="Include PostgreSQL?")
        monkeypatch.setattr("kickstart.cli.QuestionaryPrompter", lambda: prompter)

        result = runner.invoke(app, web(tmp_path, "demo", "--dry-run"))

        assert result.exit_code == 1
        assert "cancelled" in result.output
