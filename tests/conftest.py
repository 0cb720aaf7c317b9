"""
pytest configuration and shared fixtures for kickstart tests.

Fixtures defined here are automatically available to all tests.

Fixtures
--------
temp_output_dir : Path
    Empty directory that projects are generated into.

fake_runner : FakeRunner
    Records npm/git commands instead of running them.

make_config : Callable[..., ProjectConfig]
    Factory for normalized configurations rooted in ``temp_output_dir``.

make_prompter, make_runner
    Factories for the scripted prompter and recording runner doubles.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from kickstart.errors import CollaboratorError, PromptAborted
from kickstart.models import ProjectConfig
from kickstart.normalizer import apply_invariants


# =============================================================================
# Test Doubles
# =============================================================================


class FakeRunner:
    """
    ``CommandRunner`` that records calls.

    ``npm init -y`` writes a minimal package.json the way npm would, so the
    manifest patch step has something to read.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[tuple[list[str], Path, dict[str, str] | None]] = []
        self.fail_on = fail_on

    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> None:
        args = list(args)
        self.calls.append((args, cwd, dict(env) if env else None))
        if self.fail_on and args[:2] == self.fail_on.split()[:2]:
            raise CollaboratorError(args, 1, "simulated failure")
        if args[:2] == ["npm", "init"]:
            manifest = {
                "name": cwd.name,
                "version": "1.0.0",
                "scripts": {"test": 'echo "Error: no test specified" && exit 1'},
            }
            (cwd / "package.json").write_text(json.dumps(manifest), encoding="utf-8")

    @property
    def commands(self) -> list[list[str]]:
        return [args for args, _, _ in self.calls]


class ScriptedPrompter:
    """
    ``Prompter`` that replays prepared answers and records every question.

    ``answers`` maps a question message to its answer. A question without
    an answer returns the default (confirm/text) or an empty selection
    (checkbox). ``abort_on`` names a question that raises ``PromptAborted``.
    """

    def __init__(
        self,
        answers: dict[str, Any] | None = None,
        abort_on: str | None = None,
    ) -> None:
        self.answers = answers or {}
        self.abort_on = abort_on
        self.asked: list[str] = []
        self.secret_questions: list[str] = []

    def _ask(self, message: str, default: Any) -> Any:
        self.asked.append(message)
        if message == self.abort_on:
            raise PromptAborted()
        return self.answers.get(message, default)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return self._ask(message, default)

    def checkbox(self, message: str, choices: Sequence[tuple[str, str]]) -> list[str]:
        return list(self._ask(message, []))

    def text(self, message: str, *, default: str = "", secret: bool = False) -> str:
        if secret:
            self.secret_questions.append(message)
        return self._ask(message, default)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """
    Create an empty directory to generate projects into.

    Returns
    -------
    Path
        Path to the directory; the project lands in a child of it.
    """
    output_dir = tmp_path / "projects"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Provide a command runner that records instead of executing."""
    return FakeRunner()


@pytest.fixture
def make_config(temp_output_dir: Path) -> Callable[..., ProjectConfig]:
    """
    Provide a factory for consistent configurations.

    Keyword arguments are passed to ``ProjectConfig``; the result is run
    through ``apply_invariants`` so auth implies database and sessions.
    """

    def factory(**overrides: Any) -> ProjectConfig:
        values: dict[str, Any] = {
            "project_name": "demo",
            "output_dir": temp_output_dir,
            "non_interactive": True,
        }
        values.update(overrides)
        config, _ = apply_invariants(ProjectConfig(**values))
        return config

    return factory


@pytest.fixture
def make_prompter() -> Callable[..., ScriptedPrompter]:
    """Provide a factory for scripted prompters."""
    return ScriptedPrompter


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Provide a factory for recording runners (e.g. ``fail_on="git commit"``)."""
    return FakeRunner
