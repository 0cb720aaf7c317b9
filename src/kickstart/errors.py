"""
kickstart.errors - Exception Hierarchy
======================================

Every failure that should stop a generation run derives from
``KickstartError`` so the CLI can report it with a single handler.
Configuration conflicts are *not* errors: the normalizer corrects them
and returns a notice instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class KickstartError(Exception):
    """Base exception for kickstart failures."""


class PresetError(KickstartError):
    """A preset-answers file could not be read, parsed, or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid preset file '{path}': {reason}")


class PromptAborted(KickstartError):
    """The user cancelled an interactive prompt."""

    def __init__(self, message: str = "Prompt cancelled by user") -> None:
        super().__init__(message)


class MissingTemplateError(KickstartError):
    """A template or static asset tree required by the plan does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Template source not found: {path}")


class RenderError(KickstartError):
    """Rendering or writing a single plan action failed."""

    def __init__(self, source: str, destination: str, cause: BaseException) -> None:
        self.source = source
        self.destination = destination
        self.cause = cause
        super().__init__(f"Failed to render {source} -> {destination}: {cause}")


class CollaboratorError(KickstartError):
    """An external command (package manager, git) failed."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr

        message = f"Command failed: {' '.join(self.command)}"
        if returncode is None:
            message += " (executable not found)"
        else:
            message += f" (exit status {returncode})"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)
