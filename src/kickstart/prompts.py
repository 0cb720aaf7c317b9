"""
kickstart.prompts - Interactive Prompts
=======================================

questionary-backed implementation of ``kickstart.normalizer.Prompter``.
questionary returns ``None`` when the user hits Ctrl-C; every method turns
that into ``PromptAborted`` so the CLI exits non-zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import questionary

from kickstart.errors import PromptAborted


T = TypeVar("T")


def _answered(result: T | None) -> T:
    if result is None:
        raise PromptAborted()
    return result


class QuestionaryPrompter:
    """Ask questions on the terminal with questionary."""

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return _answered(questionary.confirm(message, default=default).ask())

    def checkbox(self, message: str, choices: Sequence[tuple[str, str]]) -> list[str]:
        result = questionary.checkbox(
            message,
            choices=[questionary.Choice(title=title, value=value) for title, value in choices],
        ).ask()
        return list(_answered(result))

    def text(self, message: str, *, default: str = "", secret: bool = False) -> str:
        if secret:
            return _answered(questionary.password(message, default=default).ask())
        return _answered(questionary.text(message, default=default).ask())
