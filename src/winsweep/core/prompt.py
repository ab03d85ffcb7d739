"""Yes/no prompts for optional high-impact actions."""

from __future__ import annotations

from typing import Protocol

import click


class Prompter(Protocol):
    """Asks the operator a yes/no question."""

    def confirm(self, question: str) -> bool: ...


class ClickPrompter:
    """Interactive prompt on the terminal; defaults to no."""

    def confirm(self, question: str) -> bool:
        return click.confirm(question, default=False)


class AutoPrompter:
    """Answers every question with a fixed reply, for unattended runs."""

    def __init__(self, answer: bool = False) -> None:
        self.answer = answer
        self.questions: list[str] = []

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer
