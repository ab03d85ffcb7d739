"""Cleanup step dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True, slots=True)
class CleanupStep:
    """A named, independently toggleable cleanup action.

    ``action`` takes no arguments; configuration is bound when the step is
    assembled.
    """

    name: str
    enabled: bool
    action: Callable[[], None]
