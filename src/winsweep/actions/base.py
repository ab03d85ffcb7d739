"""Base cleanup action interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from winsweep.core.remover import DirectoryContentClearer
from winsweep.models.context import CleanupContext
from winsweep.models.file_entry import FileEntry

log = logging.getLogger(__name__)


class CleanupAction(ABC):
    """Base class for every cleanup action.

    An action is toggled by the ``CleanupOptions`` field named by
    :attr:`option` and performs its work in :meth:`execute`.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'user_temp'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used in log entries, e.g. 'Clear user TEMP folder'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this action removes and what the operator should expect."""

    @property
    @abstractmethod
    def option(self) -> str:
        """Name of the ``CleanupOptions`` toggle for this action."""

    @property
    def optional(self) -> bool:
        """Whether the operator is prompted for this action when space is low."""
        return False

    @abstractmethod
    def execute(self, ctx: CleanupContext) -> None:
        """Perform the action. Raising aborts the run."""


class ClearDirectoriesAction(CleanupAction, ABC):
    """Base class for actions that empty one or more directories.

    Subclasses only define metadata and :meth:`_target_dirs`; the
    directories themselves are kept.
    """

    @abstractmethod
    def _target_dirs(self) -> list[Path]:
        """Directories whose contents are removed."""

    def execute(self, ctx: CleanupContext) -> None:
        clearer = DirectoryContentClearer(ctx)
        for directory in self._target_dirs():
            clearer.clear(directory)


class OptionalAction(CleanupAction, ABC):
    """A high-impact action offered to the operator when large resources exist."""

    @property
    def optional(self) -> bool:
        return True

    @property
    @abstractmethod
    def question(self) -> str:
        """Yes/no question asked before enabling the action."""

    @abstractmethod
    def find_candidates(self, min_bytes: int = 0) -> list[FileEntry]:
        """Resources this action would shrink that are at least *min_bytes*.

        MUST NOT modify anything.
        """
