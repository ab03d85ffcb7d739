"""Deletion of files and directories that may be locked or access-denied.

:class:`LockedResourceRemover` walks an ordered chain of removal
strategies, stopping as soon as the target is gone.  Failures of a single
target are logged as warnings and never raised, so a caller clearing many
items keeps going.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
import tempfile
from abc import ABC, abstractmethod
from contextlib import suppress
from pathlib import Path

from winsweep.core.logger import LogLevel
from winsweep.core.tools import ToolError, ToolRunner
from winsweep.models.context import CleanupContext
from winsweep.utils import is_link, long_path, path_exists

log = logging.getLogger(__name__)

_SCRATCH_PREFIX = "winsweep-empty-"


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not is_link(path)


class RemovalStrategy(ABC):
    """One attempt in the removal chain."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Short description used in log entries."""

    def applies_to(self, path: Path) -> bool:
        return True

    @abstractmethod
    def attempt(self, path: Path) -> None:
        """Try to make *path* removable or remove it. May raise."""


class TakeOwnership(RemovalStrategy):
    def __init__(self, tools: ToolRunner) -> None:
        self._tools = tools

    @property
    def label(self) -> str:
        return "Take ownership"

    def attempt(self, path: Path) -> None:
        self._tools.take_ownership(path, recursive=_is_real_dir(path))


class GrantFullControl(RemovalStrategy):
    def __init__(self, tools: ToolRunner) -> None:
        self._tools = tools

    @property
    def label(self) -> str:
        return "Grant full control"

    def attempt(self, path: Path) -> None:
        self._tools.grant_full_control(path, recursive=_is_real_dir(path))


class MirrorEmpty(RemovalStrategy):
    """Overwrite a directory's contents with those of an empty scratch dir.

    robocopy removes children a plain unlink may refuse; the directory
    itself is left behind for the next strategy.
    """

    def __init__(self, tools: ToolRunner) -> None:
        self._tools = tools

    @property
    def label(self) -> str:
        return "Mirror-empty"

    def applies_to(self, path: Path) -> bool:
        return _is_real_dir(path)

    def attempt(self, path: Path) -> None:
        scratch = Path(tempfile.mkdtemp(prefix=_SCRATCH_PREFIX))
        try:
            self._tools.mirror(scratch, path)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)


def _clear_readonly(func, path, _exc) -> None:
    """rmtree error hook: drop the read-only bit and retry once."""
    with suppress(OSError):
        os.chmod(path, stat.S_IWRITE)
        func(path)


def _remove_link(target: str) -> None:
    """Remove a link itself, never its target."""
    try:
        os.remove(target)
    except (IsADirectoryError, PermissionError):
        # directory links and junctions on Windows
        os.rmdir(target)


class LongPathDelete(RemovalStrategy):
    """Direct recursive delete through the extended-length path form."""

    @property
    def label(self) -> str:
        return "Long-path delete"

    def attempt(self, path: Path) -> None:
        target = long_path(path)
        if _is_real_dir(path):
            if sys.version_info >= (3, 12):
                shutil.rmtree(target, onexc=_clear_readonly)
            else:
                shutil.rmtree(target, onerror=_clear_readonly)
            return
        if is_link(path):
            _remove_link(target)
            return
        with suppress(OSError):
            os.chmod(target, stat.S_IWRITE)
        os.remove(target)


class CommandLineDelete(RemovalStrategy):
    def __init__(self, tools: ToolRunner) -> None:
        self._tools = tools

    @property
    def label(self) -> str:
        return "Command-line delete"

    def attempt(self, path: Path) -> None:
        self._tools.remove_with_shell(Path(long_path(path)), is_dir=path.is_dir(), recursive=_is_real_dir(path))


def default_strategies(tools: ToolRunner) -> list[RemovalStrategy]:
    """Ownership, permissions, mirror-empty, long-path delete, command line."""
    return [
        TakeOwnership(tools),
        GrantFullControl(tools),
        MirrorEmpty(tools),
        LongPathDelete(),
        CommandLineDelete(tools),
    ]


class LockedResourceRemover:
    """Deletes one file-system object, escalating through the strategy chain."""

    def __init__(self, ctx: CleanupContext, strategies: list[RemovalStrategy] | None = None) -> None:
        self._ctx = ctx
        self.strategies = strategies if strategies is not None else default_strategies(ctx.tools)

    def remove(self, path: Path | str) -> bool:
        """Remove *path*; returns True if it is gone afterwards.

        A path that does not exist counts as removed.  In dry-run mode the
        intended deletion is logged and nothing is touched.
        """
        path = Path(path)
        if not path_exists(path):
            self._ctx.log(f"Skipped {path} (not found)", LogLevel.VERBOSE)
            return True

        if self._ctx.dry_run:
            self._ctx.log(f"DryRun: Would delete {path}", LogLevel.VERBOSE)
            return False

        for strategy in self.strategies:
            if not path_exists(path):
                break
            if not strategy.applies_to(path):
                continue
            self._ctx.log(f"{strategy.label}: {path}", LogLevel.VERBOSE)
            try:
                strategy.attempt(path)
            except (OSError, ToolError) as exc:
                self._ctx.log(f"{strategy.label} failed for {path}: {exc}", LogLevel.VERBOSE)

        if path_exists(path):
            self._ctx.log(f"Could not delete {path}", LogLevel.WARNING)
            return False
        self._ctx.log(f"Deleted {path}", LogLevel.VERBOSE)
        return True


class DirectoryContentClearer:
    """Removes every immediate child of a directory, keeping the directory."""

    def __init__(self, ctx: CleanupContext, remover: LockedResourceRemover | None = None) -> None:
        self._ctx = ctx
        self.remover = remover or LockedResourceRemover(ctx)

    def clear(self, directory: Path | str) -> int:
        """Clear *directory*; returns how many children are gone afterwards."""
        directory = Path(directory)
        if not directory.is_dir():
            self._ctx.log(f"{directory} not found, nothing to clear", LogLevel.SUBSTEP)
            return 0

        try:
            children = sorted(directory.iterdir())
        except OSError as exc:
            self._ctx.log(f"Cannot list {directory}: {exc}", LogLevel.WARNING)
            return 0

        self._ctx.log(f"Clearing {len(children)} item(s) in {directory}", LogLevel.SUBSTEP)
        removed = 0
        for child in children:
            if self.remover.remove(child):
                removed += 1
        return removed
