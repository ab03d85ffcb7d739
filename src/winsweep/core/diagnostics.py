"""Disk usage rankings logged when cleanup could not free enough space.

Read-only: nothing here deletes anything.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from winsweep.core.logger import LogLevel, LogSink
from winsweep.models.file_entry import FileEntry
from winsweep.utils import bytes_to_human, dir_size, is_link, profile_dirs, users_root, windows_root

log = logging.getLogger(__name__)

# A Windows folder larger than this gets its biggest subfolders listed.
WINDOWS_ROOT_ALERT_BYTES = 35 * 1024**3

TOP_SUBFOLDER_COUNT = 10


def rank_by_size(paths: list[Path], size_of: Callable[[Path], int]) -> list[FileEntry]:
    """Measure *paths* and return them largest first."""
    entries = [FileEntry(path=p, size_bytes=size_of(p), description=p.name) for p in paths]
    entries.sort(key=lambda e: e.size_bytes, reverse=True)
    return entries


class DiagnosticsCollector:
    """Logs per-profile sizes and, if the Windows folder is huge, its largest subfolders."""

    def __init__(
        self,
        sink: LogSink,
        users: Path | None = None,
        windows: Path | None = None,
        size_of: Callable[[Path], int] = dir_size,
    ) -> None:
        self._sink = sink
        self.users = users or users_root()
        self.windows = windows or windows_root()
        self._size_of = size_of

    def collect(self) -> None:
        self._sink.log("Collecting disk usage diagnostics", LogLevel.STEP)
        self.profile_sizes()
        self.windows_subfolders()

    def profile_sizes(self) -> list[FileEntry]:
        ranked = rank_by_size(profile_dirs(self.users), self._size_of)
        self._sink.log(f"User profile sizes under {self.users}:", LogLevel.INFO)
        for entry in ranked:
            self._sink.log(f"  {entry.description:30s} {bytes_to_human(entry.size_bytes):>10s}", LogLevel.INFO)
        return ranked

    def windows_subfolders(self) -> list[FileEntry]:
        """Largest immediate subfolders of the Windows folder, when it exceeds the alert size."""
        total = self._size_of(self.windows)
        if total <= WINDOWS_ROOT_ALERT_BYTES:
            self._sink.log(f"{self.windows} uses {bytes_to_human(total)}", LogLevel.VERBOSE)
            return []

        try:
            subfolders = [p for p in self.windows.iterdir() if p.is_dir() and not is_link(p)]
        except OSError as exc:
            self._sink.log(f"Cannot list {self.windows}: {exc}", LogLevel.WARNING)
            return []

        top = rank_by_size(subfolders, self._size_of)[:TOP_SUBFOLDER_COUNT]
        self._sink.log(
            f"{self.windows} uses {bytes_to_human(total)}; largest subfolders:",
            LogLevel.INFO,
        )
        for entry in top:
            self._sink.log(f"  {entry.description:30s} {bytes_to_human(entry.size_bytes):>10s}", LogLevel.INFO)
        return top
