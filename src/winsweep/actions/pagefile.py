"""Action to shrink the page file to a fixed size."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import psutil

from winsweep.actions.base import OptionalAction
from winsweep.core.logger import LogLevel
from winsweep.models.context import CleanupContext
from winsweep.models.file_entry import FileEntry
from winsweep.utils import bytes_to_human

log = logging.getLogger(__name__)

_PAGEFILE_NAME = "pagefile.sys"


def pagefile_paths() -> list[Path]:
    """Where a page file may live: the root of every local volume."""
    return [Path(part.mountpoint) / _PAGEFILE_NAME for part in psutil.disk_partitions(all=False)]


class PageFileAction(OptionalAction):
    """Turns off automatic page file management and sets a fixed size."""

    @property
    def id(self) -> str:
        return "pagefile"

    @property
    def name(self) -> str:
        return "Resize page file"

    @property
    def description(self) -> str:
        return (
            "Disables automatic page file management and sets a fixed initial and "
            "maximum size. Takes effect after a restart."
        )

    @property
    def option(self) -> str:
        return "resize_pagefile"

    @property
    def question(self) -> str:
        return "Resize the page file to a fixed size (effective after restart)?"

    def find_candidates(self, min_bytes: int = 0) -> list[FileEntry]:
        candidates: list[FileEntry] = []
        for path in pagefile_paths():
            try:
                size = os.stat(path).st_size
            except OSError:
                continue
            if size > min_bytes:
                candidates.append(FileEntry(path=path, size_bytes=size, description=bytes_to_human(size)))
        return candidates

    def execute(self, ctx: CleanupContext) -> None:
        opts = ctx.options
        pagefile = Path(f"{opts.drive_letter}:\\") / _PAGEFILE_NAME
        ctx.tools.set_automatic_pagefile(False)
        ctx.tools.set_pagefile_size(pagefile, opts.pagefile_initial_mb, opts.pagefile_maximum_mb)
        ctx.log(
            f"Page file set to {opts.pagefile_initial_mb}-{opts.pagefile_maximum_mb} MB; restart to apply",
            LogLevel.INFO,
        )
