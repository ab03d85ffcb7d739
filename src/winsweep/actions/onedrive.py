"""Action to dehydrate OneDrive folders to online-only files."""

from __future__ import annotations

import logging
from pathlib import Path

from winsweep.actions.base import OptionalAction
from winsweep.core.logger import LogLevel
from winsweep.models.context import CleanupContext
from winsweep.models.file_entry import FileEntry
from winsweep.utils import bytes_to_human, dir_size, profile_dirs

log = logging.getLogger(__name__)


def onedrive_folders(root: Path | None = None) -> list[Path]:
    """OneDrive sync roots ("OneDrive", "OneDrive - Contoso", ...) in every profile."""
    folders: list[Path] = []
    for profile in profile_dirs(root):
        try:
            children = sorted(profile.iterdir())
        except OSError:
            log.debug("Cannot read profile %s", profile)
            continue
        folders.extend(c for c in children if c.is_dir() and c.name.lower().startswith("onedrive"))
    return folders


class OneDriveAction(OptionalAction):
    """Frees local copies of OneDrive files while keeping them in the cloud."""

    @property
    def id(self) -> str:
        return "onedrive"

    @property
    def name(self) -> str:
        return "Dehydrate OneDrive folders"

    @property
    def description(self) -> str:
        return (
            "Marks every synced OneDrive file as online-only. Files stay available "
            "but are downloaded again when opened."
        )

    @property
    def option(self) -> str:
        return "dehydrate_onedrive"

    @property
    def question(self) -> str:
        return "Dehydrate OneDrive folders to free local space?"

    def find_candidates(self, min_bytes: int = 0) -> list[FileEntry]:
        candidates: list[FileEntry] = []
        for folder in onedrive_folders():
            size = dir_size(folder)
            if size > min_bytes:
                candidates.append(
                    FileEntry(path=folder, size_bytes=size, description=f"{folder.parent.name}: {bytes_to_human(size)}")
                )
        return candidates

    def execute(self, ctx: CleanupContext) -> None:
        folders = onedrive_folders()
        if not folders:
            ctx.log("No OneDrive folders found", LogLevel.SUBSTEP)
            return
        for folder in folders:
            ctx.log(f"Dehydrating {folder}", LogLevel.SUBSTEP)
            ctx.tools.dehydrate(folder)
