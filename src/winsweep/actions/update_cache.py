"""Action to clear the Windows Update download cache."""

from __future__ import annotations

from pathlib import Path

from winsweep.actions.base import ClearDirectoriesAction
from winsweep.core.logger import LogLevel
from winsweep.models.context import CleanupContext
from winsweep.utils import windows_root

_UPDATE_SERVICE = "wuauserv"


class UpdateCacheAction(ClearDirectoriesAction):
    """Stops Windows Update, clears SoftwareDistribution\\Download, restarts it."""

    @property
    def id(self) -> str:
        return "update_cache"

    @property
    def name(self) -> str:
        return "Clear Windows Update cache"

    @property
    def description(self) -> str:
        return (
            "Removes downloaded update packages. Windows Update downloads them again "
            "if they are still needed."
        )

    @property
    def option(self) -> str:
        return "clean_update_cache"

    def _target_dirs(self) -> list[Path]:
        return [windows_root() / "SoftwareDistribution" / "Download"]

    def execute(self, ctx: CleanupContext) -> None:
        ctx.log(f"Stopping {_UPDATE_SERVICE}", LogLevel.SUBSTEP)
        ctx.tools.stop_service(_UPDATE_SERVICE)
        try:
            super().execute(ctx)
        finally:
            ctx.log(f"Starting {_UPDATE_SERVICE}", LogLevel.SUBSTEP)
            ctx.tools.start_service(_UPDATE_SERVICE)
