"""Action to empty the recycle bin."""

from __future__ import annotations

from winsweep.actions.base import CleanupAction
from winsweep.models.context import CleanupContext


class RecycleBinAction(CleanupAction):
    """Empties the recycle bin on the target drive for all users."""

    @property
    def id(self) -> str:
        return "recycle_bin"

    @property
    def name(self) -> str:
        return "Empty recycle bin"

    @property
    def description(self) -> str:
        return "Permanently deletes files in the recycle bin. These files were already deleted by their owners."

    @property
    def option(self) -> str:
        return "empty_recycle_bin"

    def execute(self, ctx: CleanupContext) -> None:
        ctx.tools.empty_recycle_bin(ctx.options.drive_letter)
