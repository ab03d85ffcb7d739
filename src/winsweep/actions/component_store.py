"""Action to purge superseded components from the component store."""

from __future__ import annotations

from winsweep.actions.base import CleanupAction
from winsweep.core.logger import LogLevel
from winsweep.models.context import CleanupContext


class ComponentStoreAction(CleanupAction):
    """Runs DISM StartComponentCleanup; a non-zero exit fails the step."""

    @property
    def id(self) -> str:
        return "component_store"

    @property
    def name(self) -> str:
        return "Component store cleanup"

    @property
    def description(self) -> str:
        return (
            "Removes superseded Windows update components from WinSxS. "
            "Installed updates can no longer be uninstalled afterwards. Can take a long time."
        )

    @property
    def option(self) -> str:
        return "component_cleanup"

    def execute(self, ctx: CleanupContext) -> None:
        ctx.log("Running DISM component cleanup, this can take a while", LogLevel.SUBSTEP)
        ctx.tools.component_cleanup()
