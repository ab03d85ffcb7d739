"""Built-in cleanup actions, in execution order."""

from __future__ import annotations

from functools import partial

from winsweep.actions.base import CleanupAction, OptionalAction
from winsweep.actions.browser_cache import BrowserCacheAction
from winsweep.actions.component_store import ComponentStoreAction
from winsweep.actions.onedrive import OneDriveAction
from winsweep.actions.pagefile import PageFileAction
from winsweep.actions.profiles import StaleProfilesAction
from winsweep.actions.recycle_bin import RecycleBinAction
from winsweep.actions.temp_files import AllUsersTempAction, UserTempAction, WindowsTempAction
from winsweep.actions.update_cache import UpdateCacheAction
from winsweep.models.context import CleanupContext
from winsweep.models.step import CleanupStep


def default_actions() -> list[CleanupAction]:
    """Every built-in action in the fixed order the run executes them."""
    return [
        WindowsTempAction(),
        UserTempAction(),
        AllUsersTempAction(),
        BrowserCacheAction(),
        UpdateCacheAction(),
        RecycleBinAction(),
        StaleProfilesAction(),
        ComponentStoreAction(),
        OneDriveAction(),
        PageFileAction(),
    ]


def optional_actions(actions: list[CleanupAction]) -> list[OptionalAction]:
    return [a for a in actions if isinstance(a, OptionalAction)]


def bind_step(action: CleanupAction, ctx: CleanupContext, enabled: bool | None = None) -> CleanupStep:
    """Bind *action* to *ctx*; enabled state defaults to the action's toggle."""
    if enabled is None:
        enabled = ctx.options.is_enabled(action.option)
    return CleanupStep(name=action.name, enabled=enabled, action=partial(action.execute, ctx))


def build_steps(ctx: CleanupContext, actions: list[CleanupAction] | None = None) -> list[CleanupStep]:
    """Assemble the run's steps from the current options."""
    return [bind_step(action, ctx) for action in (actions if actions is not None else default_actions())]


__all__ = [
    "CleanupAction",
    "OptionalAction",
    "bind_step",
    "build_steps",
    "default_actions",
    "optional_actions",
]
