"""Action to remove user profiles that have not been used for a while."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from winsweep.actions.base import CleanupAction
from winsweep.core.logger import LogLevel
from winsweep.core.remover import LockedResourceRemover
from winsweep.core.tools import ToolError
from winsweep.models.context import CleanupContext
from winsweep.utils import current_username, profile_dirs

log = logging.getLogger(__name__)

_ONE_DAY = 86400  # seconds

# Profiles that belong to the system and are never removed.
_PROTECTED_PROFILES = frozenset({"public", "default", "administrator", "defaultapppool"})

_PROFILE_HIVE = "NTUSER.DAT"


def stale_profiles(age_days: int, root: Path | None = None, now: float | None = None) -> list[Path]:
    """Profiles whose registry hive was last written more than *age_days* ago.

    Built-in profiles, the current user's profile and folders without a
    hive are never returned.
    """
    cutoff = (now if now is not None else time.time()) - age_days * _ONE_DAY
    current = current_username().lower()
    stale: list[Path] = []
    for profile in profile_dirs(root):
        name = profile.name.lower()
        if name in _PROTECTED_PROFILES or name == current:
            continue
        try:
            last_used = (profile / _PROFILE_HIVE).stat().st_mtime
        except OSError:
            log.debug("No profile hive in %s", profile)
            continue
        if last_used < cutoff:
            stale.append(profile)
    return stale


class StaleProfilesAction(CleanupAction):
    """Deletes the profile record and folder of inactive local profiles."""

    @property
    def id(self) -> str:
        return "stale_profiles"

    @property
    def name(self) -> str:
        return "Remove inactive user profiles"

    @property
    def description(self) -> str:
        return (
            "Deletes user profiles not signed into for the configured number of days, "
            "including their documents. Built-in and current profiles are kept."
        )

    @property
    def option(self) -> str:
        return "remove_old_profiles"

    def execute(self, ctx: CleanupContext) -> None:
        profiles = stale_profiles(ctx.options.profile_age_days)
        if not profiles:
            ctx.log(f"No profiles older than {ctx.options.profile_age_days} days", LogLevel.SUBSTEP)
            return

        remover = LockedResourceRemover(ctx)
        for profile in profiles:
            ctx.log(f"Removing profile {profile.name}", LogLevel.SUBSTEP)
            try:
                ctx.tools.remove_profile_record(profile)
            except ToolError as exc:
                ctx.log(f"Profile record for {profile} not removed: {exc}", LogLevel.WARNING)
            remover.remove(profile)
