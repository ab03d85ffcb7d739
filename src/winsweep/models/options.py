"""Run configuration supplied at invocation time."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

from winsweep.core.logger import ConsoleLevel


def default_log_directory() -> Path:
    """Return %ProgramData%\\winsweep\\logs, falling back to the temp dir."""
    base = os.environ.get("ProgramData") or os.environ.get("TEMP") or "."
    return Path(base) / "winsweep" / "logs"


@dataclass(frozen=True, slots=True)
class CleanupOptions:
    """Step toggles and run switches.

    Boolean fields whose name matches a cleanup action's ``option`` are
    that action's toggle.
    """

    clean_windows_temp: bool = True
    clean_user_temp: bool = True
    clean_all_user_temp: bool = False
    clean_browser_caches: bool = False
    clean_update_cache: bool = False
    empty_recycle_bin: bool = True
    remove_old_profiles: bool = False
    component_cleanup: bool = False
    dehydrate_onedrive: bool = False
    resize_pagefile: bool = False

    drive_letter: str = "C"
    profile_age_days: int = 30
    pagefile_initial_mb: int = 4096
    pagefile_maximum_mb: int = 8192

    console_level: ConsoleLevel = ConsoleLevel.STEPS
    log_directory: Path = field(default_factory=default_log_directory)
    dry_run: bool = False

    def is_enabled(self, option: str) -> bool:
        """Whether the toggle named *option* is on."""
        return bool(getattr(self, option))

    def with_enabled(self, option: str) -> CleanupOptions:
        """Return a copy with the toggle named *option* switched on."""
        if option not in toggle_names():
            raise KeyError(f"Unknown step toggle: {option}")
        return replace(self, **{option: True})


def toggle_names() -> list[str]:
    """Names of the boolean step toggles, in declaration order."""
    return [f.name for f in fields(CleanupOptions) if f.type in ("bool", bool) and f.name != "dry_run"]
