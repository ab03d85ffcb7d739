"""Action to clear web browser caches in every profile."""

from __future__ import annotations

from pathlib import Path

from winsweep.actions.base import ClearDirectoriesAction
from winsweep.core.logger import LogLevel
from winsweep.models.context import CleanupContext
from winsweep.utils import profile_dirs

_BROWSER_PROCESSES = ("chrome.exe", "msedge.exe", "firefox.exe")

# (User Data root relative to AppData\Local, cache folders inside each browser profile)
_CHROMIUM_BROWSERS = (
    (Path("Google", "Chrome", "User Data"), ("Cache", "Code Cache", "GPUCache")),
    (Path("Microsoft", "Edge", "User Data"), ("Cache", "Code Cache", "GPUCache")),
)
_FIREFOX_PROFILES = Path("Mozilla", "Firefox", "Profiles")


def _cache_dirs_for(local_app_data: Path) -> list[Path]:
    dirs: list[Path] = []
    for user_data, cache_names in _CHROMIUM_BROWSERS:
        root = local_app_data / user_data
        if not root.is_dir():
            continue
        for browser_profile in sorted(root.iterdir()):
            for name in cache_names:
                candidate = browser_profile / name
                if candidate.is_dir():
                    dirs.append(candidate)
    firefox = local_app_data / _FIREFOX_PROFILES
    if firefox.is_dir():
        dirs.extend(p / "cache2" for p in sorted(firefox.iterdir()) if (p / "cache2").is_dir())
    return dirs


class BrowserCacheAction(ClearDirectoriesAction):
    """Closes Chrome, Edge and Firefox, then clears their caches for every profile."""

    @property
    def id(self) -> str:
        return "browser_cache"

    @property
    def name(self) -> str:
        return "Clear browser caches"

    @property
    def description(self) -> str:
        return (
            "Closes Chrome, Edge and Firefox and removes their HTTP, code and GPU caches "
            "for every user profile. Open browser windows are lost."
        )

    @property
    def option(self) -> str:
        return "clean_browser_caches"

    def _target_dirs(self) -> list[Path]:
        dirs: list[Path] = []
        for profile in profile_dirs():
            dirs.extend(_cache_dirs_for(profile / "AppData" / "Local"))
        return dirs

    def execute(self, ctx: CleanupContext) -> None:
        stopped = ctx.tools.terminate_processes(_BROWSER_PROCESSES)
        if stopped:
            ctx.log(f"Closed {stopped} browser process(es)", LogLevel.SUBSTEP)
        super().execute(ctx)
