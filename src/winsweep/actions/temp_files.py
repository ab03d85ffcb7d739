"""Actions that clear temporary-file folders."""

from __future__ import annotations

from pathlib import Path

from winsweep.actions.base import ClearDirectoriesAction
from winsweep.utils import profile_dirs, user_temp_dir, windows_root


class WindowsTempAction(ClearDirectoriesAction):
    """Clears %SystemRoot%\\Temp."""

    @property
    def id(self) -> str:
        return "windows_temp"

    @property
    def name(self) -> str:
        return "Clear Windows TEMP folder"

    @property
    def description(self) -> str:
        return "Removes everything in the system TEMP folder. Files held open by running services are skipped."

    @property
    def option(self) -> str:
        return "clean_windows_temp"

    def _target_dirs(self) -> list[Path]:
        return [windows_root() / "Temp"]


class UserTempAction(ClearDirectoriesAction):
    """Clears the TEMP folder of the account running the cleanup."""

    @property
    def id(self) -> str:
        return "user_temp"

    @property
    def name(self) -> str:
        return "Clear user TEMP folder"

    @property
    def description(self) -> str:
        return "Removes everything in the current user's TEMP folder."

    @property
    def option(self) -> str:
        return "clean_user_temp"

    def _target_dirs(self) -> list[Path]:
        return [user_temp_dir()]


class AllUsersTempAction(ClearDirectoriesAction):
    """Clears AppData\\Local\\Temp in every profile."""

    @property
    def id(self) -> str:
        return "all_user_temp"

    @property
    def name(self) -> str:
        return "Clear all profiles' TEMP folders"

    @property
    def description(self) -> str:
        return "Removes everything in AppData\\Local\\Temp for every user profile on the machine."

    @property
    def option(self) -> str:
        return "clean_all_user_temp"

    def _target_dirs(self) -> list[Path]:
        return [profile / "AppData" / "Local" / "Temp" for profile in profile_dirs()]
