"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

log = logging.getLogger(__name__)

_LONG_PATH_PREFIX = "\\\\?\\"
_UNC_LONG_PATH_PREFIX = "\\\\?\\UNC\\"


def system_drive() -> str:
    """Return %SystemDrive%, defaulting to C:."""
    return os.environ.get("SystemDrive", "C:")


def windows_root() -> Path:
    """Return %SystemRoot%, defaulting to C:\\Windows."""
    return Path(os.environ.get("SystemRoot", system_drive() + "\\Windows"))


def users_root() -> Path:
    """Return the directory holding every user profile."""
    return Path(system_drive() + os.sep) / "Users"


def user_temp_dir() -> Path:
    """Return the current user's TEMP folder."""
    return Path(os.environ.get("TEMP") or tempfile.gettempdir())


def current_username() -> str:
    return os.environ.get("USERNAME", "")


def long_path(path: Path | str) -> str:
    """Return *path* in extended-length form on Windows.

    The ``\\\\?\\`` prefix lifts the MAX_PATH limit for Win32 file APIs.
    Other platforms get the absolute path unchanged.
    """
    text = os.path.abspath(str(path))
    if os.name != "nt" or text.startswith(_LONG_PATH_PREFIX):
        return text
    if text.startswith("\\\\"):
        return _UNC_LONG_PATH_PREFIX + text[2:]
    return _LONG_PATH_PREFIX + text


def path_exists(path: Path | str) -> bool:
    """Existence check that also sees dangling links."""
    return os.path.lexists(path)


# Reparse tags of NTFS symlinks and junctions (mount points). The ``stat``
# module only exposes IO_REPARSE_TAG_* on Windows builds, so the values
# (identical to stat.IO_REPARSE_TAG_SYMLINK / IO_REPARSE_TAG_MOUNT_POINT)
# are spelled out to keep this module importable everywhere.
_IO_REPARSE_TAG_SYMLINK = 0xA000000C
_IO_REPARSE_TAG_MOUNT_POINT = 0xA0000003
_LINK_REPARSE_TAGS = frozenset({_IO_REPARSE_TAG_SYMLINK, _IO_REPARSE_TAG_MOUNT_POINT})


def is_link(path: Path | str) -> bool:
    """Whether *path* is a symlink or an NTFS junction.

    ``Path.is_symlink`` does not report junctions on Windows; their target
    lies outside the tree and must never be recursed into.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return False
    return stat.S_ISLNK(st.st_mode) or getattr(st, "st_reparse_tag", 0) in _LINK_REPARSE_TAGS


def dir_info(path: Path | str) -> tuple[int, int]:
    """Calculate total size and file count of a directory tree.

    Only regular files are counted; directories themselves add nothing.
    Links are not followed and unreadable entries are skipped.

    Returns:
        (total_bytes, file_count) tuple.
    """
    total = 0
    count = 0
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                            count += 1
                        elif entry.is_dir(follow_symlinks=False) and not is_link(entry.path):
                            stack.append(entry.path)
                    except OSError:
                        pass
        except OSError:
            log.debug("Cannot read %s", current)
    return total, count


def dir_size(path: Path | str) -> int:
    """Calculate total size of a directory tree."""
    return dir_info(path)[0]


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"


# Junction aliases that point at other profiles.
_PROFILE_ALIASES = frozenset({"all users", "default user"})


def profile_dirs(root: Path | None = None) -> list[Path]:
    """Return every profile directory under the users root, sorted by name."""
    root = root or users_root()
    try:
        entries = sorted(root.iterdir())
    except OSError:
        log.debug("Cannot read users root %s", root)
        return []
    return [
        p for p in entries
        if p.is_dir() and not is_link(p) and p.name.lower() not in _PROFILE_ALIASES
    ]
