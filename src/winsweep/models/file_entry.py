"""Sized file-system entry dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class FileEntry:
    """A file or directory with its measured size.

    Used for optional-action candidates (large OneDrive folders, page
    files) and for diagnostic rankings.
    """

    path: Path
    size_bytes: int
    description: str = ""
