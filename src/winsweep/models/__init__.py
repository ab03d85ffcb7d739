"""winsweep data models."""

from winsweep.models.context import CleanupContext
from winsweep.models.file_entry import FileEntry
from winsweep.models.options import CleanupOptions
from winsweep.models.snapshot import FreeSpaceSnapshot, RunSummary, percent_free
from winsweep.models.step import CleanupStep

__all__ = [
    "CleanupContext",
    "CleanupOptions",
    "CleanupStep",
    "FileEntry",
    "FreeSpaceSnapshot",
    "RunSummary",
    "percent_free",
]
