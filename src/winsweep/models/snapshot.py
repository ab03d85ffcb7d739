"""Free-space snapshot dataclass."""

from __future__ import annotations

from dataclasses import dataclass

_GIB = 1024**3


def percent_free(free: float, total: float) -> float:
    """Free space as a percentage rounded to 2 places; 0 for an empty volume."""
    if total <= 0:
        return 0.0
    return round(free / total * 100, 2)


@dataclass(frozen=True, slots=True)
class FreeSpaceSnapshot:
    """Free space on one volume at the moment of capture."""

    drive_letter: str
    free_gb: float
    total_gb: float
    percent_free: float

    @classmethod
    def from_bytes(cls, drive_letter: str, free_bytes: int, total_bytes: int) -> FreeSpaceSnapshot:
        return cls(
            drive_letter=drive_letter,
            free_gb=round(free_bytes / _GIB, 2),
            total_gb=round(total_bytes / _GIB, 2),
            percent_free=percent_free(free_bytes, total_bytes),
        )

    def freed_since(self, earlier: FreeSpaceSnapshot) -> float:
        """GB freed between *earlier* and this snapshot (negative if space shrank)."""
        return round(self.free_gb - earlier.free_gb, 2)

    def __str__(self) -> str:
        return (
            f"{self.drive_letter}: {self.free_gb:.2f} GB free of "
            f"{self.total_gb:.2f} GB ({self.percent_free:.2f}%)"
        )


@dataclass(slots=True)
class RunSummary:
    """Snapshots taken over one orchestration run."""

    initial: FreeSpaceSnapshot
    post_cleanup: FreeSpaceSnapshot
    final: FreeSpaceSnapshot
    diagnostics_ran: bool = False

    @property
    def freed_gb(self) -> float:
        return self.final.freed_since(self.initial)
