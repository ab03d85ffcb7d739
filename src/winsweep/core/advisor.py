"""Free-space measurement and the low-space escalation prompts.

Before cleanup, large OneDrive folders and page files are offered to the
operator.  After cleanup, if the drive is still below
``LOW_SPACE_PERCENT`` free, every optional action the operator declined
is offered once more; accepting it runs the action right away.

The thresholds below are fixed policy.  They are the extension point if
they ever need to become operator configurable.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import psutil

from winsweep.actions import bind_step
from winsweep.actions.base import OptionalAction
from winsweep.core.logger import LogLevel
from winsweep.core.runner import StepRunner
from winsweep.models.context import CleanupContext
from winsweep.models.snapshot import FreeSpaceSnapshot
from winsweep.utils import bytes_to_human

log = logging.getLogger(__name__)

# Size above which a OneDrive folder or page file is worth prompting about.
LARGE_RESOURCE_BYTES = 10 * 1024**3

# Free-space percentage below which escalation and diagnostics kick in.
LOW_SPACE_PERCENT = 10.0

# (mountpoint) -> object with .free and .total in bytes, like psutil.disk_usage
DiskUsage = Callable[[str], Any]


class SpaceAdvisor:
    """Takes free-space snapshots and drives the optional-action prompts."""

    def __init__(
        self,
        ctx: CleanupContext,
        optional: list[OptionalAction],
        runner: StepRunner,
        disk_usage: DiskUsage | None = None,
    ) -> None:
        self._ctx = ctx
        self.optional = optional
        self._runner = runner
        self._disk_usage = disk_usage or psutil.disk_usage

    def snapshot(self, drive_letter: str | None = None) -> FreeSpaceSnapshot:
        """Measure free space on *drive_letter* (default: the configured drive)."""
        letter = (drive_letter or self._ctx.options.drive_letter).rstrip(":\\/").upper()
        usage = self._disk_usage(f"{letter}:\\")
        snap = FreeSpaceSnapshot.from_bytes(letter, usage.free, usage.total)
        log.debug("Snapshot %s", snap)
        return snap

    def is_low(self, snap: FreeSpaceSnapshot) -> bool:
        return snap.percent_free < LOW_SPACE_PERCENT

    def preflight(self) -> None:
        """Offer each optional action whose resources exceed the size threshold.

        Accepting enables the action for this run; declining records it so
        the post-cleanup stage can ask again.
        """
        for action in self.optional:
            if self._ctx.options.is_enabled(action.option):
                self._ctx.log(f"{action.name} already enabled", LogLevel.VERBOSE)
                continue
            if self._offer(action):
                self._ctx.accept(action.option)

    def postflight(self, current: FreeSpaceSnapshot) -> FreeSpaceSnapshot:
        """Re-offer declined actions while the drive is below the floor.

        An accepted action runs immediately and a fresh snapshot is taken;
        offering stops once free space is back above the floor. Returns the
        latest snapshot.
        """
        for action in self.optional:
            if not self.is_low(current):
                break
            if not self._ctx.is_declined(action.option):
                continue
            if not self._offer(action):
                continue
            self._ctx.accept(action.option)
            self._runner.run(bind_step(action, self._ctx, enabled=True))
            before = current
            current = self.snapshot(current.drive_letter)
            self._ctx.log(f"{action.name} freed {current.freed_since(before):.2f} GB; now {current}", LogLevel.INFO)
        return current

    def _offer(self, action: OptionalAction) -> bool:
        """Scan for candidates and prompt; False when nothing qualifies or declined.

        Records a decline only when the operator was actually asked.
        """
        candidates = action.find_candidates(LARGE_RESOURCE_BYTES)
        if not candidates:
            self._ctx.log(
                f"{action.name}: nothing larger than {bytes_to_human(LARGE_RESOURCE_BYTES)}",
                LogLevel.VERBOSE,
            )
            return False
        for entry in candidates:
            self._ctx.log(f"Found {entry.path} ({bytes_to_human(entry.size_bytes)})", LogLevel.INFO)
        if self._ctx.prompter.confirm(action.question):
            self._ctx.log(f"{action.name} accepted", LogLevel.INFO)
            return True
        self._ctx.log(f"{action.name} declined", LogLevel.INFO)
        self._ctx.decline(action.option)
        return False
