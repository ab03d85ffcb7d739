"""Cleanup orchestration: baseline, pre-flight, steps, post-flight, diagnostics."""

from __future__ import annotations

import logging

from winsweep.actions import build_steps, default_actions, optional_actions
from winsweep.actions.base import CleanupAction
from winsweep.core.advisor import LOW_SPACE_PERCENT, DiskUsage, SpaceAdvisor
from winsweep.core.diagnostics import DiagnosticsCollector
from winsweep.core.logger import LogLevel
from winsweep.core.runner import StepRunner
from winsweep.models.context import CleanupContext
from winsweep.models.snapshot import RunSummary

log = logging.getLogger(__name__)


class CleanupOrchestrator:
    """Runs one cleanup pass on the local machine.

    Any exception raised by an enabled step propagates out of :meth:`run`;
    steps after it do not execute and nothing already done is undone.
    """

    def __init__(
        self,
        ctx: CleanupContext,
        actions: list[CleanupAction] | None = None,
        disk_usage: DiskUsage | None = None,
        diagnostics: DiagnosticsCollector | None = None,
    ) -> None:
        self.ctx = ctx
        self.actions = actions if actions is not None else default_actions()
        self.runner = StepRunner(ctx.sink)
        self.advisor = SpaceAdvisor(ctx, optional_actions(self.actions), self.runner, disk_usage)
        self.diagnostics = diagnostics or DiagnosticsCollector(ctx.sink)

    def run(self) -> RunSummary:
        ctx = self.ctx
        mode = " (dry run, nothing will be changed)" if ctx.dry_run else ""
        ctx.log(f"Disk cleanup started{mode}", LogLevel.STEP)

        initial = self.advisor.snapshot()
        ctx.log(f"Initial free space: {initial}", LogLevel.INFO)

        self.advisor.preflight()

        # Built after pre-flight so accepted optional actions take their place in the sequence.
        self.runner.run_all(build_steps(ctx, self.actions))

        post_cleanup = self.advisor.snapshot()
        ctx.log(
            f"Free space after cleanup: {post_cleanup} (freed {post_cleanup.freed_since(initial):.2f} GB)",
            LogLevel.INFO,
        )

        final = self.advisor.postflight(post_cleanup)
        summary = RunSummary(initial=initial, post_cleanup=post_cleanup, final=final)

        if self.advisor.is_low(final):
            ctx.log(f"Free space still below {LOW_SPACE_PERCENT:g}%", LogLevel.WARNING)
            self.diagnostics.collect()
            summary.diagnostics_ran = True

        ctx.log(f"Disk cleanup finished: freed {summary.freed_gb:.2f} GB, now {final}", LogLevel.STEP)
        return summary

