"""Sequential execution of cleanup steps."""

from __future__ import annotations

import logging
import time

from winsweep.core.logger import LogLevel, LogSink
from winsweep.models.step import CleanupStep
from winsweep.utils import format_elapsed

log = logging.getLogger(__name__)


class StepRunner:
    """Runs one step at a time and records its outcome in the run log.

    A step that raises is logged at Error level and the exception is
    re-raised: a failing step aborts the whole run.
    """

    def __init__(self, sink: LogSink) -> None:
        self._sink = sink
        self.completed: list[str] = []

    def run(self, step: CleanupStep) -> None:
        if not step.enabled:
            self._sink.log(f"Skipping {step.name} (disabled)", LogLevel.SUBSTEP)
            return

        self._sink.log(f"Starting {step.name}", LogLevel.STEP)
        started = time.monotonic()
        try:
            step.action()
        except Exception as exc:
            log.debug("Step '%s' raised", step.name, exc_info=True)
            self._sink.log(f"Failed {step.name}: {exc}", LogLevel.ERROR)
            raise
        self.completed.append(step.name)
        self._sink.log(f"Completed {step.name} in {format_elapsed(time.monotonic() - started)}", LogLevel.STEP)

    def run_all(self, steps: list[CleanupStep]) -> None:
        """Run *steps* in order, stopping at the first failure."""
        for step in steps:
            self.run(step)
