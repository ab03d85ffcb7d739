"""Orchestration context threaded through every component."""

from __future__ import annotations

from dataclasses import dataclass, field

from winsweep.core.logger import LogLevel, LogSink
from winsweep.core.prompt import Prompter
from winsweep.core.tools import ToolRunner
from winsweep.models.options import CleanupOptions


@dataclass
class CleanupContext:
    """Per-run state: options, log sink, tool runner, prompter, declined flags.

    ``declined`` maps an optional action's option name to whether the
    operator declined it at the pre-flight prompt.
    """

    options: CleanupOptions
    sink: LogSink
    tools: ToolRunner
    prompter: Prompter
    declined: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def create(cls, options: CleanupOptions, sink: LogSink, prompter: Prompter) -> CleanupContext:
        """Build a context whose tool runner honours ``options.dry_run``."""
        return cls(
            options=options,
            sink=sink,
            tools=ToolRunner(sink, dry_run=options.dry_run),
            prompter=prompter,
        )

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        self.sink.log(message, level)

    def accept(self, option: str) -> None:
        """Enable an optional action for this run and clear its declined flag."""
        self.options = self.options.with_enabled(option)
        self.declined[option] = False

    def decline(self, option: str) -> None:
        self.declined[option] = True

    def is_declined(self, option: str) -> bool:
        return self.declined.get(option, False)
