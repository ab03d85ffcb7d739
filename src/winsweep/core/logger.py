"""Run log: timestamped, leveled entries written to a file and the console.

Every entry is appended to the run's log file.  Console output is filtered
by a verbosity threshold: each level has a rank (Step/Info/Warning/Error 1,
Substep 2, Verbose 3) and an entry is echoed iff its rank is within the
threshold.  Warnings and errors are echoed even when the console is off.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Protocol

import click

log = logging.getLogger(__name__)

_STEP = 25
_SUBSTEP = 22
_VERBOSE = 15

logging.addLevelName(_STEP, "STEP")
logging.addLevelName(_SUBSTEP, "SUBSTEP")
logging.addLevelName(_VERBOSE, "VERBOSE")

_RUN_LOGGER_NAME = "winsweep.run"
_FILE_FORMAT = "[%(asctime)s][%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LoggerError(Exception):
    """Raised when the log directory or file cannot be created."""


class ConsoleLevel(IntEnum):
    """Console verbosity threshold."""

    OFF = 0
    STEPS = 1
    SUBSTEPS = 2
    VERBOSE = 3


class LogLevel(Enum):
    """Severity of a run log entry, valued by its ``logging`` level number."""

    STEP = _STEP
    SUBSTEP = _SUBSTEP
    VERBOSE = _VERBOSE
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    @property
    def rank(self) -> int:
        """Console rank compared against the ``ConsoleLevel`` threshold."""
        match self:
            case LogLevel.SUBSTEP:
                return 2
            case LogLevel.VERBOSE:
                return 3
            case _:
                return 1


_ALWAYS_SHOWN = frozenset({LogLevel.WARNING, LogLevel.ERROR})

_STYLES: dict[LogLevel, dict] = {
    LogLevel.STEP: {"fg": "cyan", "bold": True},
    LogLevel.SUBSTEP: {"fg": "blue"},
    LogLevel.VERBOSE: {"fg": "bright_black"},
    LogLevel.WARNING: {"fg": "yellow"},
    LogLevel.ERROR: {"fg": "red", "bold": True},
}


def is_visible(level: LogLevel, threshold: ConsoleLevel | int) -> bool:
    """Whether an entry at *level* is echoed for a console *threshold*."""
    return level in _ALWAYS_SHOWN or level.rank <= int(threshold)


class LogSink(Protocol):
    """Anything that accepts run log entries."""

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None: ...


class _ConsoleHandler(logging.Handler):
    """Echo visible records through click, coloured by level."""

    def __init__(self, threshold: ConsoleLevel) -> None:
        super().__init__()
        self.threshold = threshold
        self.addFilter(self._visible)

    def _visible(self, record: logging.LogRecord) -> bool:
        return is_visible(LogLevel(record.levelno), self.threshold)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = LogLevel(record.levelno)
            text = self.format(record)
            if level is LogLevel.STEP:
                text = f"==> {text}"
            elif level in _ALWAYS_SHOWN:
                text = f"{level.name}: {text}"
            click.echo(click.style(text, **_STYLES.get(level, {})), err=level in _ALWAYS_SHOWN)
        except Exception:
            self.handleError(record)


class RunLogger:
    """Process-wide run log.

    Only one run log is active at a time: constructing a new instance
    detaches the handlers of the previous one.
    """

    def __init__(self, console_level: ConsoleLevel = ConsoleLevel.STEPS) -> None:
        self._logger = logging.getLogger(_RUN_LOGGER_NAME)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._detach_handlers()
        self._console = _ConsoleHandler(console_level)
        self._logger.addHandler(self._console)
        self._file_handler: logging.FileHandler | None = None
        self.path: Path | None = None

    @property
    def console_level(self) -> ConsoleLevel:
        return self._console.threshold

    def initialize(self, directory: Path | str) -> Path:
        """Create *directory* if needed and open a fresh timestamped log file.

        Raises:
            LoggerError: If the directory or the file cannot be created.
        """
        directory = Path(directory)
        path = directory / f"winsweep_{datetime.now():%Y%m%d_%H%M%S}.log"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        except OSError as exc:
            raise LoggerError(f"Cannot create log file in {directory}: {exc}") from exc

        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
        if self._file_handler is not None:
            self._remove_handler(self._file_handler)
        self._logger.addHandler(handler)
        self._file_handler = handler
        self.path = path
        log.debug("Run log opened at %s", path)
        return path

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        """Append an entry to the log file and echo it if visible.

        A failing file handler reports through ``logging``'s error handler
        and does not prevent the console attempt.
        """
        self._logger.log(level.value, message)

    def close(self) -> None:
        """Detach and close every handler of the run log."""
        self._detach_handlers()
        self._file_handler = None

    def _remove_handler(self, handler: logging.Handler) -> None:
        self._logger.removeHandler(handler)
        handler.close()

    def _detach_handlers(self) -> None:
        for handler in list(self._logger.handlers):
            self._remove_handler(handler)
