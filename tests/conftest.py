"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from types import SimpleNamespace
from typing import Callable

import pytest

from winsweep.actions.base import OptionalAction
from winsweep.core.logger import LogLevel
from winsweep.core.prompt import AutoPrompter
from winsweep.models.context import CleanupContext
from winsweep.models.file_entry import FileEntry
from winsweep.models.options import CleanupOptions

GIB = 1024**3


class RecordingSink:
    """Log sink that keeps every entry in memory."""

    def __init__(self) -> None:
        self.entries: list[tuple[LogLevel, str]] = []

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        self.entries.append((level, message))

    def messages(self, level: LogLevel | None = None) -> list[str]:
        return [m for lvl, m in self.entries if level is None or lvl is level]

    def contains(self, text: str, level: LogLevel | None = None) -> bool:
        return any(text in m for m in self.messages(level))


class SubprocessRecorder:
    """Stand-in for subprocess.run that records argv lists.

    ``returncodes`` maps an executable name to its exit code (default 0);
    ``side_effects`` maps it to a callable run with the argv first.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.returncodes: dict[str, int] = {}
        self.side_effects: dict[str, Callable[[list[str]], None]] = {}

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        exe = args[0]
        if exe in self.side_effects:
            self.side_effects[exe](args)
        return subprocess.CompletedProcess(args=args, returncode=self.returncodes.get(exe, 0), stdout="", stderr="")

    @property
    def executables(self) -> list[str]:
        return [call[0] for call in self.calls]


class ScriptedPrompter:
    """Answers prompts from a list, recording each question."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answers.pop(0) if self.answers else False


class FakeDisk:
    """disk_usage stand-in returning (free, total) readings in order; the last one repeats."""

    def __init__(self, *readings: tuple[int, int]) -> None:
        self.readings = list(readings)
        self.queries: list[str] = []

    def __call__(self, mountpoint: str):
        self.queries.append(mountpoint)
        free, total = self.readings.pop(0) if len(self.readings) > 1 else self.readings[0]
        return SimpleNamespace(free=free, total=total, used=total - free)


class FakeOptionalAction(OptionalAction):
    """Optional action with canned candidates that counts executions."""

    def __init__(self, option: str = "dehydrate_onedrive", candidates: list[FileEntry] | None = None) -> None:
        self._option = option
        self.candidates = candidates or []
        self.executed = 0
        self.scans = 0

    @property
    def id(self) -> str:
        return f"fake_{self._option}"

    @property
    def name(self) -> str:
        return f"Fake {self._option}"

    @property
    def description(self) -> str:
        return "An optional action for testing"

    @property
    def option(self) -> str:
        return self._option

    @property
    def question(self) -> str:
        return f"Run {self._option}?"

    def find_candidates(self, min_bytes: int = 0) -> list[FileEntry]:
        self.scans += 1
        return [c for c in self.candidates if c.size_bytes > min_bytes]

    def execute(self, ctx: CleanupContext) -> None:
        self.executed += 1


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fake_subprocess(monkeypatch) -> SubprocessRecorder:
    """Replace subprocess.run for the tool runner."""
    recorder = SubprocessRecorder()
    monkeypatch.setattr("winsweep.core.tools.subprocess.run", recorder)
    return recorder


@pytest.fixture
def make_ctx(sink, fake_subprocess, tmp_path):
    """Build a CleanupContext; keyword arguments override CleanupOptions fields."""

    def _make(prompter=None, **overrides) -> CleanupContext:
        overrides.setdefault("log_directory", tmp_path / "logs")
        options = CleanupOptions(**overrides)
        return CleanupContext.create(options, sink, prompter or AutoPrompter(answer=False))

    return _make


@pytest.fixture
def windows_env(tmp_path, monkeypatch) -> Path:
    """A Windows-like drive under tmp_path wired up through environment variables.

    Layout: <drive>/Windows/Temp, <drive>/Users/operator (current user)
    with AppData/Local/Temp as TEMP.
    """
    drive = tmp_path / "C"
    (drive / "Windows" / "Temp").mkdir(parents=True)
    temp = drive / "Users" / "operator" / "AppData" / "Local" / "Temp"
    temp.mkdir(parents=True)
    monkeypatch.setenv("SystemDrive", str(drive))
    monkeypatch.setenv("SystemRoot", str(drive / "Windows"))
    monkeypatch.setenv("TEMP", str(temp))
    monkeypatch.setenv("USERNAME", "operator")
    return drive
