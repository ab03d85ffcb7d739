"""Tests for external tool invocation."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import psutil
import pytest

from winsweep.core.tools import ADMINISTRATORS_SID, ToolError, ToolRunner


def _done(returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr=stderr)


def _proc(name: str, pid: int) -> MagicMock:
    proc = MagicMock()
    proc.info = {"name": name}
    proc.pid = pid
    return proc


class TestRun:
    def test_success(self, sink):
        tools = ToolRunner(sink)
        with patch("winsweep.core.tools.subprocess.run") as mock_run:
            mock_run.return_value = _done()
            result = tools.run(["takeown", "/F", "x"], "Take ownership of x")

        assert result.returncode == 0
        assert mock_run.call_args[0][0] == ["takeown", "/F", "x"]
        # no timeout: a tool blocks until it exits
        assert "timeout" not in mock_run.call_args.kwargs
        assert mock_run.call_args.kwargs["errors"] == "replace"

    def test_nonzero_exit(self, sink):
        tools = ToolRunner(sink)
        with patch("winsweep.core.tools.subprocess.run") as mock_run:
            mock_run.return_value = _done(1, "access denied")
            with pytest.raises(ToolError, match="exit 1"):
                tools.run(["Dism.exe"], "Component store cleanup")

    def test_nonzero_exit_ignored_without_check(self, sink):
        tools = ToolRunner(sink)
        with patch("winsweep.core.tools.subprocess.run") as mock_run:
            mock_run.return_value = _done(5)
            result = tools.run(["cmd"], "Delete", check=False)
        assert result.returncode == 5

    def test_missing_executable(self, sink):
        tools = ToolRunner(sink)
        with patch("winsweep.core.tools.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("robocopy")
            with pytest.raises(ToolError, match="not found"):
                tools.run(["robocopy"], "Mirror")

    def test_undecodable_output_fails_as_tool_error(self, sink):
        # byte 0x81 is undefined in cp1252 and invalid as a UTF-8 start byte
        script = "import sys; sys.stdout.buffer.write(b'Access denied: \\x81ber.txt'); sys.exit(1)"

        with pytest.raises(ToolError, match=r"exit 1\): Access denied: .ber\.txt"):
            ToolRunner(sink).run([sys.executable, "-c", script], "Take ownership")

    def test_undecodable_output_is_returned(self, sink):
        script = "import sys; sys.stdout.buffer.write(b'\\x81\\x8d\\x9d')"

        result = ToolRunner(sink).run([sys.executable, "-c", script], "List", mutating=False)

        assert result.returncode == 0
        assert len(result.stdout) == 3

    def test_dry_run_skips_mutating_call(self, sink):
        tools = ToolRunner(sink, dry_run=True)
        with patch("winsweep.core.tools.subprocess.run") as mock_run:
            result = tools.run(["Dism.exe"], "Component store cleanup")

        assert result is None
        mock_run.assert_not_called()
        assert sink.contains("DryRun: Component store cleanup")

    def test_dry_run_allows_read_only_call(self, sink):
        tools = ToolRunner(sink, dry_run=True)
        with patch("winsweep.core.tools.subprocess.run") as mock_run:
            mock_run.return_value = _done()
            tools.run(["powershell.exe", "Get-Thing"], "Query", mutating=False)
        mock_run.assert_called_once()


class TestWrappers:
    def test_take_ownership_recursive(self, sink, fake_subprocess):
        ToolRunner(sink).take_ownership(Path("target"), recursive=True)
        assert fake_subprocess.calls == [["takeown", "/F", "target", "/R", "/D", "Y"]]

    def test_grant_full_control_file(self, sink, fake_subprocess):
        ToolRunner(sink).grant_full_control(Path("f.txt"))
        assert fake_subprocess.calls == [["icacls", "f.txt", "/grant", f"{ADMINISTRATORS_SID}:F", "/C"]]

    @pytest.mark.parametrize("code", [0, 1, 3, 7])
    def test_mirror_accepts_robocopy_success_codes(self, sink, fake_subprocess, code):
        fake_subprocess.returncodes["robocopy"] = code
        ToolRunner(sink).mirror(Path("empty"), Path("target"))
        assert fake_subprocess.calls[0][:4] == ["robocopy", "empty", "target", "/MIR"]

    def test_mirror_skips_junctions(self, sink, fake_subprocess):
        ToolRunner(sink).mirror(Path("empty"), Path("target"))
        assert "/XJ" in fake_subprocess.calls[0]

    def test_mirror_failure_code(self, sink, fake_subprocess):
        fake_subprocess.returncodes["robocopy"] = 8
        with pytest.raises(ToolError, match="exit 8"):
            ToolRunner(sink).mirror(Path("empty"), Path("target"))

    def test_component_cleanup_failure_raises(self, sink, fake_subprocess):
        fake_subprocess.returncodes["Dism.exe"] = 87
        with pytest.raises(ToolError, match="Component store cleanup failed"):
            ToolRunner(sink).component_cleanup()

    def test_shell_remove_never_raises(self, sink, fake_subprocess):
        fake_subprocess.returncodes["cmd"] = 2
        ToolRunner(sink).remove_with_shell(Path("dir"), is_dir=True)
        assert fake_subprocess.calls == [["cmd", "/c", "rd", "/s", "/q", "dir"]]

    def test_shell_remove_of_directory_link_is_not_recursive(self, sink, fake_subprocess):
        ToolRunner(sink).remove_with_shell(Path("link"), is_dir=True, recursive=False)
        assert fake_subprocess.calls == [["cmd", "/c", "rd", "/q", "link"]]

    def test_recycle_bin_uses_drive_letter(self, sink, fake_subprocess):
        ToolRunner(sink).empty_recycle_bin("D")
        script = fake_subprocess.calls[0][-1]
        assert fake_subprocess.executables == ["powershell.exe"]
        assert "Clear-RecycleBin -DriveLetter D" in script

    def test_service_name_is_quoted(self, sink, fake_subprocess):
        ToolRunner(sink).stop_service("it's")
        assert "'it''s'" in fake_subprocess.calls[0][-1]


class TestProcesses:
    def test_terminate_matching_processes(self, sink, monkeypatch):
        chrome = _proc("chrome.exe", 10)
        other = _proc("explorer.exe", 11)
        monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: [chrome, other])

        stopped = ToolRunner(sink).terminate_processes(["CHROME.EXE"])

        assert stopped == 1
        chrome.terminate.assert_called_once()
        other.terminate.assert_not_called()

    def test_terminate_dry_run(self, sink, monkeypatch):
        chrome = _proc("chrome.exe", 10)
        monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: [chrome])

        stopped = ToolRunner(sink, dry_run=True).terminate_processes(["chrome.exe"])

        assert stopped == 0
        chrome.terminate.assert_not_called()
        assert sink.contains("DryRun: Terminate chrome.exe")

    def test_access_denied_is_a_warning(self, sink, monkeypatch):
        proc = _proc("msedge.exe", 12)
        proc.terminate.side_effect = psutil.AccessDenied(pid=12)
        monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: [proc])

        assert ToolRunner(sink).terminate_processes(["msedge.exe"]) == 0
        assert any("pid 12" in m for m in sink.messages())

    def test_find_processes_ignores_missing_names(self, sink, monkeypatch):
        nameless = SimpleNamespace(info={"name": None}, pid=1)
        monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: [nameless])
        assert ToolRunner(sink).find_processes(["chrome.exe"]) == []
