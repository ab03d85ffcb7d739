"""External Windows tool invocation with dry-run support.

Every mutating call goes through :class:`ToolRunner`, which logs a
``DryRun:`` entry instead of launching the tool when dry-run is active.
No timeout is applied: a tool blocks the run until its process exits.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterable

import psutil

from winsweep.core.logger import LogLevel, LogSink

log = logging.getLogger(__name__)

# Well-known SID of the local Administrators group; locale independent.
ADMINISTRATORS_SID = "*S-1-5-32-544"

# robocopy exit codes below 8 mean "copied / extra / mismatched", not failure.
_ROBOCOPY_OK = range(0, 8)

_POWERSHELL = ["powershell.exe", "-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command"]


class ToolError(Exception):
    """Raised when an external tool is missing or reports failure."""


def _ps_quote(value: str | Path) -> str:
    """Quote *value* as a PowerShell single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class ToolRunner:
    """Runs external tools and process primitives on behalf of a cleanup run."""

    def __init__(self, sink: LogSink, dry_run: bool = False) -> None:
        self._sink = sink
        self.dry_run = dry_run

    def run(
        self,
        args: list[str],
        description: str,
        *,
        mutating: bool = True,
        check: bool = True,
        ok_codes: Iterable[int] = (0,),
    ) -> subprocess.CompletedProcess | None:
        """Run *args* and wait for it to exit.

        Returns None without launching anything when the call is mutating and
        dry-run is active.

        Raises:
            ToolError: If the executable is missing, or *check* is set and the
                exit code is not in *ok_codes*.
        """
        if mutating and self.dry_run:
            self._sink.log(f"DryRun: {description}", LogLevel.SUBSTEP)
            return None

        self._sink.log(f"Running: {subprocess.list2cmdline(args)}", LogLevel.VERBOSE)
        try:
            # output is in the OEM code page; undecodable bytes become U+FFFD
            proc = subprocess.run(args, capture_output=True, text=True, errors="replace")
        except FileNotFoundError as exc:
            raise ToolError(f"{args[0]} not found") from exc

        log.debug("%s exited with %d", args[0], proc.returncode)
        if check and proc.returncode not in ok_codes:
            detail = (proc.stderr or proc.stdout or "").strip()
            raise ToolError(f"{description} failed (exit {proc.returncode}): {detail}")
        return proc

    def powershell(self, script: str, description: str, **kwargs) -> subprocess.CompletedProcess | None:
        return self.run([*_POWERSHELL, script], description, **kwargs)

    # ── ownership and permissions ────────────────────────────────────────

    def take_ownership(self, path: Path, recursive: bool = False) -> None:
        args = ["takeown", "/F", str(path)]
        if recursive:
            args += ["/R", "/D", "Y"]
        self.run(args, f"Take ownership of {path}")

    def grant_full_control(self, path: Path, recursive: bool = False) -> None:
        args = ["icacls", str(path), "/grant", f"{ADMINISTRATORS_SID}:F"]
        if recursive:
            args.append("/T")
        args.append("/C")
        self.run(args, f"Grant Administrators full control of {path}")

    def mirror(self, source: Path, target: Path) -> None:
        """Make *target* an exact copy of *source* (robocopy /MIR)."""
        self.run(
            ["robocopy", str(source), str(target), "/MIR", "/XJ", "/R:0", "/W:0", "/NFL", "/NDL", "/NJH", "/NJS", "/NP"],
            f"Mirror {source} onto {target}",
            ok_codes=_ROBOCOPY_OK,
        )

    def remove_with_shell(self, path: Path, is_dir: bool, recursive: bool = True) -> None:
        """Delete through cmd.exe; the exit code of rd/del is not reliable.

        A directory link is removed with a plain ``rd`` so its target is kept.
        """
        if is_dir:
            args = ["cmd", "/c", "rd", *(["/s"] if recursive else []), "/q", str(path)]
        else:
            args = ["cmd", "/c", "del", "/f", "/q", "/a", str(path)]
        self.run(args, f"Delete {path} via command line", check=False)

    # ── system facilities ────────────────────────────────────────────────

    def component_cleanup(self) -> None:
        self.run(
            ["Dism.exe", "/Online", "/Cleanup-Image", "/StartComponentCleanup"],
            "Component store cleanup",
        )

    def empty_recycle_bin(self, drive_letter: str) -> None:
        self.powershell(
            f"Clear-RecycleBin -DriveLetter {drive_letter} -Force -ErrorAction Stop",
            f"Empty recycle bin on {drive_letter}:",
        )

    def stop_service(self, name: str) -> None:
        self.powershell(f"Stop-Service -Name {_ps_quote(name)} -Force -ErrorAction Stop", f"Stop service {name}")

    def start_service(self, name: str) -> None:
        self.powershell(f"Start-Service -Name {_ps_quote(name)} -ErrorAction Stop", f"Start service {name}")

    def dehydrate(self, folder: Path) -> None:
        """Mark every file under *folder* online-only (unpinned)."""
        self.run(["attrib", "+U", "-P", "/S", "/D", str(folder / "*")], f"Dehydrate {folder}")

    def set_automatic_pagefile(self, enabled: bool) -> None:
        value = "$true" if enabled else "$false"
        self.powershell(
            "Get-CimInstance -ClassName Win32_ComputerSystem | "
            f"Set-CimInstance -Property @{{AutomaticManagedPagefile={value}}} -ErrorAction Stop",
            f"Set automatic page file management to {enabled}",
        )

    def set_pagefile_size(self, pagefile: Path, initial_mb: int, maximum_mb: int) -> None:
        name = _ps_quote(pagefile)
        self.powershell(
            f"$s = Get-CimInstance -ClassName Win32_PageFileSetting | Where-Object Name -eq {name}; "
            f"if (-not $s) {{ $s = New-CimInstance -ClassName Win32_PageFileSetting -Property @{{Name={name}}} }}; "
            f"$s | Set-CimInstance -Property @{{InitialSize={initial_mb}; MaximumSize={maximum_mb}}} -ErrorAction Stop",
            f"Set {pagefile} size to {initial_mb}-{maximum_mb} MB",
        )

    def remove_profile_record(self, profile: Path) -> None:
        self.powershell(
            f"Get-CimInstance -ClassName Win32_UserProfile | Where-Object LocalPath -eq {_ps_quote(profile)} | "
            "Remove-CimInstance -ErrorAction Stop",
            f"Remove profile record for {profile}",
        )

    # ── processes ────────────────────────────────────────────────────────

    def find_processes(self, names: Iterable[str]) -> list[psutil.Process]:
        """Running processes whose executable name matches one of *names*."""
        wanted = {n.lower() for n in names}
        found: list[psutil.Process] = []
        for proc in psutil.process_iter(["name"]):
            name = proc.info.get("name") or ""
            if name.lower() in wanted:
                found.append(proc)
        return found

    def terminate_processes(self, names: Iterable[str]) -> int:
        """Terminate matching processes; returns how many were stopped."""
        stopped = 0
        for proc in self.find_processes(names):
            if self.dry_run:
                self._sink.log(f"DryRun: Terminate {proc.info.get('name')} (pid {proc.pid})", LogLevel.SUBSTEP)
                continue
            try:
                proc.terminate()
                proc.wait(timeout=10)
                stopped += 1
                self._sink.log(f"Terminated {proc.info.get('name')} (pid {proc.pid})", LogLevel.VERBOSE)
            except psutil.NoSuchProcess:
                stopped += 1
            except (psutil.AccessDenied, psutil.TimeoutExpired) as exc:
                self._sink.log(f"Could not terminate pid {proc.pid}: {exc}", LogLevel.WARNING)
        return stopped
