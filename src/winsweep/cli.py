"""CLI interface for winsweep."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
import psutil

from winsweep.actions import default_actions
from winsweep.core.logger import ConsoleLevel, LoggerError, RunLogger
from winsweep.core.orchestrator import CleanupOrchestrator
from winsweep.core.prompt import AutoPrompter, ClickPrompter
from winsweep.models.context import CleanupContext
from winsweep.models.options import CleanupOptions, default_log_directory
from winsweep.models.snapshot import FreeSpaceSnapshot


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _flag(option: str) -> str:
    return option.replace("_", "-")


def _step_toggles(func):
    """Add one --<toggle>/--no-<toggle> flag per cleanup action."""
    defaults = CleanupOptions()
    for action in reversed(default_actions()):
        flag = _flag(action.option)
        func = click.option(
            f"--{flag}/--no-{flag}",
            action.option,
            default=defaults.is_enabled(action.option),
            show_default=True,
            help=action.name,
        )(func)
    return func


def _normalize_drive(drive: str) -> str:
    letter = drive.rstrip(":\\/").upper()
    if len(letter) != 1 or not letter.isalpha():
        raise click.BadParameter(f"'{drive}' is not a drive letter", param_hint="--drive")
    return letter


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase developer logging (-v info, -vv debug)")
def main(verbose: int) -> None:
    """winsweep — disk-space reclamation for Windows endpoints."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool) -> None:
    """List cleanup steps in execution order."""
    defaults = CleanupOptions()
    actions = default_actions()

    if as_json:
        data = [
            {
                "id": a.id,
                "name": a.name,
                "description": a.description,
                "option": a.option,
                "enabled_by_default": defaults.is_enabled(a.option),
                "optional": a.optional,
            }
            for a in actions
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for index, action in enumerate(actions, 1):
        state = click.style("on ", fg="green") if defaults.is_enabled(action.option) else click.style("off", fg="bright_black")
        optional_tag = click.style(" [prompted when space is low]", fg="yellow") if action.optional else ""
        click.echo(f"  {index:2d}. [{state}] {click.style(action.name, fg='cyan', bold=True)}{optional_tag}")
        click.echo(f"        --{_flag(action.option)}  {action.description}")


# ── space ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--drive", "-d", default="C", show_default=True, help="Drive letter to measure")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def space(drive: str, as_json: bool) -> None:
    """Show free space on a drive."""
    letter = _normalize_drive(drive)
    try:
        usage = psutil.disk_usage(f"{letter}:\\")
    except OSError as exc:
        raise click.ClickException(f"Cannot query drive {letter}: {exc}")
    snap = FreeSpaceSnapshot.from_bytes(letter, usage.free, usage.total)

    if as_json:
        click.echo(json.dumps(
            {
                "drive_letter": snap.drive_letter,
                "free_gb": snap.free_gb,
                "total_gb": snap.total_gb,
                "percent_free": snap.percent_free,
            },
            indent=2,
        ))
        return

    colour = "green" if snap.percent_free >= 10 else "red"
    click.echo(f"  {letter}: {click.style(f'{snap.percent_free:.2f}% free', fg=colour, bold=True)} "
               f"({snap.free_gb:.2f} GB of {snap.total_gb:.2f} GB)")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_step_toggles
@click.option(
    "--console-level",
    type=click.Choice([level.name.lower() for level in ConsoleLevel]),
    default="steps",
    show_default=True,
    help="How much of the run log to echo (warnings and errors are always shown)",
)
@click.option("--log-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory for the run log [default: %ProgramData%\\winsweep\\logs]")
@click.option("--dry-run", is_flag=True, help="Log what would be done without changing anything")
@click.option("--drive", "-d", default="C", show_default=True, help="Drive to reclaim space on")
@click.option("--profile-age-days", type=click.IntRange(min=1), default=30, show_default=True,
              help="Inactivity before a profile counts as stale")
@click.option("--pagefile-initial-mb", type=click.IntRange(min=16), default=4096, show_default=True)
@click.option("--pagefile-maximum-mb", type=click.IntRange(min=16), default=8192, show_default=True)
@click.option("--interactive/--no-interactive", default=True, show_default=True,
              help="Prompt for optional actions; --no-interactive declines every prompt")
def clean(
    console_level: str,
    log_dir: Path | None,
    dry_run: bool,
    drive: str,
    profile_age_days: int,
    pagefile_initial_mb: int,
    pagefile_maximum_mb: int,
    interactive: bool,
    **toggles: bool,
) -> None:
    """Run the enabled cleanup steps on this machine."""
    if pagefile_maximum_mb < pagefile_initial_mb:
        raise click.BadParameter("must not be smaller than --pagefile-initial-mb", param_hint="--pagefile-maximum-mb")

    options = CleanupOptions(
        **toggles,
        drive_letter=_normalize_drive(drive),
        profile_age_days=profile_age_days,
        pagefile_initial_mb=pagefile_initial_mb,
        pagefile_maximum_mb=pagefile_maximum_mb,
        console_level=ConsoleLevel[console_level.upper()],
        log_directory=log_dir or default_log_directory(),
        dry_run=dry_run,
    )

    run_log = RunLogger(options.console_level)
    try:
        log_path = run_log.initialize(options.log_directory)
    except LoggerError as exc:
        run_log.close()
        raise click.ClickException(str(exc))

    prompter = ClickPrompter() if interactive else AutoPrompter(answer=False)
    ctx = CleanupContext.create(options, run_log, prompter)
    try:
        CleanupOrchestrator(ctx).run()
    except Exception as exc:
        click.echo(f"Cleanup aborted: {exc}", err=True)
        click.echo(f"See {log_path}", err=True)
        sys.exit(1)
    finally:
        run_log.close()

    click.echo(f"\nLog written to {log_path}")
