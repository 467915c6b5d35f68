"""Command-line entry point for warden."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Annotated, Optional

import typer

from . import __version__
from . import log as warden_log
from .commands import hooks as hooks_cmd
from .commands.doctor import check_workspace as doctor_cmd
from .commands.patrol import step_drift as step_drift_cmd
from .commands.upgrade import upgrade_workspace as upgrade_cmd

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Supervise a workspace of worker agents: health checks, hooks sync, drift patrol.",
)
patrol_app = typer.Typer(no_args_is_help=True, help="Periodic fleet patrols.")
hooks_app = typer.Typer(no_args_is_help=True, help="Managed settings hooks.")
app.add_typer(patrol_app, name="patrol")
app.add_typer(hooks_app, name="hooks")


def _validate_log_level(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if warden_log.parse_level(value) is None:
        choices = ", ".join(warden_log.LEVEL_NAMES)
        raise typer.BadParameter(f"expected one of: {choices}")
    return value.strip().lower()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"warden {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help="Log verbosity (trace, debug, info, success, warning, error).",
            callback=_validate_log_level,
        ),
    ] = None,
    no_color: Annotated[
        bool, typer.Option("--no-color", help="Disable colorized output.")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    if log_level is not None:
        warden_log.set_level(log_level)
    if no_color:
        warden_log.set_no_color(True)


@patrol_app.command("step-drift")
def patrol_step_drift(
    interval: Annotated[
        Optional[str],
        typer.Argument(help="Seconds between refreshes in --watch mode (default 30)."),
    ] = None,
    agent: Annotated[
        bool, typer.Option("--agent", help="JSON output for daemons and scripts.")
    ] = False,
    nudge: Annotated[bool, typer.Option("--nudge", help="Nudge drifting workers.")] = False,
    threshold: Annotated[
        int, typer.Option("--threshold", help="Drift threshold in minutes.")
    ] = 5,
    watch: Annotated[
        bool, typer.Option("--watch", "-w", help="Live dashboard mode.")
    ] = False,
) -> None:
    """Detect workers that are active but have closed no workflow steps."""
    step_drift_cmd(
        SimpleNamespace(
            interval=interval,
            agent=agent,
            nudge=nudge,
            threshold=threshold,
            watch=watch,
        )
    )


@hooks_app.command("list")
def hooks_list(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
) -> None:
    """Show all managed settings locations and their sync status."""
    hooks_cmd.list_hooks(SimpleNamespace(json=json_output))


@hooks_app.command("sync")
def hooks_sync(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show what would change without writing.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="List every changed target.")
    ] = False,
) -> None:
    """Write the computed hooks into every managed settings file."""
    hooks_cmd.sync_hooks(SimpleNamespace(dry_run=dry_run, verbose=verbose))


@app.command("doctor")
def doctor(
    fix: Annotated[bool, typer.Option("--fix", help="Apply available fixes.")] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show details for passing checks.")
    ] = False,
    no_start: Annotated[
        bool, typer.Option("--no-start", help="Do not start sessions while fixing.")
    ] = False,
) -> None:
    """Check workspace health."""
    doctor_cmd(SimpleNamespace(fix=fix, verbose=verbose, no_start=no_start))


@app.command("upgrade")
def upgrade(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show what would change without applying.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show per-target detail.")
    ] = False,
    no_start: Annotated[
        bool, typer.Option("--no-start", help="Do not start sessions during checks.")
    ] = False,
) -> None:
    """Run post-install reconciliation of the workspace."""
    upgrade_cmd(SimpleNamespace(dry_run=dry_run, verbose=verbose, no_start=no_start))
