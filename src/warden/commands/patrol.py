"""Implementation for the ``warden patrol step-drift`` command."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path

from .. import log as warden_log
from ..fleet import render
from ..fleet.collaborators import (
    BeadsTaskTracker,
    DoltBranchStore,
    GtFleetDirectory,
    TmuxSessionManager,
)
from ..fleet.drift import DEFAULT_THRESHOLD_MINUTES, DriftMonitor
from ..fleet.watch import CLEAR_SCREEN, DEFAULT_INTERVAL_SECONDS, watch_loop
from ..io import die, say
from ..workspace import resolve_workspace_root_or_die


@dataclass(frozen=True)
class DriftOptions:
    """Options for one step-drift invocation, fixed at startup."""

    threshold_minutes: int = DEFAULT_THRESHOLD_MINUTES
    nudge: bool = False
    agent: bool = False
    watch: bool = False
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS


def parse_interval(raw: object) -> int:
    """Parse the watch interval, falling back to the default.

    Example:
        >>> parse_interval("10")
        10
        >>> parse_interval("-3"), parse_interval("soon"), parse_interval(None)
        (30, 30, 30)
    """
    if raw is None:
        return DEFAULT_INTERVAL_SECONDS
    try:
        value = int(str(raw).strip())
    except ValueError:
        return DEFAULT_INTERVAL_SECONDS
    return value if value > 0 else DEFAULT_INTERVAL_SECONDS


def drift_options(args: object) -> DriftOptions:
    threshold = getattr(args, "threshold", DEFAULT_THRESHOLD_MINUTES)
    if threshold is None:
        threshold = DEFAULT_THRESHOLD_MINUTES
    if int(threshold) < 0:
        die("--threshold must not be negative")
    return DriftOptions(
        threshold_minutes=int(threshold),
        nudge=bool(getattr(args, "nudge", False)),
        agent=bool(getattr(args, "agent", False)),
        watch=bool(getattr(args, "watch", False)),
        interval_seconds=parse_interval(getattr(args, "interval", None)),
    )


def build_monitor(root: Path) -> DriftMonitor:
    """Wire the drift monitor to the subprocess-backed collaborators."""
    return DriftMonitor(
        fleet=GtFleetDirectory(),
        sessions=TmuxSessionManager(),
        branches=DoltBranchStore(root),
        tracker=BeadsTaskTracker(cwd=root),
    )


def step_drift(args: object) -> None:
    """Report workers that have run past the threshold without closing a step."""
    options = drift_options(args)
    root = resolve_workspace_root_or_die()
    monitor = build_monitor(root)
    console = warden_log.console()

    if options.watch:

        def tick() -> None:
            results = monitor.cycle(options.threshold_minutes, nudge=options.nudge)
            console.file.write(CLEAR_SCREEN)
            stamp = dt.datetime.now().strftime("%H:%M:%S")
            for line in render.header_lines(stamp):
                console.print(line)
            render.render_pretty(results, console, peek=monitor.peek)

        try:
            watch_loop(tick, options.interval_seconds)
        except KeyboardInterrupt:
            return
        return

    results = monitor.cycle(options.threshold_minutes, nudge=options.nudge)
    if options.agent:
        say(render.render_json(results))
        return
    for line in render.header_lines():
        console.print(line)
    render.render_pretty(results, console, peek=monitor.peek)
