"""Implementation for the ``warden doctor`` command."""

from __future__ import annotations

import sys
from pathlib import Path

from ..checks import CheckContext, CheckRunner, Report, workspace_checks
from ..fleet.collaborators import SessionManager
from ..io import ERROR_PREFIX, SUCCESS_PREFIX, WARNING_PREFIX, bold, say, say_styled
from ..workspace import resolve_workspace_root_or_die


def build_runner(sessions: SessionManager | None = None) -> CheckRunner:
    runner = CheckRunner()
    runner.register_all(*workspace_checks(sessions))
    return runner


def run_checks(
    root: Path,
    *,
    fix: bool,
    verbose: bool = False,
    no_start: bool = False,
    sessions: SessionManager | None = None,
    indent: int = 0,
) -> Report:
    """Run the built-in checks against a workspace, streaming progress."""
    ctx = CheckContext(workspace_root=root, verbose=verbose, no_start=no_start)
    runner = build_runner(sessions)
    if fix:
        return runner.fix_streaming(ctx, sys.stdout, indent)
    return runner.run_streaming(ctx, sys.stdout, indent)


def summary_parts(report: Report) -> list[str]:
    summary = report.summary
    parts = [f"{summary.total} checks", f"{summary.ok} passed"]
    if summary.fixed:
        parts.append(f"{summary.fixed} fixed")
    if summary.warnings:
        parts.append(f"{summary.warnings} warnings")
    if summary.errors:
        parts.append(f"{summary.errors} errors")
    return parts


def check_workspace(args: object) -> None:
    """Check workspace health and optionally repair what can be fixed."""
    fix = bool(getattr(args, "fix", False))
    verbose = bool(getattr(args, "verbose", False))
    no_start = bool(getattr(args, "no_start", False))
    root = resolve_workspace_root_or_die()

    say_styled(bold("warden doctor"), f" {root}")
    report = run_checks(root, fix=fix, verbose=verbose, no_start=no_start)
    say("")
    if report.has_errors():
        prefix = ERROR_PREFIX
    elif report.summary.warnings:
        prefix = WARNING_PREFIX
    else:
        prefix = SUCCESS_PREFIX
    say_styled(prefix, " ", ", ".join(summary_parts(report)))
