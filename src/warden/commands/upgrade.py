"""Implementation for the ``warden upgrade`` command.

The upgrade runs five reconciliation steps in a fixed order and reports a
per-step change count. Each step delegates to the component that owns the
state; a step failure is recorded in its details and the run continues.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .. import config, hooks, paths, templates
from .. import log as warden_log
from ..fleet.collaborators import SessionManager
from ..formulas import ArtifactRefresher, FormulaStore
from ..io import (
    ARROW_PREFIX,
    ERROR_PREFIX,
    SUCCESS_PREFIX,
    WARNING_PREFIX,
    bold,
    dim,
    say,
    say_styled,
)
from ..workspace import resolve_workspace_root_or_die
from .doctor import run_checks

STEP_STRUCTURAL = "Structural checks"
STEP_IDENTITY = "CLAUDE.md sync"
STEP_DAEMON = "Daemon config"
STEP_HOOKS = "Hooks sync"
STEP_FORMULAS = "Formulas"
_DETAIL_INDENT = "     "


@dataclass(frozen=True)
class UpgradeOptions:
    dry_run: bool = False
    verbose: bool = False
    no_start: bool = False


@dataclass
class UpgradeStepResult:
    step: str
    changed: int = 0
    skipped: int = 0
    details: list[str] = field(default_factory=list)


_log = warden_log.component("upgrade")


def _step_header(number: int, text: str) -> None:
    say("")
    say_styled("  ", bold(f"{number}."), f" {text}")


def _line(prefix: tuple[str, str], *parts: str | tuple[str, str]) -> None:
    say_styled(_DETAIL_INDENT, prefix, " ", *parts)


def upgrade_structural(
    root: Path, options: UpgradeOptions, *, sessions: SessionManager | None = None
) -> UpgradeStepResult:
    result = UpgradeStepResult(step=STEP_STRUCTURAL)
    _step_header(1, "Running structural checks (doctor --fix)...")
    report = run_checks(
        root,
        fix=not options.dry_run,
        verbose=options.verbose,
        no_start=options.no_start,
        sessions=sessions,
        indent=len(_DETAIL_INDENT),
    )
    result.changed = report.summary.fixed
    if report.has_errors():
        result.details.append(f"{report.summary.errors} error(s) remain")
    if report.summary.warnings:
        result.details.append(f"{report.summary.warnings} warning(s)")
    if result.changed:
        result.details.append(f"{result.changed} fixed")
    return result


def upgrade_identity_doc(root: Path, options: UpgradeOptions) -> UpgradeStepResult:
    result = UpgradeStepResult(step=STEP_IDENTITY)
    _step_header(2, "Syncing CLAUDE.md from template...")
    doc_name = paths.IDENTITY_DOC_FILENAME
    try:
        outcome = templates.sync_identity_doc(root, dry_run=options.dry_run)
    except OSError as exc:
        result.details.append(f"error syncing: {exc}")
        _line(ERROR_PREFIX, f"Could not sync {doc_name}: {exc}")
        return result

    action = outcome.action
    if action is templates.DocAction.UNCHANGED:
        _line(SUCCESS_PREFIX, f"{doc_name} ", dim("up-to-date"))
    elif options.dry_run:
        _line(WARNING_PREFIX, f"{doc_name} ", dim(f"would {action.value[:-1]}"))
    else:
        _line(SUCCESS_PREFIX, f"{doc_name} ", dim(action.value))
    if outcome.link_created:
        label = "would create symlink" if options.dry_run else "symlink created"
        prefix = WARNING_PREFIX if options.dry_run else SUCCESS_PREFIX
        _line(prefix, f"{paths.IDENTITY_LINK_FILENAME} ", dim(label))
    result.changed = outcome.changed
    return result


def upgrade_daemon_config(root: Path, options: UpgradeOptions) -> UpgradeStepResult:
    result = UpgradeStepResult(step=STEP_DAEMON)
    _step_header(3, "Ensuring daemon.json lifecycle defaults...")
    path = paths.daemon_config_path(root)

    if path.exists():
        try:
            config.load_daemon_config(path)
        except config.DaemonConfigError as exc:
            result.details.append(f"invalid config: {exc}")
            _line(WARNING_PREFIX, f"daemon.json exists but invalid: {exc}")
            return result
        _line(SUCCESS_PREFIX, "daemon.json ", dim("present and valid"))
        return result

    if options.dry_run:
        _line(WARNING_PREFIX, "daemon.json ", dim("would create with defaults"))
        result.changed = 1
        return result

    try:
        created = config.ensure_daemon_config(root)
    except OSError as exc:
        result.details.append(f"error creating: {exc}")
        _line(ERROR_PREFIX, f"Could not create daemon.json: {exc}")
        return result
    if created:
        _line(SUCCESS_PREFIX, "daemon.json ", dim("created with defaults"))
        result.changed = 1
    return result


def upgrade_hooks(root: Path, options: UpgradeOptions) -> UpgradeStepResult:
    result = UpgradeStepResult(step=STEP_HOOKS)
    _step_header(4, "Syncing hooks to settings.json...")
    try:
        targets = hooks.discover_targets(root)
    except hooks.DiscoveryError as exc:
        result.details.append(f"discover error: {exc}")
        _line(ERROR_PREFIX, f"Could not discover targets: {exc}")
        return result

    summary = hooks.sync_targets(targets, dry_run=options.dry_run)
    if options.verbose:
        for target, outcome in summary.entries:
            if outcome is hooks.SyncOutcome.UNCHANGED:
                continue
            rel = _relative(root, target.path)
            if options.dry_run:
                _line(WARNING_PREFIX, f"{rel} ", dim(f"(would {outcome.value[:-1]})"))
            else:
                _line(SUCCESS_PREFIX, f"{rel} ", dim(f"({outcome.value})"))
        for failure in summary.failures:
            _line(ERROR_PREFIX, f"{_relative(root, failure.target.path)}: {failure.message}")

    result.changed = summary.changed
    if summary.errors:
        result.details.append(f"{summary.errors} sync errors")
    prefix = WARNING_PREFIX if options.dry_run and result.changed else SUCCESS_PREFIX
    _line(prefix, "settings.json ", dim(summary.describe()))
    return result


def upgrade_formulas(
    root: Path, options: UpgradeOptions, refresher: ArtifactRefresher
) -> UpgradeStepResult:
    result = UpgradeStepResult(step=STEP_FORMULAS)
    _step_header(5, "Updating formulas from bundled copies...")

    if options.dry_run:
        try:
            report = refresher.check_health(root)
        except OSError as exc:
            result.details.append(f"health check error: {exc}")
            _line(ERROR_PREFIX, f"Could not check formulas: {exc}")
            return result
        if report.needs_update == 0:
            _line(SUCCESS_PREFIX, f"{report.ok} formulas ", dim("up-to-date"))
            return result
        result.changed = report.needs_update
        if report.outdated:
            result.details.append(f"{report.outdated} would update")
        if report.missing:
            result.details.append(f"{report.missing} would reinstall")
        if report.new:
            result.details.append(f"{report.new} would install")
        if report.untracked:
            result.details.append(f"{report.untracked} would track")
        if report.modified:
            result.skipped = report.modified
            result.details.append(f"{report.modified} locally modified (skipped)")
        _line(WARNING_PREFIX, "formulas: ", dim(", ".join(result.details)))
        return result

    try:
        updated, skipped, reinstalled = refresher.update(root)
    except OSError as exc:
        result.details.append(f"update error: {exc}")
        _line(ERROR_PREFIX, f"Could not update formulas: {exc}")
        return result

    result.changed = updated + reinstalled
    result.skipped = skipped
    if result.changed == 0 and result.skipped == 0:
        report = refresher.check_health(root)
        _line(SUCCESS_PREFIX, f"{report.ok + report.modified} formulas ", dim("up-to-date"))
        return result

    parts: list[str] = []
    if updated:
        parts.append(f"{updated} updated")
    if reinstalled:
        parts.append(f"{reinstalled} reinstalled")
    if skipped:
        parts.append(f"{skipped} skipped (modified)")
    _line(SUCCESS_PREFIX, "formulas: ", dim(", ".join(parts)))
    return result


def total_changed(results: list[UpgradeStepResult]) -> int:
    return sum(result.changed for result in results)


def collect_issues(results: list[UpgradeStepResult]) -> list[str]:
    """Return step details that report errors, labelled by step.

    Example:
        >>> collect_issues([UpgradeStepResult("Hooks sync", details=["2 sync errors", "ok"])])
        ['Hooks sync: 2 sync errors']
    """
    return [
        f"{result.step}: {detail}"
        for result in results
        for detail in result.details
        if "error" in detail
    ]


def summary_message(results: list[UpgradeStepResult], options: UpgradeOptions) -> str:
    changed = total_changed(results)
    if options.dry_run:
        if changed == 0:
            return "Workspace is up-to-date, nothing to change"
        return f"Dry run complete: {changed} change(s) would be applied"
    if changed == 0:
        return "Workspace is up-to-date"
    return f"Upgrade complete: {changed} change(s) applied"


def print_summary(results: list[UpgradeStepResult], options: UpgradeOptions) -> None:
    changed = total_changed(results)
    say("")
    prefix = WARNING_PREFIX if options.dry_run and changed else SUCCESS_PREFIX
    say_styled("  ", prefix, " ", summary_message(results, options))
    if options.dry_run and changed:
        say_styled(_DETAIL_INDENT, "Run ", dim("warden upgrade"), " to apply")

    issues = collect_issues(results)
    if issues:
        say("")
        say_styled("  ", WARNING_PREFIX, " Issues:")
        for issue in issues:
            say_styled(_DETAIL_INDENT, ARROW_PREFIX, f" {issue}")
    say("")


def run_upgrade(
    root: Path,
    options: UpgradeOptions,
    *,
    sessions: SessionManager | None = None,
    refresher: ArtifactRefresher | None = None,
) -> list[UpgradeStepResult]:
    """Run every upgrade step in order and return their results."""
    results = [
        upgrade_structural(root, options, sessions=sessions),
        upgrade_identity_doc(root, options),
        upgrade_daemon_config(root, options),
        upgrade_hooks(root, options),
        upgrade_formulas(root, options, refresher or FormulaStore()),
    ]
    for result in results:
        _log.debug(
            f"step={result.step!r} changed={result.changed} skipped={result.skipped} "
            f"details={result.details}"
        )
    return results


def upgrade_workspace(args: object) -> None:
    """Reconcile workspace structure, templates, config, hooks, and formulas."""
    options = UpgradeOptions(
        dry_run=bool(getattr(args, "dry_run", False)),
        verbose=bool(getattr(args, "verbose", False)),
        no_start=bool(getattr(args, "no_start", False)),
    )
    root = resolve_workspace_root_or_die()
    say("")
    if options.dry_run:
        say_styled(bold("warden upgrade"), " Dry run, showing what would change")
    else:
        say_styled(bold("warden upgrade"), " Post-install migration")
    results = run_upgrade(root, options)
    print_summary(results, options)


def _relative(root: Path, path: Path) -> str:
    return os.path.relpath(path, root)
