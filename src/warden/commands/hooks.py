"""Implementation for the ``warden hooks`` commands."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path

from rich import box
from rich.table import Table
from rich.text import Text

from .. import hooks
from .. import log as warden_log
from ..io import (
    ARROW_PREFIX,
    ERROR_PREFIX,
    SUCCESS_PREFIX,
    WARNING_PREFIX,
    die,
    dim,
    say,
    say_styled,
)
from ..workspace import resolve_workspace_root_or_die

TARGET_COLUMN_WIDTH = 30
OVERRIDES_COLUMN_WIDTH = 35

_STATUS_STYLES = {
    hooks.STATUS_IN_SYNC: ("✓ in sync", "green"),
    hooks.STATUS_OUT_OF_SYNC: ("⚠ out of sync", "yellow"),
    hooks.STATUS_MISSING: ("- missing", "dim"),
    hooks.STATUS_ERROR: ("✖ error", "bold red"),
}


@dataclass(frozen=True)
class TargetInfo:
    """One row of ``hooks list``: a group-level target and its sync state."""

    target: str
    overrides: list[str]
    status: str
    path: str
    exists: bool


def build_target_info(target: hooks.Target) -> TargetInfo:
    return TargetInfo(
        target=target.display_key,
        overrides=hooks.active_overrides(target.key),
        status=hooks.target_status(target),
        path=str(target.path),
        exists=target.path.exists(),
    )


def collect_target_infos(root: Path) -> list[TargetInfo]:
    """Classify one representative target per display key.

    Raises:
        DiscoveryError: If the workspace cannot be scanned.
    """
    targets = hooks.unique_by_display_key(hooks.discover_targets(root))
    return [build_target_info(target) for target in targets]


def list_payload(infos: list[TargetInfo]) -> dict[str, object]:
    return {
        "targets": [asdict(info) for info in infos],
        "base_path": str(hooks.base_path()),
        "overrides_dir": str(hooks.overrides_dir()),
    }


def format_overrides(overrides: list[str]) -> str:
    """Render an override chain for display.

    Example:
        >>> format_overrides(["crew", "gastown/crew"])
        '[crew, gastown/crew]'
        >>> format_overrides([])
        '(none)'
    """
    if not overrides:
        return "(none)"
    return "[" + ", ".join(overrides) + "]"


def status_text(status: str) -> Text:
    label, style = _STATUS_STYLES.get(status, (status, ""))
    return Text(label, style=style)


def _render_table(infos: list[TargetInfo]) -> Table:
    table = Table(box=box.SIMPLE, show_edge=False, pad_edge=False)
    table.add_column("Target", no_wrap=True, max_width=TARGET_COLUMN_WIDTH, overflow="ellipsis")
    table.add_column(
        "Overrides", no_wrap=True, max_width=OVERRIDES_COLUMN_WIDTH, overflow="ellipsis"
    )
    table.add_column("Status", no_wrap=True)
    for info in infos:
        overrides = format_overrides(info.overrides)
        table.add_row(
            Text(info.target),
            Text(overrides, style="dim" if not info.overrides else ""),
            status_text(info.status),
        )
    return table


def list_hooks(args: object) -> None:
    """Show managed settings locations, their override chains, and sync status."""
    as_json = bool(getattr(args, "json", False))
    root = resolve_workspace_root_or_die()
    try:
        infos = collect_target_infos(root)
    except hooks.DiscoveryError as exc:
        die(f"discovering targets: {exc}")

    if as_json:
        say(json.dumps(list_payload(infos), indent=2))
        return

    console = warden_log.console()
    console.print(_render_table(infos))
    base = hooks.base_path()
    base_state = "exists" if base.exists() else "not found"
    say_styled("Base config: ", dim(str(base)), " ", dim(f"({base_state})"))
    override_count = len(hooks.list_override_files())
    say_styled("Overrides:   ", dim(str(hooks.overrides_dir())), f" ({override_count} files)")


def sync_hooks(args: object) -> None:
    """Write the computed hooks to every managed settings file."""
    dry_run = bool(getattr(args, "dry_run", False))
    verbose = bool(getattr(args, "verbose", False))
    root = resolve_workspace_root_or_die()
    try:
        summary = hooks.sync_all(root, dry_run=dry_run)
    except hooks.DiscoveryError as exc:
        die(f"discovering targets: {exc}")

    if verbose:
        for target, outcome in summary.entries:
            if outcome is hooks.SyncOutcome.UNCHANGED:
                continue
            label = f"would {outcome.value[:-1]}" if dry_run else outcome.value
            prefix = WARNING_PREFIX if dry_run else SUCCESS_PREFIX
            say_styled(prefix, " ", _relative(root, target.path), " ", dim(f"({label})"))
    for failure in summary.failures:
        say_styled(ERROR_PREFIX, " ", _relative(root, failure.target.path), f": {failure.message}")

    prefix = WARNING_PREFIX if dry_run and summary.changed else SUCCESS_PREFIX
    say_styled(prefix, " settings.json ", dim(summary.describe()))
    if dry_run and summary.changed:
        say_styled("  ", ARROW_PREFIX, " run ", dim("warden hooks sync"), " to apply")
    if summary.errors:
        say_styled(ERROR_PREFIX, f" {summary.errors} target(s) failed to sync")


def _relative(root: Path, path: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)
