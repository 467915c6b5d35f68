"""Sync classification and reconciliation of settings targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .. import log as warden_log
from . import settings as settings_store
from .registry import ComputeError, compute_expected, hooks_equal
from .settings import LoadError
from .targets import Target, discover_targets

STATUS_MISSING = "missing"
STATUS_IN_SYNC = "in sync"
STATUS_OUT_OF_SYNC = "out of sync"
STATUS_ERROR = "error"


class SyncOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


_log = warden_log.component("hooks")


def target_status(target: Target) -> str:
    """Classify a target as missing, in sync, out of sync, or error."""
    if not target.path.exists():
        return STATUS_MISSING
    try:
        expected = compute_expected(target.key)
        current = settings_store.load_settings(target.path)
    except (ComputeError, LoadError) as exc:
        _log.debug(f"status error target={target.name} detail={exc}")
        return STATUS_ERROR
    if hooks_equal(expected, current.hooks):
        return STATUS_IN_SYNC
    return STATUS_OUT_OF_SYNC


def sync_target(target: Target, dry_run: bool = False) -> SyncOutcome:
    """Bring one target's hooks in line with its expected configuration.

    In-sync targets are left untouched. Under ``dry_run`` nothing is written.

    Raises:
        ComputeError: If the expected hooks cannot be computed.
        LoadError: If the existing settings file cannot be loaded.
    """
    expected = compute_expected(target.key)
    if not target.path.exists():
        if not dry_run:
            settings_store.write_settings_hooks(target.path, expected)
        _log.debug(f"sync created target={target.name} dry_run={dry_run}")
        return SyncOutcome.CREATED
    current = settings_store.load_settings(target.path)
    if hooks_equal(expected, current.hooks):
        return SyncOutcome.UNCHANGED
    if not dry_run:
        settings_store.write_settings_hooks(target.path, expected)
    _log.debug(f"sync updated target={target.name} dry_run={dry_run}")
    return SyncOutcome.UPDATED


@dataclass(frozen=True)
class SyncFailure:
    target: Target
    message: str


@dataclass
class SyncSummary:
    """Per-run tally of target sync outcomes in discovery order."""

    entries: list[tuple[Target, SyncOutcome]] = field(default_factory=list)
    failures: list[SyncFailure] = field(default_factory=list)

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for _target, value in self.entries if value is outcome)

    @property
    def created(self) -> int:
        return self.count(SyncOutcome.CREATED)

    @property
    def updated(self) -> int:
        return self.count(SyncOutcome.UPDATED)

    @property
    def unchanged(self) -> int:
        return self.count(SyncOutcome.UNCHANGED)

    @property
    def errors(self) -> int:
        return len(self.failures)

    @property
    def changed(self) -> int:
        return self.created + self.updated

    def describe(self) -> str:
        parts: list[str] = []
        if self.updated:
            parts.append(f"{self.updated} updated")
        if self.created:
            parts.append(f"{self.created} created")
        if self.unchanged:
            parts.append(f"{self.unchanged} unchanged")
        if self.errors:
            parts.append(f"{self.errors} errors")
        return ", ".join(parts) or "no targets"


def sync_targets(targets: list[Target], *, dry_run: bool = False) -> SyncSummary:
    """Sync targets one at a time; failures are recorded and skipped."""
    summary = SyncSummary()
    for target in targets:
        try:
            outcome = sync_target(target, dry_run=dry_run)
        except (ComputeError, LoadError, OSError) as exc:
            summary.failures.append(SyncFailure(target=target, message=str(exc)))
            continue
        summary.entries.append((target, outcome))
    return summary


def sync_all(root: Path, *, dry_run: bool = False) -> SyncSummary:
    """Discover and sync every target in a workspace.

    Raises:
        DiscoveryError: If the workspace cannot be scanned.
    """
    return sync_targets(discover_targets(root), dry_run=dry_run)
