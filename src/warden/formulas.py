"""Bundled workflow formulas and their installed copies in a workspace.

Installed formulas live under ``.beads/formulas`` next to an install record
(``.installed.json``) mapping each formula file to the hash of the content
warden last wrote. The record lets a refresh tell a stale copy, which is
safe to replace, from a locally edited one, which is left alone.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Protocol

from . import config, paths
from . import log as warden_log

FORMULA_SUFFIX = ".formula.toml"
INSTALL_RECORD_FILENAME = ".installed.json"

_log = warden_log.component("formulas")


class FormulaState(str, Enum):
    OK = "ok"
    OUTDATED = "outdated"
    MISSING = "missing"
    NEW = "new"
    UNTRACKED = "untracked"
    MODIFIED = "modified"


@dataclass
class FormulaHealthReport:
    """Per-formula states plus counts by state."""

    states: dict[str, FormulaState] = field(default_factory=dict)

    def count(self, state: FormulaState) -> int:
        return sum(1 for value in self.states.values() if value is state)

    @property
    def ok(self) -> int:
        return self.count(FormulaState.OK)

    @property
    def outdated(self) -> int:
        return self.count(FormulaState.OUTDATED)

    @property
    def missing(self) -> int:
        return self.count(FormulaState.MISSING)

    @property
    def new(self) -> int:
        return self.count(FormulaState.NEW)

    @property
    def untracked(self) -> int:
        return self.count(FormulaState.UNTRACKED)

    @property
    def modified(self) -> int:
        return self.count(FormulaState.MODIFIED)

    @property
    def needs_update(self) -> int:
        return self.outdated + self.missing + self.new + self.untracked


class ArtifactRefresher(Protocol):
    """Peripheral collaborator refreshing bundled artifacts in a workspace."""

    def check_health(self, root: Path) -> FormulaHealthReport: ...

    def update(self, root: Path) -> tuple[int, int, int]: ...


def _formulas_root() -> Traversable:
    return resources.files("warden").joinpath("formulas")


def bundled_formulas() -> dict[str, str]:
    """Return bundled formula file names mapped to their content."""
    root = _formulas_root()
    if not root.is_dir():
        return {}
    return {
        entry.name: entry.read_text(encoding="utf-8")
        for entry in sorted(root.iterdir(), key=lambda item: item.name)
        if entry.is_file() and entry.name.endswith(FORMULA_SUFFIX)
    }


def install_record_path(root: Path) -> Path:
    return paths.formulas_dir(root) / INSTALL_RECORD_FILENAME


def load_install_record(root: Path) -> dict[str, str]:
    """Load the formula install record; unreadable records count as empty."""
    path = install_record_path(root)
    try:
        payload = config.load_json(path)
    except (OSError, ValueError) as exc:
        _log.warning(f"ignoring unreadable install record {path}: {exc}")
        return {}
    if not isinstance(payload, dict):
        return {}
    formulas = payload.get("formulas", {})
    if not isinstance(formulas, dict):
        return {}
    return {str(name): str(digest) for name, digest in formulas.items()}


def write_install_record(root: Path, record: dict[str, str]) -> None:
    config.write_json(install_record_path(root), {"formulas": dict(sorted(record.items()))})


def classify(
    installed_text: str | None, bundled_text: str, recorded_hash: str | None
) -> FormulaState:
    """Classify one formula from its installed, bundled, and recorded state.

    Example:
        >>> classify(None, "a", None).value
        'new'
        >>> classify("old", "new", config.hash_text("old")).value
        'outdated'
        >>> classify("edited", "new", config.hash_text("old")).value
        'modified'
    """
    bundled_hash = config.hash_text(bundled_text)
    if installed_text is None:
        return FormulaState.NEW if recorded_hash is None else FormulaState.MISSING
    installed_hash = config.hash_text(installed_text)
    if recorded_hash is None:
        return FormulaState.UNTRACKED if installed_hash == bundled_hash else FormulaState.MODIFIED
    if installed_hash == bundled_hash:
        return FormulaState.OK
    if installed_hash == recorded_hash:
        return FormulaState.OUTDATED
    return FormulaState.MODIFIED


def _iter_states(root: Path) -> Iterator[tuple[str, str, FormulaState]]:
    directory = paths.formulas_dir(root)
    record = load_install_record(root)
    for name, bundled_text in bundled_formulas().items():
        installed = directory / name
        installed_text = (
            installed.read_text(encoding="utf-8", errors="replace") if installed.is_file() else None
        )
        yield name, bundled_text, classify(installed_text, bundled_text, record.get(name))


def check_formula_health(root: Path) -> FormulaHealthReport:
    """Report the state of every bundled formula in a workspace."""
    report = FormulaHealthReport()
    for name, _text, state in _iter_states(root):
        report.states[name] = state
    return report


def update_formulas(root: Path) -> tuple[int, int, int]:
    """Install or refresh bundled formulas without touching local edits.

    Returns:
        ``(updated, skipped, reinstalled)`` counts. New installs count as
        updated; adopting an untracked identical copy counts as updated.

    Raises:
        OSError: If a formula or the install record cannot be written.
    """
    directory = paths.formulas_dir(root)
    record = load_install_record(root)
    updated = skipped = reinstalled = 0
    record_changed = False
    for name, bundled_text, state in _iter_states(root):
        digest = config.hash_text(bundled_text)
        if state is FormulaState.MODIFIED:
            skipped += 1
            continue
        if state is FormulaState.OK:
            if record.get(name) != digest:
                record[name] = digest
                record_changed = True
            continue
        if state is not FormulaState.UNTRACKED:
            paths.ensure_dir(directory)
            (directory / name).write_text(bundled_text, encoding="utf-8")
        record[name] = digest
        record_changed = True
        if state is FormulaState.MISSING:
            reinstalled += 1
        else:
            updated += 1
        _log.debug(f"{state.value} -> installed name={name}")
    if record_changed:
        write_install_record(root, record)
    return updated, skipped, reinstalled


class FormulaStore:
    """Default refresher backed by the bundled formula files."""

    def check_health(self, root: Path) -> FormulaHealthReport:
        return check_formula_health(root)

    def update(self, root: Path) -> tuple[int, int, int]:
        return update_formulas(root)
