"""Workspace discovery and layout helpers."""

from __future__ import annotations

import os
from pathlib import Path

from . import config, paths
from .io import die
from .models import WorkspaceMarker

WORKSPACE_ENV = "WARDEN_WORKSPACE"
TOP_LEVEL_ROLES = (paths.MAYOR_DIRNAME, paths.DEACON_DIRNAME)
GROUP_ROLES = ("crew", "polecats")
SINGLETON_ROLES = ("witness", "refinery")
RIG_ROLES = GROUP_ROLES + SINGLETON_ROLES


class WorkspaceNotFoundError(RuntimeError):
    """Raised when no workspace root encloses the starting directory."""


class InvalidMarkerError(ValueError):
    """Raised when the workspace marker cannot be read or validated."""


def is_workspace_root(path: Path) -> bool:
    return paths.workspace_marker_path(path).is_file()


def load_marker(root: Path) -> WorkspaceMarker:
    """Load and validate the marker at ``mayor/town.json``.

    Raises:
        InvalidMarkerError: If the marker is missing, unreadable, or malformed.
    """
    path = paths.workspace_marker_path(root)
    try:
        return WorkspaceMarker.model_validate(config.load_json(path))
    except (OSError, ValueError) as exc:
        raise InvalidMarkerError(f"invalid workspace marker {path}: {exc}") from exc


def find_workspace_root(start: Path | None = None) -> Path | None:
    """Find the nearest enclosing workspace root.

    ``WARDEN_WORKSPACE`` wins when it names a workspace root.

    Args:
        start: Directory to start from (defaults to the current directory).

    Returns:
        The workspace root, or ``None`` when none encloses ``start``.
    """
    override = os.environ.get(WORKSPACE_ENV, "").strip()
    if override:
        candidate = Path(override).expanduser().resolve()
        return candidate if is_workspace_root(candidate) else None
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if is_workspace_root(candidate):
            return candidate
    return None


def require_workspace_root(start: Path | None = None) -> Path:
    """Return the enclosing workspace root or raise ``WorkspaceNotFoundError``."""
    root = find_workspace_root(start)
    if root is None:
        where = start or Path.cwd()
        raise WorkspaceNotFoundError(f"not in a warden workspace: {where}")
    return root


def resolve_workspace_root_or_die() -> Path:
    """Return the workspace root for CLI commands, exiting when missing."""
    try:
        return require_workspace_root()
    except WorkspaceNotFoundError as exc:
        die(str(exc))


def is_rig_dir(path: Path) -> bool:
    if not path.is_dir() or path.name.startswith("."):
        return False
    if path.name in TOP_LEVEL_ROLES:
        return False
    return any((path / role).is_dir() for role in RIG_ROLES)


def list_rig_dirs(root: Path) -> list[Path]:
    """Return rig directories under a workspace root, sorted by name.

    Raises:
        OSError: If the root cannot be listed.
    """
    return sorted((entry for entry in root.iterdir() if is_rig_dir(entry)), key=lambda p: p.name)


def list_members(role_dir: Path) -> list[Path]:
    """Return member directories of a crew/polecats role directory."""
    if not role_dir.is_dir():
        return []
    return sorted(
        (
            entry
            for entry in role_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        ),
        key=lambda p: p.name,
    )
