"""Discovery of managed settings targets in a workspace."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .. import paths, workspace


class DiscoveryError(RuntimeError):
    """Raised when the workspace cannot be scanned for targets."""


@dataclass(frozen=True)
class Target:
    """A managed settings destination.

    ``key`` is the group identity used for override lookup and display
    deduplication; ``name`` identifies the individual session owner.

    Example:
        >>> t = Target(path=Path("/t/s.json"), key="gastown/crew", name="gastown/crew/max")
        >>> t.display_key
        'gastown/crew'
    """

    path: Path
    key: str
    name: str
    rig: str | None = None
    role: str | None = None

    @property
    def display_key(self) -> str:
        return self.key

    @property
    def is_member(self) -> bool:
        return self.name != self.key


def _role_target(owner_dir: Path, *, key: str, name: str, rig: str | None, role: str) -> Target:
    return Target(path=paths.settings_path(owner_dir), key=key, name=name, rig=rig, role=role)


def _rig_targets(rig_dir: Path) -> list[Target]:
    rig = rig_dir.name
    targets: list[Target] = []
    for role in workspace.GROUP_ROLES:
        key = f"{rig}/{role}"
        for member in workspace.list_members(rig_dir / role):
            targets.append(
                _role_target(member, key=key, name=f"{key}/{member.name}", rig=rig, role=role)
            )
    for role in workspace.SINGLETON_ROLES:
        role_dir = rig_dir / role
        if role_dir.is_dir():
            key = f"{rig}/{role}"
            targets.append(_role_target(role_dir, key=key, name=key, rig=rig, role=role))
    return targets


def discover_targets(root: Path) -> list[Target]:
    """Enumerate every managed settings target currently present.

    Order is deterministic: top-level roles first, then rigs by name with
    crew members, polecats, witness and refinery in that order.

    Raises:
        DiscoveryError: If the workspace root cannot be scanned.
    """
    if not root.is_dir():
        raise DiscoveryError(f"workspace root is not a directory: {root}")
    targets: list[Target] = []
    for role in workspace.TOP_LEVEL_ROLES:
        role_dir = root / role
        if role_dir.is_dir():
            targets.append(_role_target(role_dir, key=role, name=role, rig=None, role=role))
    try:
        rig_dirs = workspace.list_rig_dirs(root)
        for rig_dir in rig_dirs:
            targets.extend(_rig_targets(rig_dir))
    except OSError as exc:
        raise DiscoveryError(f"cannot scan workspace {root}: {exc}") from exc
    return targets


def unique_by_display_key(targets: list[Target]) -> list[Target]:
    """Collapse member targets into one row per display key, keeping order."""
    seen: set[str] = set()
    unique: list[Target] = []
    for target in targets:
        if target.display_key in seen:
            continue
        seen.add(target.display_key)
        unique.append(target)
    return unique
