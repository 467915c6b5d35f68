"""Base hook configuration, override chain resolution, and merging."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from .. import config, paths
from ..models import HookCommand, HookEntry, HooksConfig, HooksFragment

OVERRIDE_SEPARATOR = "__"


class ComputeError(RuntimeError):
    """Raised when the expected hooks for a target cannot be computed."""


def _entry(command: str, *, matcher: str = "") -> HookEntry:
    return HookEntry(matcher=matcher, hooks=[HookCommand(command=command)])


def default_base() -> HooksConfig:
    """Return the built-in base hook configuration."""
    return {
        "SessionStart": [_entry("gt prime --hook")],
        "PreCompact": [_entry("gt prime --hook")],
        "UserPromptSubmit": [_entry("gt mail check --inject")],
        "Stop": [_entry("gt costs record")],
    }


def base_path() -> Path:
    return paths.hooks_base_path()


def overrides_dir() -> Path:
    return paths.hooks_overrides_dir()


def override_path(name: str) -> Path:
    """Return the on-disk path for an override name.

    Example:
        >>> override_path("gastown/crew").name
        'gastown__crew.json'
    """
    return overrides_dir() / f"{name.replace('/', OVERRIDE_SEPARATOR)}.json"


def list_override_files() -> list[Path]:
    directory = overrides_dir()
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".json")


def get_applicable_overrides(target_key: str) -> list[str]:
    """Return override names for a target key, lowest precedence first.

    Role-wide overrides apply before rig-specific ones.

    Example:
        >>> get_applicable_overrides("mayor")
        ['mayor']
        >>> get_applicable_overrides("gastown/crew")
        ['crew', 'gastown/crew']
    """
    key = target_key.strip("/")
    if "/" not in key:
        return [key]
    _rig, role = key.split("/", 1)
    return [role, key]


def active_overrides(target_key: str) -> list[str]:
    """Return applicable overrides that exist on disk."""
    return [name for name in get_applicable_overrides(target_key) if override_path(name).is_file()]


def load_fragment(path: Path) -> HooksConfig:
    """Load a base or override fragment.

    Raises:
        ComputeError: If the fragment is unreadable or malformed.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, ValueError) as exc:
        raise ComputeError(f"cannot read {path}: {exc}") from exc
    if isinstance(payload, dict) and not isinstance(payload.get("hooks"), dict):
        payload = {"hooks": payload}
    try:
        return HooksFragment.model_validate(payload).hooks
    except ValidationError as exc:
        raise ComputeError(f"invalid hooks fragment {path}: {exc}") from exc


def merge_hooks(base: HooksConfig, override: HooksConfig) -> HooksConfig:
    """Merge an override fragment on top of a base, last write wins.

    Entries are matched per event by ``matcher``: a matching entry is
    replaced, a new matcher is appended, an entry with no commands removes
    the matcher, and an event mapped to an empty list is removed.
    """
    merged: HooksConfig = {
        event: [entry.model_copy(deep=True) for entry in entries]
        for event, entries in base.items()
    }
    for event, entries in override.items():
        if not entries:
            merged.pop(event, None)
            continue
        current = merged.setdefault(event, [])
        for entry in entries:
            index = next(
                (i for i, existing in enumerate(current) if existing.matcher == entry.matcher),
                None,
            )
            if not entry.hooks:
                if index is not None:
                    current.pop(index)
                continue
            if index is None:
                current.append(entry.model_copy(deep=True))
            else:
                current[index] = entry.model_copy(deep=True)
        if not current:
            merged.pop(event)
    return merged


def load_base() -> HooksConfig:
    path = base_path()
    if not path.exists():
        return default_base()
    return load_fragment(path)


def compute_expected(target_key: str) -> HooksConfig:
    """Compute the expected hooks for a target key.

    Raises:
        ComputeError: If the base or an active override is malformed.
    """
    expected = load_base()
    for name in get_applicable_overrides(target_key):
        path = override_path(name)
        if path.is_file():
            expected = merge_hooks(expected, load_fragment(path))
    return expected


def hooks_payload(hooks: HooksConfig) -> dict[str, list[dict[str, object]]]:
    """Serialize hooks to plain JSON data, dropping empty events."""
    return {
        event: [entry.model_dump(mode="json", exclude_none=True) for entry in entries]
        for event, entries in hooks.items()
        if entries
    }


def hooks_equal(left: HooksConfig, right: HooksConfig) -> bool:
    """Compare hook structures field for field, ignoring key order.

    Example:
        >>> hooks_equal(default_base(), default_base())
        True
        >>> hooks_equal(default_base(), {})
        False
    """
    return hooks_payload(left) == hooks_payload(right)


def write_default_base() -> Path:
    """Write the built-in base configuration to the base path."""
    path = base_path()
    config.write_json(path, {"hooks": hooks_payload(default_base())})
    return path
