"""Read and write agent settings files."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from .. import config
from ..models import HooksConfig, SettingsFile
from .registry import hooks_payload


class LoadError(RuntimeError):
    """Raised when a settings file cannot be read or parsed."""


def read_settings_payload(path: Path) -> dict[str, object]:
    """Read a settings file as raw JSON data.

    Raises:
        LoadError: If the file is unreadable or not a JSON object.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, ValueError) as exc:
        raise LoadError(f"cannot load {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise LoadError(f"cannot load {path}: expected a JSON object")
    return payload


def load_settings(path: Path) -> SettingsFile:
    """Load and validate a settings file.

    Raises:
        LoadError: If the file is unreadable, malformed, or has invalid hooks.
    """
    payload = read_settings_payload(path)
    try:
        return SettingsFile.model_validate(payload)
    except ValidationError as exc:
        raise LoadError(f"invalid settings {path}: {exc}") from exc


def write_settings_hooks(path: Path, hooks: HooksConfig) -> None:
    """Replace the hooks section of a settings file, keeping other keys.

    A missing file is created with only the hooks section.
    """
    payload: dict[str, object] = {}
    if path.exists():
        payload = read_settings_payload(path)
    payload["hooks"] = hooks_payload(hooks)
    config.write_json(path, payload)
