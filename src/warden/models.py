"""Pydantic models for Warden configuration and collaborator payloads."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h)$")
_DURATION_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str) -> float:
    """Parse a compact duration string into seconds.

    Args:
        value: Duration such as ``30s``, ``5m`` or ``1h``.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If the value is not a positive compact duration.

    Example:
        >>> parse_duration("5m")
        300.0
        >>> parse_duration("90s")
        90.0
    """
    match = DURATION_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"invalid duration: {value!r} (expected e.g. 30s, 5m, 1h)")
    amount = int(match.group(1))
    if amount <= 0:
        raise ValueError(f"duration must be positive: {value!r}")
    return amount * _DURATION_SECONDS[match.group(2)]


def _empty_if_none(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


class WorkspaceMarker(BaseModel):
    """Workspace marker stored at ``mayor/town.json``.

    Example:
        >>> WorkspaceMarker(name="town").type
        'town'
    """

    model_config = ConfigDict(extra="allow")

    type: str = "town"
    version: int = 1
    name: str = ""


class HookCommand(BaseModel):
    """A single command executed for a hook event.

    Example:
        >>> HookCommand(command="gt prime").type
        'command'
    """

    model_config = ConfigDict(extra="allow")

    type: str = "command"
    command: str
    timeout: int | None = None


class HookEntry(BaseModel):
    """Commands bound to one matcher within a hook event."""

    model_config = ConfigDict(extra="allow")

    matcher: str = ""
    hooks: list[HookCommand] = Field(default_factory=list)

    @field_validator("matcher", mode="before")
    @classmethod
    def normalize_matcher(cls, value: object) -> object:
        return _empty_if_none(value)


HooksConfig = dict[str, list[HookEntry]]


class HooksFragment(BaseModel):
    """Base or override hook registry fragment.

    Fragments are stored either as ``{"hooks": {...}}``, where sibling keys
    such as ``description`` are ignored, or as a bare mapping of event name
    to entries.
    """

    model_config = ConfigDict(extra="ignore")

    hooks: HooksConfig = Field(default_factory=dict)


class SettingsFile(BaseModel):
    """On-disk agent settings; unknown keys are preserved."""

    model_config = ConfigDict(extra="allow")

    hooks: HooksConfig = Field(default_factory=dict)

    @field_validator("hooks", mode="before")
    @classmethod
    def normalize_hooks(cls, value: object) -> object:
        if value is None:
            return {}
        return value


class HeartbeatConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = True
    interval: str = "3m"

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, value: str) -> str:
        parse_duration(value)
        return value


class PatrolConfig(BaseModel):
    """Lifecycle settings for one daemon patrol."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = True
    interval: str = "5m"
    threshold_minutes: int | None = None
    nudge: bool | None = None

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("threshold_minutes")
    @classmethod
    def validate_threshold(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("threshold_minutes must not be negative")
        return value


def default_patrols() -> dict[str, PatrolConfig]:
    return {
        "deacon": PatrolConfig(interval="5m"),
        "witness": PatrolConfig(interval="5m"),
        "refinery": PatrolConfig(interval="5m"),
        "step-drift": PatrolConfig(interval="1m", threshold_minutes=5, nudge=True),
    }


class DaemonConfig(BaseModel):
    """Daemon-lifecycle configuration stored at ``mayor/daemon.json``.

    Example:
        >>> DaemonConfig().patrols["step-drift"].threshold_minutes
        5
    """

    model_config = ConfigDict(extra="allow")

    type: Literal["daemon-patrol-config"] = "daemon-patrol-config"
    version: int = 1
    heartbeat: HeartbeatConfig = Field(default_factory=HeartbeatConfig)
    patrols: dict[str, PatrolConfig] = Field(default_factory=default_patrols)

    @field_validator("version")
    @classmethod
    def validate_version(cls, value: int) -> int:
        if value < 1:
            raise ValueError("version must be >= 1")
        return value


class RigRecord(BaseModel):
    """One entry of the fleet directory's rig listing."""

    model_config = ConfigDict(extra="allow")

    name: str

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, value: object) -> object:
        return _empty_if_none(value)


class PolecatRecord(BaseModel):
    """One entry of the fleet directory's worker listing."""

    model_config = ConfigDict(extra="allow")

    rig: str = ""
    name: str
    state: str = ""
    issue: str = ""

    @field_validator("rig", "name", "state", "issue", mode="before")
    @classmethod
    def normalize_strings(cls, value: object) -> object:
        return _empty_if_none(value)
