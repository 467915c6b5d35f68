"""Levelled terminal logging for warden.

Messages go through rich consoles: TRACE through SUCCESS to stdout, WARNING
and ERROR to stderr. Components log through a ``ComponentLogger`` so every
line carries its origin, e.g. ``[drift] evaluated gastown/alpha``.

The active level comes from ``WARDEN_LOG_LEVEL`` unless ``set_level`` (the
global ``--log-level`` option) chose one.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import IntEnum

from rich.console import Console
from rich.text import Text

LOG_LEVEL_ENV = "WARDEN_LOG_LEVEL"
NO_COLOR_ENVS = ("NO_COLOR", "WARDEN_NO_COLOR")


class LogLevel(IntEnum):
    TRACE = 10
    DEBUG = 20
    INFO = 30
    SUCCESS = 35
    WARNING = 40
    ERROR = 50


LEVEL_NAMES = tuple(level.name.lower() for level in LogLevel)
_ALIASES = {"warn": LogLevel.WARNING}
_DEFAULT_LEVEL = LogLevel.INFO
_LEVEL_STYLES = {
    LogLevel.TRACE: "dim",
    LogLevel.DEBUG: "cyan",
    LogLevel.INFO: "",
    LogLevel.SUCCESS: "green",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "bold red",
}

_configured_level: LogLevel | None = None
_no_color_override: bool | None = None


def parse_level(value: str | None) -> LogLevel | None:
    """Return the level named by ``value``, or ``None`` when unknown.

    Example:
        >>> parse_level(" Debug ").name
        'DEBUG'
        >>> parse_level("warn").name
        'WARNING'
        >>> parse_level("loud") is None
        True
    """
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    if normalized in LEVEL_NAMES:
        return LogLevel[normalized.upper()]
    return None


def configured_level() -> LogLevel:
    global _configured_level
    if _configured_level is None:
        _configured_level = parse_level(os.environ.get(LOG_LEVEL_ENV)) or _DEFAULT_LEVEL
    return _configured_level


def set_level(value: str | None) -> None:
    """Set the active level; unknown or empty values restore the default."""
    global _configured_level
    _configured_level = parse_level(value) or _DEFAULT_LEVEL


def set_no_color(value: bool) -> None:
    """Force colour off (or back to environment detection when false)."""
    global _no_color_override
    _no_color_override = True if value else None


def is_enabled(level: LogLevel) -> bool:
    return level >= configured_level()


def _no_color() -> bool:
    if _no_color_override is not None:
        return _no_color_override
    return any(os.environ.get(name) for name in NO_COLOR_ENVS)


def _console(*, stderr: bool) -> Console:
    return Console(
        file=sys.stderr if stderr else sys.stdout,
        soft_wrap=True,
        highlight=False,
        no_color=_no_color(),
    )


def console() -> Console:
    """Return a stdout console for styled user-facing output."""
    return _console(stderr=False)


def emit(level: LogLevel, message: str, *, style: str | None = None) -> None:
    if not is_enabled(level):
        return
    text = Text(message, style=style or _LEVEL_STYLES[level])
    _console(stderr=level >= LogLevel.WARNING).print(text)


@dataclass(frozen=True)
class ComponentLogger:
    """Logger that prefixes every message with its component name."""

    component: str

    def log(self, level: LogLevel, message: str) -> None:
        emit(level, f"[{self.component}] {message}")

    def trace(self, message: str) -> None:
        self.log(LogLevel.TRACE, message)

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self.log(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)


def component(name: str) -> ComponentLogger:
    return ComponentLogger(name)
