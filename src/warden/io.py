"""Console I/O helpers for user-facing messages."""

from __future__ import annotations

import sys
from typing import NoReturn

from rich.text import Text

from . import log

SUCCESS_PREFIX = ("✓", "green")
WARNING_PREFIX = ("⚠", "yellow")
ERROR_PREFIX = ("✖", "bold red")
ARROW_PREFIX = ("→", "dim")


def say(message: str) -> None:
    """Print a plain line to stdout.

    Example:
        >>> say("3 unchanged")
        3 unchanged
    """
    print(message)


def die(message: str, code: int = 1) -> NoReturn:
    """Report ``message`` on stderr and exit with ``code``."""
    print(f"error: {message}", file=sys.stderr)
    sys.exit(code)


def styled(*parts: str | tuple[str, str]) -> Text:
    """Assemble a rich ``Text`` from plain strings and ``(text, style)`` pairs.

    Example:
        >>> styled("a", ("b", "bold")).plain
        'ab'
    """
    text = Text()
    for part in parts:
        if isinstance(part, tuple):
            text.append(part[0], style=part[1])
        else:
            text.append(part)
    return text


def say_styled(*parts: str | tuple[str, str]) -> None:
    """Print styled parts as one stdout line."""
    log.console().print(styled(*parts))


def bold(value: str) -> tuple[str, str]:
    return (value, "bold")


def dim(value: str) -> tuple[str, str]:
    return (value, "dim")
