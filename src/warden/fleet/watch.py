"""Presentation loop for the live drift dashboard."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .. import log as warden_log

CLEAR_SCREEN = "\033[2J\033[H"
DEFAULT_INTERVAL_SECONDS = 30

_log = warden_log.component("drift")


def watch_loop(
    cycle: Callable[[], None],
    interval_seconds: float,
    *,
    stop: threading.Event | None = None,
    max_cycles: int | None = None,
) -> int:
    """Run ``cycle`` repeatedly, sleeping ``interval_seconds`` between ticks.

    The loop ends when ``stop`` is set or after ``max_cycles`` ticks. Each
    tick is independent; ``cycle`` carries no state between calls.

    Returns:
        Number of completed cycles.
    """
    event = stop or threading.Event()
    completed = 0
    while not event.is_set():
        cycle()
        completed += 1
        _log.trace(f"watch tick {completed}")
        if max_cycles is not None and completed >= max_cycles:
            break
        if event.wait(interval_seconds):
            break
    return completed
