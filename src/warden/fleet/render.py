"""Report rendering for step-drift results."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence

from rich.console import Console
from rich.text import Text

from .drift import STEP_LABELS, StepDriftResult
from .parsing import tail_lines

REPORT_TITLE = "patrol-step-drift"
RULE = "=" * 80
TITLE_DISPLAY_LENGTH = 55
PEEK_TAIL_LINES = 20
PEEK_LINE_WIDTH = 100
DONE_GLYPH = "●"
PENDING_GLYPH = "○"
LEGEND = "  ● = done  ○ = pending  ⚡ = drifting"
EMPTY_MESSAGE = "  No active polecats."
_MARKER_STYLE = "yellow"

PeekFn = Callable[[StepDriftResult], str]


def render_json(results: Sequence[StepDriftResult]) -> str:
    """Serialize results as an indented JSON array in listing order."""
    return json.dumps([result.to_dict() for result in results], indent=2, ensure_ascii=False)


def progress_bar(closed: int, total: int) -> str:
    """Render closed/pending glyphs for a worker.

    Example:
        >>> progress_bar(2, 4)
        '●●○○'
    """
    return "".join(DONE_GLYPH if index < closed else PENDING_GLYPH for index in range(total))


def summary_line(result: StepDriftResult) -> str:
    """Render the one-line summary for a worker.

    Example:
        >>> r = StepDriftResult("gt", "alpha", "gt-1", "Fix", "working", 7.5, 1, 3,
        ...                     False, False, "")
        >>> summary_line(r)
        '  ▶ alpha      gt-1         ●○○  Fix  7m'
    """
    age = f"{int(result.age_min)}m" if result.age_min > 0 else ""
    state = f"({result.state})" if result.state != "working" else ""
    title = result.title[:TITLE_DISPLAY_LENGTH]
    return (
        f"  ▶ {result.name:<10} {result.bead:<12} "
        f"{progress_bar(result.closed, result.total)}  {title} {state} {age}"
    )


def header_lines(stamp: str | None = None) -> list[str]:
    title = f"{REPORT_TITLE}  ({stamp})" if stamp else REPORT_TITLE
    return [title, RULE]


def render_pretty(
    results: Sequence[StepDriftResult],
    console: Console,
    *,
    peek: PeekFn | None = None,
) -> None:
    """Print the human report: one block per worker, then the legend."""
    if not results:
        console.print(EMPTY_MESSAGE)
        return
    for result in results:
        console.print(Text(summary_line(result)))
        if peek is not None:
            for line in tail_lines(peek(result), limit=PEEK_TAIL_LINES, width=PEEK_LINE_WIDTH):
                console.print(Text(f"    │ {line}"))
        if result.drifting:
            marker = f"⚡ Step drift detected ({int(result.age_min)}m, 0 steps closed)"
            console.print(Text(f"    {marker}", style=_MARKER_STYLE))
        if result.nudged:
            console.print(Text("    ⚡ Nudged", style=_MARKER_STYLE))
        console.print()
    console.print(f"  Steps: {STEP_LABELS}")
    console.print(LEGEND)
