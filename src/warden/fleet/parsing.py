"""Translation boundary for collaborator text output.

Every pattern match against ``dolt branch``, ``bd show`` and session
captures lives here so that format drift has a single failure point.

Grammar handled:

- branch listing: one branch per line, the current branch prefixed ``* ``.
- record header: a line containing the record id followed by
  ``· <title> [`` (status bracket).
- attached step record: ``attached_molecule: <id>``; fallback is any
  ``<prefix>-wisp-<suffix>`` token on a line that also names the step
  workflow template.
- step lines: contain ``↳``; the label sits between the first ``:`` and the
  ``●`` marker; ``✓`` anywhere on the line marks it closed.
"""

from __future__ import annotations

import re

STEP_WORKFLOW_TEMPLATE = "mol-polecat-work"
TITLE_MAX_LENGTH = 80
PEEK_NOISE_PREFIXES = ("⚠ gt binary",)
PEEK_NOISE_STRIPPED_PREFIXES = ("→ Run",)

_TITLE_RE = re.compile(r"·\s*(.+?)\s*\[")
_ATTACHED_RE = re.compile(r"attached_molecule:\s*(\S+)")
_WISP_RE = re.compile(r"(\S+-wisp-\S+)")
_STEP_RE = re.compile(r":\s*(.+?)\s*●")
_TRAILING_NUMBER_RE = re.compile(r"^[0-9]+$")

STEP_MARKER = "↳"
CLOSED_MARKER = "✓"


def branch_prefix(name: str, kind: str = "polecat") -> str:
    """Return the branch-name prefix for a worker.

    Example:
        >>> branch_prefix("Alpha")
        'polecat-alpha-'
    """
    return f"{kind}-{name.lower()}-"


def parse_branch_listing(text: str) -> list[str]:
    """Parse ``dolt branch`` output into branch names.

    Example:
        >>> parse_branch_listing("* main\\n  polecat-a-12\\n")
        ['main', 'polecat-a-12']
    """
    branches: list[str] = []
    for line in text.splitlines():
        name = line.lstrip("* ").strip()
        if name:
            branches.append(name)
    return branches


def _trailing_number(branch: str) -> int | None:
    token = branch.rsplit("-", 1)[-1]
    if not _TRAILING_NUMBER_RE.match(token):
        return None
    return int(token)


def select_latest_branch(branches: list[str], prefix: str) -> str:
    """Pick the candidate with the numerically greatest trailing token.

    Candidates are branches containing ``prefix``. Ties and candidates
    without a numeric suffix keep the first encountered.

    Example:
        >>> select_latest_branch(["w-a-100", "w-a-9999", "w-a-250"], "w-a-")
        'w-a-9999'
        >>> select_latest_branch(["main"], "w-a-")
        ''
    """
    candidates = [branch for branch in branches if prefix in branch]
    if not candidates:
        return ""
    best = candidates[0]
    best_stamp = 0
    for branch in candidates:
        stamp = _trailing_number(branch)
        if stamp is not None and stamp > best_stamp:
            best_stamp = stamp
            best = branch
    return best


def parse_bead_title(text: str, bead_id: str) -> str:
    """Extract a record title from its rendering, ``?`` when absent.

    Example:
        >>> parse_bead_title("○ gt-abc · Fix login [● P2 · OPEN]", "gt-abc")
        'Fix login'
    """
    if not bead_id:
        return "?"
    for line in text.splitlines():
        if bead_id not in line:
            continue
        match = _TITLE_RE.search(line)
        if match:
            return match.group(1)[:TITLE_MAX_LENGTH]
    return "?"


def parse_attached_molecule(text: str) -> str:
    """Find the step record attached to a task record rendering.

    Example:
        >>> parse_attached_molecule("attached_molecule: gt-wisp-x1")
        'gt-wisp-x1'
        >>> parse_attached_molecule("  gt-wisp-9z: mol-polecat-work")
        'gt-wisp-9z'
    """
    match = _ATTACHED_RE.search(text)
    if match:
        return match.group(1)
    for line in text.splitlines():
        if "wisp-" in line and STEP_WORKFLOW_TEMPLATE in line:
            found = _WISP_RE.search(line)
            if found:
                return found.group(1).rstrip(":")
    return ""


def parse_step_status(text: str) -> dict[str, bool]:
    """Map rendered step labels to their closed state.

    Example:
        >>> parse_step_status("  ↳ gt-wisp-1.1: Load context ● ✓")
        {'Load context': True}
    """
    statuses: dict[str, bool] = {}
    for line in text.splitlines():
        if STEP_MARKER not in line:
            continue
        closed = CLOSED_MARKER in line
        match = _STEP_RE.search(line)
        if match:
            statuses[match.group(1).strip()] = closed
    return statuses


def filter_peek_output(text: str) -> str:
    """Drop known noise lines from captured session output."""
    kept: list[str] = []
    for line in text.splitlines():
        if line.startswith(PEEK_NOISE_PREFIXES):
            continue
        if line.strip().startswith(PEEK_NOISE_STRIPPED_PREFIXES):
            continue
        kept.append(line)
    return "\n".join(kept).strip()


def tail_lines(text: str, *, limit: int = 20, width: int = 100) -> list[str]:
    """Return the last ``limit`` non-empty lines, each cut to ``width``.

    Example:
        >>> tail_lines("a\\n\\nb\\nc", limit=2)
        ['b', 'c']
    """
    lines = [line for line in text.splitlines() if line.strip()]
    return [line[:width] for line in lines[-limit:]]
