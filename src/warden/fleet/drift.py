"""Step-drift detection for active workers.

A worker drifts when its session has been alive for at least the threshold
without closing any canonical step. Each cycle is computed fresh from the
collaborators; nothing is cached between cycles.
"""

from __future__ import annotations

import concurrent.futures
import datetime as dt
import math
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, replace

from .. import log as warden_log
from .collaborators import (
    DEFAULT_SESSION_PREFIX,
    BranchStore,
    FleetDirectory,
    PolecatInfo,
    SessionManager,
    TaskTracker,
    session_name,
)
from .parsing import (
    branch_prefix,
    filter_peek_output,
    parse_attached_molecule,
    parse_bead_title,
    parse_step_status,
    select_latest_branch,
)

STEPS_ORDER: tuple[str, ...] = (
    "Load context",
    "Set up working branch",
    "Verify tests pass",
    "Implement",
    "Self-review",
    "Run tests",
    "Clean up",
    "Prepare work",
    "Submit work",
)

# Consumers parse the fixed-width progress indicator; keep in step with STEPS_ORDER.
STEP_LABELS = "①load ②branch ③preflight ④implement ⑤review ⑥test ⑦cleanup ⑧prepare ⑨submit"

NUDGE_MESSAGE = (
    "You have been working for several minutes with no molecule steps closed. "
    "Close each step IMMEDIATELY when you finish it: `bd close <step-id>`. "
    "Run `bd ready` to see your next step. Not closing steps signals you are "
    "not following the formula."
)

DEFAULT_THRESHOLD_MINUTES = 5
PEEK_LINES = 20

_log = warden_log.component("drift")


def utc_now() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc)


def match_step(step_name: str, statuses: Mapping[str, bool] | None) -> bool:
    """Return whether a canonical step is closed in rendered statuses.

    Matching is case-insensitive substring containment of the canonical name
    within a rendered label.

    Example:
        >>> match_step("Load context", {"Load context and start": True})
        True
        >>> match_step("Verify tests pass", {"Verify tests pass (precheck)": False})
        False
    """
    if not statuses:
        return False
    needle = step_name.lower()
    return any(closed for label, closed in statuses.items() if needle in label.lower())


def count_closed_steps(statuses: Mapping[str, bool] | None) -> int:
    """Count canonical steps closed in ``statuses``.

    Example:
        >>> count_closed_steps({step: True for step in STEPS_ORDER})
        9
        >>> count_closed_steps(None)
        0
    """
    return sum(1 for step in STEPS_ORDER if match_step(step, statuses))


def round_to_1(value: float) -> float:
    """Truncate toward zero at one decimal place.

    Example:
        >>> round_to_1(12.34)
        12.3
        >>> round_to_1(100.05)
        100.0
    """
    return math.trunc(value * 10) / 10


def is_drifting(age_minutes: float, closed: int, threshold_minutes: float) -> bool:
    return age_minutes >= threshold_minutes and closed == 0


@dataclass(frozen=True)
class StepDriftResult:
    """Drift verdict for one worker in one cycle."""

    rig: str
    name: str
    bead: str
    title: str
    state: str
    age_min: float
    closed: int
    total: int
    drifting: bool
    nudged: bool
    branch: str

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass
class DriftMonitor:
    """Combine fleet, session, branch and tracker facts into drift verdicts."""

    fleet: FleetDirectory
    sessions: SessionManager
    branches: BranchStore
    tracker: TaskTracker
    session_prefix: str = DEFAULT_SESSION_PREFIX
    branch_kind: str = "polecat"
    clock: Callable[[], dt.datetime] = utc_now
    max_workers: int = 1

    def list_polecats(self) -> list[PolecatInfo]:
        polecats: list[PolecatInfo] = []
        for rig in self.fleet.list_rigs():
            polecats.extend(self.fleet.list_polecats(rig))
        return polecats

    def session_for(self, rig: str, name: str) -> str:
        return session_name(rig, name, self.session_prefix)

    def resolve_branch(self, polecat: PolecatInfo) -> str:
        branches = self.branches.list_branches(polecat.rig)
        return select_latest_branch(branches, branch_prefix(polecat.name, self.branch_kind))

    def session_age_minutes(self, polecat: PolecatInfo) -> float:
        created = self.sessions.session_created(self.session_for(polecat.rig, polecat.name))
        if created is None:
            return 0.0
        return max((self.clock() - created).total_seconds() / 60.0, 0.0)

    def evaluate(self, polecat: PolecatInfo, threshold_minutes: float) -> StepDriftResult:
        branch = self.resolve_branch(polecat)
        bead_text = self.tracker.show(polecat.bead) if polecat.bead else ""
        wisp_id = parse_attached_molecule(bead_text)
        statuses = parse_step_status(self.tracker.show(wisp_id, branch=branch)) if wisp_id else {}
        closed = count_closed_steps(statuses)
        age = self.session_age_minutes(polecat)
        _log.debug(
            f"evaluated {polecat.rig}/{polecat.name} branch={branch or '-'} "
            f"wisp={wisp_id or '-'} closed={closed} age={age:.1f}"
        )
        return StepDriftResult(
            rig=polecat.rig,
            name=polecat.name,
            bead=polecat.bead,
            title=parse_bead_title(bead_text, polecat.bead),
            state=polecat.state,
            age_min=round_to_1(age),
            closed=closed,
            total=len(STEPS_ORDER),
            drifting=is_drifting(age, closed, threshold_minutes),
            nudged=False,
            branch=branch,
        )

    def check(self, threshold_minutes: float = DEFAULT_THRESHOLD_MINUTES) -> list[StepDriftResult]:
        """Evaluate every active worker, preserving listing order."""
        polecats = self.list_polecats()
        if self.max_workers <= 1 or len(polecats) <= 1:
            return [self.evaluate(polecat, threshold_minutes) for polecat in polecats]
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(
                executor.map(lambda polecat: self.evaluate(polecat, threshold_minutes), polecats)
            )

    def nudge(self, results: list[StepDriftResult]) -> list[StepDriftResult]:
        """Send the escalation message to drifting workers (best effort)."""
        nudged: list[StepDriftResult] = []
        for result in results:
            if not result.drifting:
                nudged.append(result)
                continue
            session = self.session_for(result.rig, result.name)
            if not self.sessions.send_message(session, NUDGE_MESSAGE):
                _log.warning(f"nudge delivery failed session={session}")
            nudged.append(replace(result, nudged=True))
        return nudged

    def cycle(self, threshold_minutes: float, *, nudge: bool = False) -> list[StepDriftResult]:
        """Run one full poll: evaluate, then optionally nudge."""
        results = self.check(threshold_minutes)
        if nudge:
            results = self.nudge(results)
        return results

    def peek(self, result: StepDriftResult, lines: int = PEEK_LINES) -> str:
        raw = self.sessions.peek(self.session_for(result.rig, result.name), lines)
        return filter_peek_output(raw)
