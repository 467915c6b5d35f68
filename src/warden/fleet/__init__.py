"""Fleet drift monitoring over isolated worker branches."""

from .collaborators import (
    BeadsTaskTracker,
    BranchStore,
    DoltBranchStore,
    FleetDirectory,
    GtFleetDirectory,
    PolecatInfo,
    SessionManager,
    TaskTracker,
    TmuxSessionManager,
    session_name,
)
from .drift import (
    NUDGE_MESSAGE,
    STEP_LABELS,
    STEPS_ORDER,
    DriftMonitor,
    StepDriftResult,
    count_closed_steps,
    match_step,
    round_to_1,
)

__all__ = [
    "BeadsTaskTracker",
    "BranchStore",
    "DoltBranchStore",
    "DriftMonitor",
    "FleetDirectory",
    "GtFleetDirectory",
    "NUDGE_MESSAGE",
    "PolecatInfo",
    "STEPS_ORDER",
    "STEP_LABELS",
    "SessionManager",
    "StepDriftResult",
    "TaskTracker",
    "TmuxSessionManager",
    "count_closed_steps",
    "match_step",
    "round_to_1",
    "session_name",
]
