# ruff: noqa: E402

from __future__ import annotations

import datetime as dt
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from warden.fleet.collaborators import PolecatInfo

NOW = dt.datetime(2026, 3, 1, 12, 0, 0, tzinfo=dt.timezone.utc)

BEAD_SHOW_OUTPUT = """\
○ gt-abc · Fix login redirect [● P2 · IN_PROGRESS]
Owner: alpha
Assignee: gastown/polecats/alpha
attached_molecule: gt-wisp-x1
"""

WISP_SHOW_NO_CLOSED = """\
◐ gt-wisp-x1 · mol-polecat-work [● P2 · OPEN]
Children:
  ↳ gt-wisp-x1.1: Load context ● P2
  ↳ gt-wisp-x1.2: Set up working branch ● P2
  ↳ gt-wisp-x1.3: Verify tests pass ● P2
"""

WISP_SHOW_TWO_CLOSED = """\
◐ gt-wisp-x1 · mol-polecat-work [● P2 · OPEN]
Children:
  ↳ gt-wisp-x1.1: Load context ● P2 ✓
  ↳ gt-wisp-x1.2: Set up working branch ● P2 ✓
  ↳ gt-wisp-x1.3: Verify tests pass ● P2
"""


def write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


def make_workspace(root: Path, *, deacon: bool = True) -> Path:
    """Create a minimal workspace with the marker and top-level roles."""
    write_json(root / "mayor" / "town.json", {"type": "town", "version": 1, "name": "test"})
    if deacon:
        (root / "deacon").mkdir(parents=True, exist_ok=True)
    return root


def add_rig(
    root: Path,
    name: str,
    *,
    crew: tuple[str, ...] = (),
    polecats: tuple[str, ...] = (),
    witness: bool = False,
    refinery: bool = False,
) -> Path:
    rig = root / name
    rig.mkdir(parents=True, exist_ok=True)
    for member in crew:
        (rig / "crew" / member).mkdir(parents=True, exist_ok=True)
    for member in polecats:
        (rig / "polecats" / member).mkdir(parents=True, exist_ok=True)
    if witness:
        (rig / "witness").mkdir(exist_ok=True)
    if refinery:
        (rig / "refinery").mkdir(exist_ok=True)
    return rig


class FakeFleet:
    def __init__(self, polecats: dict[str, list[PolecatInfo]] | None = None) -> None:
        self.polecats = polecats or {}

    def list_rigs(self) -> list[str]:
        return list(self.polecats)

    def list_polecats(self, rig: str) -> list[PolecatInfo]:
        return list(self.polecats.get(rig, []))


@dataclass
class FakeSessions:
    created: dict[str, dt.datetime] = field(default_factory=dict)
    output: dict[str, str] = field(default_factory=dict)
    running: set[str] = field(default_factory=set)
    deliver: bool = True
    start_ok: bool = True
    sent: list[tuple[str, str]] = field(default_factory=list)
    started: list[tuple[str, Path]] = field(default_factory=list)

    def session_created(self, session: str) -> dt.datetime | None:
        return self.created.get(session)

    def peek(self, session: str, lines: int) -> str:
        return self.output.get(session, "")

    def send_message(self, session: str, message: str) -> bool:
        self.sent.append((session, message))
        return self.deliver

    def has_session(self, session: str) -> bool:
        return session in self.running

    def start_session(self, session: str, cwd: Path) -> bool:
        self.started.append((session, cwd))
        if self.start_ok:
            self.running.add(session)
        return self.start_ok


class FakeBranches:
    def __init__(self, branches: dict[str, list[str]] | None = None) -> None:
        self.branches = branches or {}

    def list_branches(self, rig: str) -> list[str]:
        return list(self.branches.get(rig, []))


class FakeTracker:
    def __init__(self, records: dict[str, str] | None = None) -> None:
        self.records = records or {}
        self.calls: list[tuple[str, str]] = []

    def show(self, record_id: str, *, branch: str = "") -> str:
        self.calls.append((record_id, branch))
        return self.records.get(record_id, "")
