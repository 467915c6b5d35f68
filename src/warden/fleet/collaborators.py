"""Narrow interfaces to fleet collaborators and their subprocess adapters.

Every adapter degrades a failed query to an empty or zero value and logs
it; nothing here raises for collaborator failures.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .. import exec as exec_util
from .. import log as warden_log
from .. import paths
from ..models import PolecatRecord, RigRecord
from .parsing import parse_branch_listing

BRANCH_ENV = "BD_DOLT_BRANCH"
DEFAULT_SESSION_PREFIX = "gt"


_log = warden_log.component("fleet")


@dataclass(frozen=True)
class PolecatInfo:
    """Facts about one active worker from the fleet directory."""

    rig: str
    name: str
    state: str
    bead: str


def session_name(rig: str, name: str, prefix: str = DEFAULT_SESSION_PREFIX) -> str:
    """Return the terminal session name for a worker.

    Example:
        >>> session_name("gastown", "alpha")
        'gt-gastown-alpha'
    """
    return f"{prefix}-{rig}-{name}"


class FleetDirectory(Protocol):
    def list_rigs(self) -> list[str]: ...

    def list_polecats(self, rig: str) -> list[PolecatInfo]: ...


class SessionManager(Protocol):
    def session_created(self, session: str) -> dt.datetime | None: ...

    def peek(self, session: str, lines: int) -> str: ...

    def send_message(self, session: str, message: str) -> bool: ...

    def has_session(self, session: str) -> bool: ...

    def start_session(self, session: str, cwd: Path) -> bool: ...


class BranchStore(Protocol):
    def list_branches(self, rig: str) -> list[str]: ...


class TaskTracker(Protocol):
    def show(self, record_id: str, *, branch: str = "") -> str: ...


def _run_text(
    argv: tuple[str, ...],
    *,
    runner: exec_util.CommandRunner | None,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
) -> str | None:
    try:
        return exec_util.query_text(argv, runner=runner, cwd=cwd, env=env)
    except exec_util.CommandExecutionError as exc:
        _log.debug(f"query failed argv={' '.join(argv)} detail={exc}")
        return None


class GtFleetDirectory:
    """Fleet listing backed by ``gt rig list`` and ``gt polecat list``."""

    def __init__(
        self, *, gt_path: str = "gt", runner: exec_util.CommandRunner | None = None
    ) -> None:
        self.gt_path = gt_path
        self.runner = runner

    def _list(self, argv: tuple[str, ...], model_type: type, context: str) -> list:
        try:
            result = exec_util.execute(exec_util.CommandRequest(argv=argv), runner=self.runner)
            return exec_util.parse_json_records(result, model_type, context=context)
        except (exec_util.CommandExecutionError, exec_util.CommandParseError) as exc:
            _log.debug(f"listing failed context={context} detail={exc}")
            return []

    def list_rigs(self) -> list[str]:
        records: list[RigRecord] = self._list(
            (self.gt_path, "rig", "list", "--json"), RigRecord, "rig list"
        )
        return [record.name for record in records if record.name]

    def list_polecats(self, rig: str) -> list[PolecatInfo]:
        records: list[PolecatRecord] = self._list(
            (self.gt_path, "polecat", "list", rig, "--json"), PolecatRecord, f"polecat list {rig}"
        )
        return [
            PolecatInfo(
                rig=record.rig or rig,
                name=record.name,
                state=record.state,
                bead=record.issue,
            )
            for record in records
        ]


class TmuxSessionManager:
    """Session queries and messages backed by ``tmux``."""

    def __init__(self, *, runner: exec_util.CommandRunner | None = None) -> None:
        self.runner = runner

    def session_created(self, session: str) -> dt.datetime | None:
        raw = _run_text(
            ("tmux", "display-message", "-t", session, "-p", "#{session_created}"),
            runner=self.runner,
        )
        if raw is None:
            return None
        try:
            return dt.datetime.fromtimestamp(int(raw.strip()), tz=dt.timezone.utc)
        except (ValueError, OverflowError, OSError):
            _log.debug(f"unparsable session_created session={session} value={raw!r}")
            return None

    def peek(self, session: str, lines: int) -> str:
        raw = _run_text(
            ("tmux", "capture-pane", "-p", "-t", session, "-S", f"-{lines}"),
            runner=self.runner,
        )
        return raw or ""

    def send_message(self, session: str, message: str) -> bool:
        typed = _run_text(("tmux", "send-keys", "-t", session, "-l", message), runner=self.runner)
        if typed is None:
            return False
        entered = _run_text(("tmux", "send-keys", "-t", session, "Enter"), runner=self.runner)
        return entered is not None

    def has_session(self, session: str) -> bool:
        return _run_text(("tmux", "has-session", "-t", session), runner=self.runner) is not None

    def start_session(self, session: str, cwd: Path) -> bool:
        started = _run_text(
            ("tmux", "new-session", "-d", "-s", session, "-c", str(cwd)), runner=self.runner
        )
        return started is not None


class DoltBranchStore:
    """Branch listing for a rig's versioned data directory."""

    def __init__(self, root: Path, *, runner: exec_util.CommandRunner | None = None) -> None:
        self.root = root
        self.runner = runner

    def list_branches(self, rig: str) -> list[str]:
        rig_dir = paths.rig_dolt_dir(self.root, rig)
        if not rig_dir.is_dir():
            return []
        raw = _run_text(("dolt", "branch"), runner=self.runner, cwd=rig_dir)
        if raw is None:
            return []
        return parse_branch_listing(raw)


class BeadsTaskTracker:
    """Record renderings from ``bd show``, optionally pinned to a branch."""

    def __init__(
        self,
        *,
        bd_path: str = "bd",
        cwd: Path | None = None,
        runner: exec_util.CommandRunner | None = None,
    ) -> None:
        self.bd_path = bd_path
        self.cwd = cwd
        self.runner = runner

    def show(self, record_id: str, *, branch: str = "") -> str:
        if not record_id:
            return ""
        env = None
        if branch:
            env = exec_util.environment_with({BRANCH_ENV: branch})
        raw = _run_text(
            (self.bd_path, "show", record_id), runner=self.runner, cwd=self.cwd, env=env
        )
        return raw or ""
