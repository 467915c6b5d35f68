from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import warden.cli as cli
from tests.warden.helpers import (
    BEAD_SHOW_OUTPUT,
    NOW,
    WISP_SHOW_NO_CLOSED,
    FakeBranches,
    FakeFleet,
    FakeSessions,
    FakeTracker,
    make_workspace,
)
from warden.commands import patrol
from warden.fleet.collaborators import PolecatInfo
from warden.fleet.drift import NUDGE_MESSAGE, DriftMonitor


@pytest.fixture
def town(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = make_workspace(tmp_path / "town")
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def sessions() -> FakeSessions:
    return FakeSessions(created={"gt-gastown-alpha": NOW - dt.timedelta(minutes=12)})


@pytest.fixture
def monitor(sessions: FakeSessions) -> DriftMonitor:
    return DriftMonitor(
        fleet=FakeFleet({"gastown": [PolecatInfo("gastown", "alpha", "working", "gt-abc")]}),
        sessions=sessions,
        branches=FakeBranches({"gastown": ["main"]}),
        tracker=FakeTracker({"gt-abc": BEAD_SHOW_OUTPUT, "gt-wisp-x1": WISP_SHOW_NO_CLOSED}),
        clock=lambda: NOW,
    )


def test_agent_mode_prints_json_results(town: Path, monitor: DriftMonitor) -> None:
    with patch("warden.commands.patrol.build_monitor", return_value=monitor):
        result = CliRunner().invoke(cli.app, ["patrol", "step-drift", "--agent"])

    assert result.exit_code == 0
    [record] = json.loads(result.stdout)
    assert record["name"] == "alpha"
    assert record["drifting"] is True
    assert record["nudged"] is False
    assert record["branch"] == ""


def test_agent_mode_with_nudge_sends_one_message(
    town: Path, monitor: DriftMonitor, sessions: FakeSessions
) -> None:
    with patch("warden.commands.patrol.build_monitor", return_value=monitor):
        result = CliRunner().invoke(cli.app, ["patrol", "step-drift", "--agent", "--nudge"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)[0]["nudged"] is True
    assert sessions.sent == [("gt-gastown-alpha", NUDGE_MESSAGE)]


def test_pretty_mode_prints_header_and_drift_marker(town: Path, monitor: DriftMonitor) -> None:
    with patch("warden.commands.patrol.build_monitor", return_value=monitor):
        result = CliRunner().invoke(
            cli.app, ["--no-color", "patrol", "step-drift", "--threshold", "10"]
        )

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == "patrol-step-drift"
    assert lines[1] == "=" * 80
    assert "Step drift detected (12m, 0 steps closed)" in result.stdout


def test_threshold_above_age_is_not_drifting(town: Path, monitor: DriftMonitor) -> None:
    with patch("warden.commands.patrol.build_monitor", return_value=monitor):
        result = CliRunner().invoke(
            cli.app, ["patrol", "step-drift", "--agent", "--threshold", "15"]
        )

    assert json.loads(result.stdout)[0]["drifting"] is False


def test_negative_threshold_is_rejected(town: Path) -> None:
    result = CliRunner().invoke(cli.app, ["patrol", "step-drift", "--threshold", "-1"])

    assert result.exit_code == 1


def test_watch_mode_runs_until_interrupted(town: Path, monitor: DriftMonitor) -> None:
    def fake_loop(cycle, interval_seconds: float) -> int:
        assert interval_seconds == 7
        cycle()
        raise KeyboardInterrupt

    with (
        patch("warden.commands.patrol.build_monitor", return_value=monitor),
        patch("warden.commands.patrol.watch_loop", fake_loop),
    ):
        result = CliRunner().invoke(cli.app, ["patrol", "step-drift", "7", "--watch"])

    assert result.exit_code == 0
    assert "\033[2J\033[H" in result.stdout
    assert "patrol-step-drift  (" in result.stdout


def test_drift_options_from_args() -> None:
    options = patrol.drift_options(
        SimpleNamespace(threshold=8, nudge=True, agent=False, watch=True, interval="abc")
    )

    assert options == patrol.DriftOptions(
        threshold_minutes=8, nudge=True, agent=False, watch=True, interval_seconds=30
    )


def test_cli_passes_flags_to_command() -> None:
    captured: list[SimpleNamespace] = []
    with patch("warden.cli.step_drift_cmd", captured.append):
        result = CliRunner().invoke(
            cli.app, ["patrol", "step-drift", "15", "-w", "--nudge", "--threshold", "3"]
        )

    assert result.exit_code == 0
    assert captured[0].interval == "15"
    assert captured[0].watch is True
    assert captured[0].nudge is True
    assert captured[0].threshold == 3
    assert captured[0].agent is False
