from __future__ import annotations

import io
import json
import threading

from rich.console import Console

from warden.fleet import render, watch
from warden.fleet.drift import STEP_LABELS, StepDriftResult


def _result(**overrides: object) -> StepDriftResult:
    fields: dict[str, object] = {
        "rig": "gastown",
        "name": "alpha",
        "bead": "gt-abc",
        "title": "Fix login redirect",
        "state": "working",
        "age_min": 12.0,
        "closed": 0,
        "total": 9,
        "drifting": True,
        "nudged": False,
        "branch": "polecat-alpha-1700000500",
    }
    fields.update(overrides)
    return StepDriftResult(**fields)


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, no_color=True, soft_wrap=True), buffer


def test_render_json_is_array_of_snake_case_records() -> None:
    payload = json.loads(render.render_json([_result(), _result(name="beta", drifting=False)]))

    assert [item["name"] for item in payload] == ["alpha", "beta"]
    assert payload[0]["age_min"] == 12.0
    assert payload[0]["drifting"] is True
    assert payload[0]["branch"] == "polecat-alpha-1700000500"


def test_render_json_empty_is_empty_array() -> None:
    assert json.loads(render.render_json([])) == []


def test_summary_line_shows_state_only_when_not_working() -> None:
    working = render.summary_line(_result())
    idle = render.summary_line(_result(state="idle", age_min=0.0))

    assert "(working)" not in working
    assert working.endswith("Fix login redirect  12m")
    assert idle.endswith("Fix login redirect (idle) ")


def test_summary_line_truncates_long_titles() -> None:
    line = render.summary_line(_result(title="x" * 80))

    assert "x" * 55 in line
    assert "x" * 56 not in line


def test_header_lines_with_and_without_stamp() -> None:
    assert render.header_lines() == ["patrol-step-drift", "=" * 80]
    assert render.header_lines("12:00:05")[0] == "patrol-step-drift  (12:00:05)"


def test_render_pretty_marks_drifting_and_nudged_workers() -> None:
    console, buffer = _console()

    render.render_pretty([_result(nudged=True)], console)

    output = buffer.getvalue()
    assert "▶ alpha" in output
    assert "⚡ Step drift detected (12m, 0 steps closed)" in output
    assert "⚡ Nudged" in output
    assert f"Steps: {STEP_LABELS}" in output
    assert render.LEGEND in output


def test_render_pretty_omits_markers_for_healthy_workers() -> None:
    console, buffer = _console()

    render.render_pretty([_result(drifting=False, closed=3)], console)

    output = buffer.getvalue()
    assert "Step drift detected" not in output
    assert "●●●○○○○○○" in output


def test_render_pretty_includes_peek_tail() -> None:
    console, buffer = _console()
    pane = "\n".join(f"line {index}" for index in range(30))

    render.render_pretty([_result()], console, peek=lambda result: pane)

    output = buffer.getvalue()
    assert "    │ line 29" in output
    assert "    │ line 10" in output
    assert "line 9\n" not in output


def test_render_pretty_empty_fleet() -> None:
    console, buffer = _console()

    render.render_pretty([], console)

    assert buffer.getvalue() == render.EMPTY_MESSAGE + "\n"


def test_watch_loop_stops_after_max_cycles() -> None:
    ticks: list[int] = []

    completed = watch.watch_loop(lambda: ticks.append(1), 0, max_cycles=3)

    assert completed == 3
    assert len(ticks) == 3


def test_watch_loop_stops_when_event_is_set() -> None:
    stop = threading.Event()
    ticks: list[int] = []

    def cycle() -> None:
        ticks.append(1)
        if len(ticks) == 2:
            stop.set()

    completed = watch.watch_loop(cycle, 60, stop=stop)

    assert completed == 2


def test_watch_loop_with_preset_event_never_ticks() -> None:
    stop = threading.Event()
    stop.set()

    assert watch.watch_loop(lambda: None, 0, stop=stop) == 0
