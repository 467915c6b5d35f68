from __future__ import annotations

from pathlib import Path

import pytest

from tests.warden.helpers import make_workspace, read_json, write_json
from warden import config, paths, workspace
from warden.models import DaemonConfig, PatrolConfig, parse_duration


@pytest.mark.parametrize(
    ("value", "seconds"),
    [("250ms", 0.25), ("30s", 30.0), ("5m", 300.0), ("1h", 3600.0), (" 2m ", 120.0)],
)
def test_parse_duration_accepts_compact_units(value: str, seconds: float) -> None:
    assert parse_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "5", "0s", "-1m", "5 minutes", "1d"])
def test_parse_duration_rejects_bad_values(value: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(value)


def test_daemon_config_defaults_include_step_drift_patrol() -> None:
    cfg = DaemonConfig()

    assert cfg.type == "daemon-patrol-config"
    assert cfg.version == 1
    assert cfg.heartbeat.interval == "3m"
    assert cfg.patrols["step-drift"].threshold_minutes == 5
    assert cfg.patrols["step-drift"].nudge is True


def test_patrol_config_rejects_negative_threshold() -> None:
    with pytest.raises(ValueError):
        PatrolConfig(threshold_minutes=-1)


def test_ensure_daemon_config_writes_once(tmp_path: Path) -> None:
    root = make_workspace(tmp_path / "town")

    assert config.ensure_daemon_config(root) is True
    assert config.ensure_daemon_config(root) is False

    payload = read_json(paths.daemon_config_path(root))
    assert payload["type"] == "daemon-patrol-config"
    assert "step-drift" in payload["patrols"]


def test_ensure_daemon_config_leaves_existing_file_alone(tmp_path: Path) -> None:
    root = make_workspace(tmp_path / "town")
    path = paths.daemon_config_path(root)
    write_json(path, {"type": "daemon-patrol-config", "version": 1, "custom": True})

    assert config.ensure_daemon_config(root) is False
    assert read_json(path)["custom"] is True


def test_load_daemon_config_round_trips_defaults(tmp_path: Path) -> None:
    root = make_workspace(tmp_path / "town")
    config.ensure_daemon_config(root)

    loaded = config.load_daemon_config(paths.daemon_config_path(root))

    assert loaded == DaemonConfig()


@pytest.mark.parametrize(
    "content",
    [
        "{ not json",
        '{"type": "something-else"}',
        '{"type": "daemon-patrol-config", "version": 0}',
        '{"type": "daemon-patrol-config", "heartbeat": {"interval": "soon"}}',
    ],
)
def test_load_daemon_config_rejects_invalid_files(tmp_path: Path, content: str) -> None:
    path = tmp_path / "daemon.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(config.DaemonConfigError):
        config.load_daemon_config(path)


def test_load_daemon_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(config.DaemonConfigError, match="missing"):
        config.load_daemon_config(tmp_path / "daemon.json")


def test_load_daemon_config_rejects_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "daemon.json"
    path.write_bytes(b'{"type": "daemon-patrol-config", "note": "\xff"}')

    with pytest.raises(config.DaemonConfigError, match="cannot read"):
        config.load_daemon_config(path)


def test_write_json_replaces_file_without_leaving_staging_files(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    config.write_json(path, {"model": "opus"})
    config.write_json(path, {"model": "sonnet", "hooks": {}})

    assert path.read_text(encoding="utf-8").endswith("}\n")
    assert config.load_json(path) == {"model": "sonnet", "hooks": {}}
    assert [entry.name for entry in path.parent.iterdir()] == ["settings.json"]


def test_config_dir_honors_environment_override(tmp_path: Path) -> None:
    assert paths.warden_config_dir() == tmp_path / "warden-config"
    assert paths.hooks_base_path().parent == tmp_path / "warden-config"


def test_find_workspace_root_walks_up_from_nested_dir(tmp_path: Path) -> None:
    root = make_workspace(tmp_path / "town")
    nested = root / "gastown" / "crew" / "max"
    nested.mkdir(parents=True)

    assert workspace.find_workspace_root(nested) == root.resolve()


def test_find_workspace_root_returns_none_outside_workspace(tmp_path: Path) -> None:
    assert workspace.find_workspace_root(tmp_path) is None
    with pytest.raises(workspace.WorkspaceNotFoundError):
        workspace.require_workspace_root(tmp_path)


def test_workspace_env_override_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    root = make_workspace(tmp_path / "town")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    assert workspace.find_workspace_root(elsewhere) == root.resolve()


def test_rig_dirs_skip_roles_hidden_and_plain_dirs(tmp_path: Path) -> None:
    root = make_workspace(tmp_path / "town")
    (root / "gastown" / "witness").mkdir(parents=True)
    (root / ".hidden" / "crew").mkdir(parents=True)
    (root / "docs").mkdir()

    assert [rig.name for rig in workspace.list_rig_dirs(root)] == ["gastown"]


def test_load_marker_validates_town_json(tmp_path: Path) -> None:
    root = make_workspace(tmp_path / "town")

    assert workspace.load_marker(root).name == "test"

    paths.workspace_marker_path(root).write_text("[]", encoding="utf-8")
    with pytest.raises(workspace.InvalidMarkerError):
        workspace.load_marker(root)
