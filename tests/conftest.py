# ruff: noqa: E402

import builtins
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import warden.log as warden_log
import warden.paths as paths
import warden.workspace as workspace


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path / "warden-config"))
    monkeypatch.delenv(workspace.WORKSPACE_ENV, raising=False)
    monkeypatch.delenv(warden_log.LOG_LEVEL_ENV, raising=False)
    monkeypatch.setattr(warden_log, "_configured_level", None)
    monkeypatch.setattr(warden_log, "_no_color_override", None)

    def fail_input(prompt: str = "") -> str:
        raise AssertionError("prompted unexpectedly")

    monkeypatch.setattr(builtins, "input", fail_input)
