"""Path helpers for locating Warden configuration and workspace files."""

import os
from pathlib import Path

from platformdirs import user_config_dir

WARDEN_APP_NAME = "warden"
CONFIG_DIR_ENV = "WARDEN_CONFIG_DIR"

HOOKS_BASE_FILENAME = "hooks-base.json"
HOOKS_OVERRIDES_DIRNAME = "hooks-overrides"

MAYOR_DIRNAME = "mayor"
DEACON_DIRNAME = "deacon"
WORKSPACE_MARKER_FILENAME = "town.json"
DAEMON_CONFIG_FILENAME = "daemon.json"
DOLT_DATA_DIRNAME = ".dolt-data"
BEADS_DIRNAME = ".beads"
FORMULAS_DIRNAME = "formulas"
IDENTITY_DOC_FILENAME = "CLAUDE.md"
IDENTITY_LINK_FILENAME = "AGENTS.md"
SETTINGS_DIRNAME = ".claude"
SETTINGS_FILENAME = "settings.json"


def warden_config_dir() -> Path:
    """Return the user-level Warden configuration directory.

    ``WARDEN_CONFIG_DIR`` takes precedence over the platform default.

    Returns:
        Path to the configuration directory.

    Example:
        >>> isinstance(warden_config_dir(), Path)
        True
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(WARDEN_APP_NAME))


def hooks_base_path() -> Path:
    """Return the path to the base hooks configuration.

    Example:
        >>> hooks_base_path().name
        'hooks-base.json'
    """
    return warden_config_dir() / HOOKS_BASE_FILENAME


def hooks_overrides_dir() -> Path:
    """Return the directory holding hook override fragments.

    Example:
        >>> hooks_overrides_dir().name
        'hooks-overrides'
    """
    return warden_config_dir() / HOOKS_OVERRIDES_DIRNAME


def workspace_marker_path(root: Path) -> Path:
    """Return the marker file identifying a workspace root.

    Example:
        >>> workspace_marker_path(Path("/town")).as_posix()
        '/town/mayor/town.json'
    """
    return root / MAYOR_DIRNAME / WORKSPACE_MARKER_FILENAME


def daemon_config_path(root: Path) -> Path:
    """Return the daemon-lifecycle config path for a workspace.

    Example:
        >>> daemon_config_path(Path("/town")).as_posix()
        '/town/mayor/daemon.json'
    """
    return root / MAYOR_DIRNAME / DAEMON_CONFIG_FILENAME


def dolt_data_dir(root: Path) -> Path:
    return root / DOLT_DATA_DIRNAME


def rig_dolt_dir(root: Path, rig: str) -> Path:
    return dolt_data_dir(root) / rig


def identity_doc_path(root: Path) -> Path:
    return root / IDENTITY_DOC_FILENAME


def identity_link_path(root: Path) -> Path:
    return root / IDENTITY_LINK_FILENAME


def formulas_dir(root: Path) -> Path:
    return root / BEADS_DIRNAME / FORMULAS_DIRNAME


def settings_path(owner_dir: Path) -> Path:
    """Return the settings file path for a session owner directory.

    Example:
        >>> settings_path(Path("/town/mayor")).as_posix()
        '/town/mayor/.claude/settings.json'
    """
    return owner_dir / SETTINGS_DIRNAME / SETTINGS_FILENAME


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
