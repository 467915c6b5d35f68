"""Configuration documents for Warden workspaces.

JSON on disk is read leniently (absent files are ``None``) and written
atomically, so a settings file an agent is reading never appears half
written. The daemon-lifecycle config is validated with Pydantic.

Example:
    >>> from warden.config import hash_text
    >>> hash_text("abc")[:12]
    'ba7816bf8f01'
"""

import hashlib
import json
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ValidationError

from . import paths
from .models import DaemonConfig


class DaemonConfigError(ValueError):
    """Raised when the daemon-lifecycle config cannot be loaded."""


def hash_text(text: str) -> str:
    digest = hashlib.sha256()
    digest.update(text.encode("utf-8"))
    return digest.hexdigest()


def load_json(path: Path) -> object | None:
    """Return the decoded document at ``path``, or ``None`` when absent.

    Example:
        >>> from pathlib import Path
        >>> load_json(Path("no-such-document.json")) is None
        True
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return json.loads(text)


def write_json(path: Path, payload: dict | BaseModel) -> None:
    """Atomically replace ``path`` with ``payload`` rendered as indented JSON.

    Models are dumped in JSON mode without ``None`` fields. Parent
    directories are created as needed.
    """
    document = (
        payload.model_dump(mode="json", exclude_none=True)
        if isinstance(payload, BaseModel)
        else payload
    )
    rendered = json.dumps(document, indent=2) + "\n"
    paths.ensure_dir(path.parent)
    fd, staging = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(rendered)
        os.replace(staging, path)
    except BaseException:
        Path(staging).unlink(missing_ok=True)
        raise


def load_daemon_config(path: Path) -> DaemonConfig:
    """Load and validate a daemon-lifecycle config file.

    Raises:
        DaemonConfigError: If the file cannot be read or does not validate.
    """
    try:
        payload = load_json(path)
    except (OSError, ValueError) as exc:
        raise DaemonConfigError(f"cannot read {path}: {exc}") from exc
    if payload is None:
        raise DaemonConfigError(f"missing daemon config at {path}")
    try:
        return DaemonConfig.model_validate(payload)
    except ValidationError as exc:
        raise DaemonConfigError(f"invalid daemon config at {path}: {exc}") from exc


def ensure_daemon_config(root: Path) -> bool:
    """Create the daemon-lifecycle config with defaults when absent.

    Returns:
        ``True`` when a new file was written.
    """
    path = paths.daemon_config_path(root)
    if path.exists():
        return False
    write_json(path, DaemonConfig())
    return True
