"""Bundled workspace templates and the identity document sync."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from importlib import resources
from pathlib import Path

from . import log as warden_log
from . import paths

IDENTITY_TEMPLATE = "CLAUDE.md.tmpl"

_log = warden_log.component("upgrade")


class DocAction(str, Enum):
    UNCHANGED = "unchanged"
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class IdentitySyncResult:
    """What an identity sync did (or would do under dry run)."""

    action: DocAction
    link_created: bool = False

    @property
    def changed(self) -> int:
        return int(self.action is not DocAction.UNCHANGED) + int(self.link_created)


def _read_template(*parts: str) -> str:
    """Read a bundled template file from the package.

    Example:
        >>> isinstance(_read_template(IDENTITY_TEMPLATE), str)
        True
    """
    return (
        resources.files("warden")
        .joinpath("templates")
        .joinpath(*parts)
        .read_text(encoding="utf-8")
    )


def workspace_identity_text() -> str:
    """Return the expected content of the workspace identity document."""
    return _read_template(IDENTITY_TEMPLATE)


def _link_missing(link: Path) -> bool:
    return not link.is_symlink() and not link.exists()


def sync_identity_doc(root: Path, *, dry_run: bool = False) -> IdentitySyncResult:
    """Bring the workspace identity document and its companion link up to date.

    Raises:
        OSError: If the document cannot be read or written.
    """
    doc = paths.identity_doc_path(root)
    link = paths.identity_link_path(root)
    expected = workspace_identity_text().encode("utf-8")
    current = doc.read_bytes() if doc.exists() else None

    if current == expected:
        action = DocAction.UNCHANGED
    elif current is None:
        action = DocAction.CREATED
    else:
        action = DocAction.UPDATED

    needs_link = _link_missing(link)
    if dry_run:
        return IdentitySyncResult(action=action, link_created=needs_link)

    if action is not DocAction.UNCHANGED:
        doc.write_bytes(expected)
        _log.debug(f"identity doc {action.value} path={doc}")
    if needs_link:
        link.symlink_to(doc.name)
        _log.debug(f"identity link created path={link}")
    return IdentitySyncResult(action=action, link_created=needs_link)
