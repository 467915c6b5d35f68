"""Command implementations exposed by the Warden CLI."""

from .doctor import check_workspace
from .hooks import list_hooks, sync_hooks
from .patrol import step_drift
from .upgrade import upgrade_workspace

__all__ = [
    "check_workspace",
    "list_hooks",
    "step_drift",
    "sync_hooks",
    "upgrade_workspace",
]
