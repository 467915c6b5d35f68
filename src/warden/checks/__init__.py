"""Check registry, runner and built-in workspace checks."""

from .base import Check, CheckCategory, CheckContext, CheckResult, CheckStatus
from .builtin import (
    BinaryCheck,
    DaemonConfigCheck,
    DeaconSessionCheck,
    HooksBaseCheck,
    HooksSyncCheck,
    WorkspaceLayoutCheck,
    workspace_checks,
)
from .runner import CheckRunner, Report, Summary, format_result

__all__ = [
    "BinaryCheck",
    "Check",
    "CheckCategory",
    "CheckContext",
    "CheckResult",
    "CheckRunner",
    "CheckStatus",
    "DaemonConfigCheck",
    "DeaconSessionCheck",
    "HooksBaseCheck",
    "HooksSyncCheck",
    "Report",
    "Summary",
    "WorkspaceLayoutCheck",
    "format_result",
    "workspace_checks",
]
