"""Built-in workspace health checks."""

from __future__ import annotations

import shutil

from .. import config, hooks, paths, workspace
from ..fleet.collaborators import DEFAULT_SESSION_PREFIX, SessionManager, TmuxSessionManager
from .base import Check, CheckCategory, CheckContext, CheckResult

DEACON_SESSION = f"{DEFAULT_SESSION_PREFIX}-{paths.DEACON_DIRNAME}"


class WorkspaceLayoutCheck(Check):
    name = "workspace-layout"
    description = "Workspace marker is valid and top-level role directories exist"
    category = CheckCategory.STRUCTURAL

    def _missing(self, ctx: CheckContext) -> list[str]:
        return [
            role for role in workspace.TOP_LEVEL_ROLES if not (ctx.workspace_root / role).is_dir()
        ]

    def run(self, ctx: CheckContext) -> CheckResult:
        try:
            workspace.load_marker(ctx.workspace_root)
        except workspace.InvalidMarkerError as exc:
            return self.error(
                "workspace marker is malformed",
                details=[str(exc)],
                fix_hint=f"repair {paths.MAYOR_DIRNAME}/{paths.WORKSPACE_MARKER_FILENAME}",
            )
        missing = self._missing(ctx)
        if not missing:
            return self.ok("role directories present")
        return self.warning(
            f"{len(missing)} role director{'y' if len(missing) == 1 else 'ies'} missing",
            details=[f"missing: {role}/" for role in missing],
            fix_hint="warden doctor --fix",
        )

    def can_fix(self, ctx: CheckContext) -> bool:
        try:
            workspace.load_marker(ctx.workspace_root)
        except workspace.InvalidMarkerError:
            return False
        return bool(self._missing(ctx))

    def fix(self, ctx: CheckContext) -> None:
        for role in self._missing(ctx):
            paths.ensure_dir(ctx.workspace_root / role)


class HooksBaseCheck(Check):
    name = "hooks-base"
    description = "Hooks base configuration is present and parseable"
    category = CheckCategory.CONFIG

    def run(self, ctx: CheckContext) -> CheckResult:
        path = hooks.base_path()
        if not path.exists():
            return self.warning(
                "hooks base config not found (built-in default in use)",
                details=[str(path)],
                fix_hint="warden doctor --fix",
            )
        try:
            hooks.load_base()
        except hooks.ComputeError as exc:
            return self.error("hooks base config is malformed", details=[str(exc)])
        return self.ok("hooks base config valid")

    def can_fix(self, ctx: CheckContext) -> bool:
        return not hooks.base_path().exists()

    def fix(self, ctx: CheckContext) -> None:
        hooks.write_default_base()


class DaemonConfigCheck(Check):
    name = "daemon-config"
    description = "Daemon-lifecycle config is valid"
    category = CheckCategory.CONFIG

    def run(self, ctx: CheckContext) -> CheckResult:
        path = paths.daemon_config_path(ctx.workspace_root)
        if not path.exists():
            return self.warning(
                "daemon.json not found",
                details=[str(path)],
                fix_hint="warden upgrade",
            )
        try:
            config.load_daemon_config(path)
        except config.DaemonConfigError as exc:
            return self.error("daemon.json is invalid", details=[str(exc)])
        return self.ok("daemon.json present and valid")


class HooksSyncCheck(Check):
    name = "hooks-sync"
    description = "Managed settings files match their computed hooks"
    category = CheckCategory.CONFIG

    def run(self, ctx: CheckContext) -> CheckResult:
        targets = hooks.discover_targets(ctx.workspace_root)
        drifted: list[str] = []
        broken: list[str] = []
        for target in targets:
            status = hooks.target_status(target)
            if status == hooks.STATUS_ERROR:
                broken.append(f"{target.name}: {status}")
            elif status != hooks.STATUS_IN_SYNC:
                drifted.append(f"{target.name}: {status}")
        if broken:
            return self.error(
                f"{len(broken)} target(s) cannot be compared",
                details=broken + drifted,
                fix_hint="repair the listed settings files or overrides",
            )
        if drifted:
            return self.warning(
                f"{len(drifted)} of {len(targets)} target(s) out of sync",
                details=drifted,
                fix_hint="warden hooks sync",
            )
        return self.ok(f"{len(targets)} target(s) in sync")

    def can_fix(self, ctx: CheckContext) -> bool:
        return True

    def fix(self, ctx: CheckContext) -> None:
        summary = hooks.sync_all(ctx.workspace_root)
        if summary.failures:
            first = summary.failures[0]
            raise RuntimeError(
                f"{summary.errors} target(s) failed to sync; {first.target.name}: {first.message}"
            )


class BinaryCheck(Check):
    """A collaborator executable is available on PATH."""

    category = CheckCategory.RUNTIME

    def __init__(self, binary: str, purpose: str) -> None:
        self.binary = binary
        self.name = f"binary:{binary}"
        self.description = f"{binary} is installed ({purpose})"

    def run(self, ctx: CheckContext) -> CheckResult:
        location = shutil.which(self.binary)
        if location is None:
            return self.warning(
                f"{self.binary} not found on PATH",
                fix_hint=f"install {self.binary}",
            )
        return self.ok(f"{self.binary} found", details=[location])


class DeaconSessionCheck(Check):
    name = "deacon-session"
    description = "The deacon terminal session is running"
    category = CheckCategory.RUNTIME

    def __init__(self, sessions: SessionManager | None = None) -> None:
        self.sessions = sessions or TmuxSessionManager()

    def run(self, ctx: CheckContext) -> CheckResult:
        if self.sessions.has_session(DEACON_SESSION):
            return self.ok(f"session {DEACON_SESSION} running")
        hint = "warden doctor --fix" if not ctx.no_start else "rerun without --no-start"
        return self.warning(f"session {DEACON_SESSION} not running", fix_hint=hint)

    def can_fix(self, ctx: CheckContext) -> bool:
        return not ctx.no_start

    def fix(self, ctx: CheckContext) -> None:
        cwd = ctx.workspace_root / paths.DEACON_DIRNAME
        paths.ensure_dir(cwd)
        if not self.sessions.start_session(DEACON_SESSION, cwd):
            raise RuntimeError(f"could not start session {DEACON_SESSION}")


def workspace_checks(sessions: SessionManager | None = None) -> list[Check]:
    """Return the built-in checks in registration order."""
    return [
        WorkspaceLayoutCheck(),
        HooksBaseCheck(),
        DaemonConfigCheck(),
        HooksSyncCheck(),
        BinaryCheck("tmux", "session manager"),
        BinaryCheck("bd", "task tracker"),
        BinaryCheck("dolt", "branch store"),
        DeaconSessionCheck(sessions),
    ]
