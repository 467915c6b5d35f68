"""Check contracts shared by the registry and the built-in checks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class CheckStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
    FIXED = "fixed"


class CheckCategory(str, Enum):
    STRUCTURAL = "structural"
    CONFIG = "config"
    RUNTIME = "runtime"


@dataclass(frozen=True)
class CheckContext:
    """Inputs shared by every check in a run.

    Attributes:
        workspace_root: Root of the workspace under inspection.
        verbose: Emit details for passing checks too.
        no_start: Fixes must not start daemons or sessions.
    """

    workspace_root: Path
    verbose: bool = False
    no_start: bool = False


@dataclass
class CheckResult:
    """Outcome of one check in one run."""

    name: str
    status: CheckStatus
    message: str
    details: list[str] = field(default_factory=list)
    fix_hint: str | None = None
    fix_applied: bool = False

    @property
    def needs_attention(self) -> bool:
        return self.status in (CheckStatus.WARNING, CheckStatus.ERROR)


class Check(ABC):
    """A workspace health check with an optional fix.

    Subclasses set ``name``/``description``/``category`` and implement
    ``run``. Fixable checks override ``can_fix`` and ``fix``; ``fix`` raises
    on failure and must be idempotent.
    """

    name: str = "check"
    description: str = ""
    category: CheckCategory = CheckCategory.CONFIG

    @abstractmethod
    def run(self, ctx: CheckContext) -> CheckResult:
        """Detect the defect without mutating the workspace."""

    def can_fix(self, ctx: CheckContext) -> bool:
        return False

    def fix(self, ctx: CheckContext) -> None:
        raise NotImplementedError(f"{self.name} has no fix")

    def ok(self, message: str, details: list[str] | None = None) -> CheckResult:
        return CheckResult(self.name, CheckStatus.OK, message, list(details or []))

    def warning(
        self, message: str, details: list[str] | None = None, fix_hint: str | None = None
    ) -> CheckResult:
        return CheckResult(self.name, CheckStatus.WARNING, message, list(details or []), fix_hint)

    def error(
        self, message: str, details: list[str] | None = None, fix_hint: str | None = None
    ) -> CheckResult:
        return CheckResult(self.name, CheckStatus.ERROR, message, list(details or []), fix_hint)
