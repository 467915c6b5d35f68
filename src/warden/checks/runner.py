"""Ordered check registry with report-only and report-and-fix modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TextIO

from .. import log as warden_log
from .base import Check, CheckContext, CheckResult, CheckStatus

_STATUS_GLYPHS = {
    CheckStatus.OK: "✓",
    CheckStatus.FIXED: "✓",
    CheckStatus.WARNING: "⚠",
    CheckStatus.ERROR: "✖",
}


_log = warden_log.component("checks")


@dataclass
class Summary:
    total: int = 0
    ok: int = 0
    fixed: int = 0
    warnings: int = 0
    errors: int = 0

    def record(self, result: CheckResult) -> None:
        self.total += 1
        if result.status is CheckStatus.OK:
            self.ok += 1
        elif result.status is CheckStatus.FIXED:
            self.fixed += 1
        elif result.status is CheckStatus.WARNING:
            self.warnings += 1
        else:
            self.errors += 1


@dataclass
class Report:
    """Results of one run, in registration order."""

    results: list[CheckResult] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)

    def add(self, result: CheckResult) -> None:
        self.results.append(result)
        self.summary.record(result)

    def has_errors(self) -> bool:
        return any(result.status is CheckStatus.ERROR for result in self.results)


def format_result(result: CheckResult, *, indent: int = 0, verbose: bool = False) -> list[str]:
    """Render one result as progress lines.

    Example:
        >>> from warden.checks.base import CheckResult, CheckStatus
        >>> format_result(CheckResult("layout", CheckStatus.OK, "fine"), indent=2)
        ['  ✓ layout: fine']
    """
    pad = " " * indent
    glyph = _STATUS_GLYPHS[result.status]
    lines = [f"{pad}{glyph} {result.name}: {result.message}"]
    if verbose or result.status is not CheckStatus.OK:
        lines.extend(f"{pad}    {detail}" for detail in result.details)
        if result.fix_hint and result.needs_attention:
            lines.append(f"{pad}    → {result.fix_hint}")
    return lines


class CheckRunner:
    """Run registered checks in order and aggregate a report."""

    def __init__(self) -> None:
        self._checks: list[Check] = []

    @property
    def checks(self) -> tuple[Check, ...]:
        return tuple(self._checks)

    def register(self, check: Check) -> None:
        self._checks.append(check)

    def register_all(self, *checks: Check) -> None:
        self._checks.extend(checks)

    def _detect(self, check: Check, ctx: CheckContext) -> CheckResult:
        try:
            return check.run(ctx)
        except Exception as exc:
            _log.debug(f"check crashed name={check.name} error={exc!r}")
            return CheckResult(
                name=check.name,
                status=CheckStatus.ERROR,
                message=f"check {check.name} failed: {exc}",
            )

    def _remediate(self, check: Check, ctx: CheckContext, result: CheckResult) -> CheckResult:
        if not result.needs_attention:
            return result
        try:
            fixable = check.can_fix(ctx)
        except Exception as exc:
            _log.debug(f"can_fix crashed name={check.name} error={exc!r}")
            fixable = False
        if not fixable:
            return result
        try:
            check.fix(ctx)
        except Exception as exc:
            _log.debug(f"fix failed name={check.name} error={exc!r}")
            result.status = CheckStatus.ERROR
            result.details.append(f"fix failed: {exc}")
            return result
        result.status = CheckStatus.FIXED
        result.fix_applied = True
        result.message = f"{result.message} (fixed)"
        return result

    def _execute(
        self,
        ctx: CheckContext,
        *,
        fix: bool,
        out: TextIO | None = None,
        indent: int = 0,
    ) -> Report:
        report = Report()
        for check in self._checks:
            result = self._detect(check, ctx)
            if fix:
                result = self._remediate(check, ctx, result)
            report.add(result)
            if out is not None:
                for line in format_result(result, indent=indent, verbose=ctx.verbose):
                    out.write(line + "\n")
                out.flush()
        _log.debug(
            f"run complete fix={fix} total={report.summary.total} "
            f"fixed={report.summary.fixed} warnings={report.summary.warnings} "
            f"errors={report.summary.errors}"
        )
        return report

    def run(self, ctx: CheckContext) -> Report:
        """Detect only; the workspace is not modified."""
        return self._execute(ctx, fix=False)

    def fix(self, ctx: CheckContext) -> Report:
        """Detect and apply fixes for checks that need and allow them."""
        return self._execute(ctx, fix=True)

    def run_streaming(self, ctx: CheckContext, out: TextIO, indent: int = 0) -> Report:
        return self._execute(ctx, fix=False, out=out, indent=indent)

    def fix_streaming(self, ctx: CheckContext, out: TextIO, indent: int = 0) -> Report:
        return self._execute(ctx, fix=True, out=out, indent=indent)
