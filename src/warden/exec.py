"""Subprocess layer for collaborator queries.

Every external fact warden consumes (fleet listings, session state, branch
listings, task records) comes from a short-lived collaborator process.
Requests and results are plain values so a recording runner can stand in
for ``subprocess`` in tests.
"""

import json
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_TIMEOUT_SECONDS = 15.0
TIMEOUT_RETURNCODE = 124


@dataclass(frozen=True)
class CommandRequest:
    """One collaborator invocation."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS

    @property
    def display(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner(Protocol):
    """Runs a request; ``None`` means the executable could not be started."""

    def run(self, request: CommandRequest) -> CommandResult | None: ...


class SubprocessCommandRunner:
    def run(self, request: CommandRequest) -> CommandResult | None:
        try:
            completed = subprocess.run(
                list(request.argv),
                cwd=request.cwd,
                env=request.env,
                capture_output=True,
                text=True,
                check=False,
                timeout=request.timeout_seconds,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            return None
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                argv=request.argv,
                returncode=TIMEOUT_RETURNCODE,
                stdout=exc.stdout if isinstance(exc.stdout, str) else "",
                stderr=exc.stderr if isinstance(exc.stderr, str) else "",
                timed_out=True,
            )
        return CommandResult(
            argv=request.argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


_DEFAULT_RUNNER: CommandRunner = SubprocessCommandRunner()


@dataclass(frozen=True)
class CommandExecutionError(RuntimeError):
    """The collaborator was missing, timed out, or exited non-zero."""

    request: CommandRequest
    detail: str
    result: CommandResult | None = None

    def __str__(self) -> str:
        return self.detail


@dataclass(frozen=True)
class CommandParseError(RuntimeError):
    """The collaborator succeeded but its output did not have the expected shape."""

    argv: tuple[str, ...]
    detail: str

    def __str__(self) -> str:
        return self.detail


def _failure_detail(request: CommandRequest, result: CommandResult) -> str:
    if result.timed_out:
        return f"timed out after {request.timeout_seconds}s: {request.display}"
    output = (result.stderr or result.stdout).strip()
    head = f"exit {result.returncode}: {request.display}"
    return f"{head}\n{output}" if output else head


def execute(request: CommandRequest, *, runner: CommandRunner | None = None) -> CommandResult:
    """Run a collaborator command and return its successful result.

    Raises:
        CommandExecutionError: If the executable is missing, the command
            timed out, or it exited non-zero.
    """
    result = (runner or _DEFAULT_RUNNER).run(request)
    if result is None:
        name = request.argv[0] if request.argv else "<empty>"
        raise CommandExecutionError(request=request, detail=f"missing collaborator: {name}")
    if not result.ok:
        raise CommandExecutionError(
            request=request, detail=_failure_detail(request, result), result=result
        )
    return result


def query_text(
    argv: tuple[str, ...],
    *,
    runner: CommandRunner | None = None,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Return the stdout of a successful collaborator command.

    Raises:
        CommandExecutionError: As for ``execute``.
    """
    return execute(CommandRequest(argv=argv, cwd=cwd, env=env), runner=runner).stdout


def environment_with(overrides: Mapping[str, str]) -> dict[str, str]:
    """Return the current environment with ``overrides`` applied.

    Example:
        >>> environment_with({"WARDEN_EXAMPLE": "1"})["WARDEN_EXAMPLE"]
        '1'
    """
    return {**os.environ, **overrides}


def parse_json_records(
    result: CommandResult, model_type: type[ModelT], *, context: str
) -> list[ModelT]:
    """Validate a JSON array on stdout into models; ``null`` or blank is empty.

    Raises:
        CommandParseError: If stdout is not JSON, not an array, or an item
            fails validation.
    """
    raw = result.stdout.strip()
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CommandParseError(result.argv, f"{context}: invalid JSON: {exc}") from exc
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise CommandParseError(result.argv, f"{context}: expected a JSON array")
    records: list[ModelT] = []
    for index, item in enumerate(payload):
        try:
            records.append(model_type.model_validate(item))
        except ValidationError as exc:
            raise CommandParseError(result.argv, f"{context}: item {index}: {exc}") from exc
    return records
