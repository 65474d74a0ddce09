"""Subprocess helpers for running the wrapped external tools."""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from . import log

TIMEOUT_RETURNCODE = 124


@dataclass(frozen=True)
class CommandRequest:
    """Typed command invocation request."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class CommandResult:
    """Typed command execution result."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, stripped."""
        parts = [part.strip() for part in (self.stdout, self.stderr) if part.strip()]
        return "\n".join(parts)

    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


class CommandRunner(Protocol):
    """Runtime command-execution interface."""

    def run(self, request: CommandRequest) -> CommandResult | None: ...


class SubprocessCommandRunner:
    """Run a wrapped tool with ``subprocess.run``.

    Output is always captured as text so wrappers can echo it in warnings.
    An executable that is absent or not executable gives ``None``. A timeout
    gives a result with ``TIMEOUT_RETURNCODE`` and whatever output arrived
    before the process was killed.
    """

    def run(self, request: CommandRequest) -> CommandResult | None:
        try:
            completed = subprocess.run(
                list(request.argv),
                cwd=request.cwd,
                env=request.env,
                capture_output=True,
                text=True,
                timeout=request.timeout_seconds,
                check=False,
            )
        except (FileNotFoundError, PermissionError):
            return None
        except subprocess.TimeoutExpired as exc:
            log.warning(f"{request.argv[0]} timed out after {exc.timeout:g}s")
            return CommandResult(
                argv=request.argv,
                returncode=TIMEOUT_RETURNCODE,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                timed_out=True,
            )
        return CommandResult(
            argv=request.argv,
            returncode=completed.returncode,
            stdout=_as_text(completed.stdout),
            stderr=_as_text(completed.stderr),
        )


def _as_text(value: str | bytes | None) -> str:
    # TimeoutExpired keeps raw bytes even when text mode was requested
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


_DEFAULT_COMMAND_RUNNER: CommandRunner = SubprocessCommandRunner()


def default_runner() -> CommandRunner:
    return _DEFAULT_COMMAND_RUNNER


def set_default_runner(runner: CommandRunner) -> CommandRunner:
    """Replace the process-wide runner and return the previous one."""
    global _DEFAULT_COMMAND_RUNNER
    previous = _DEFAULT_COMMAND_RUNNER
    _DEFAULT_COMMAND_RUNNER = runner
    return previous


def run_with_runner(
    request: CommandRequest, *, runner: CommandRunner | None = None
) -> CommandResult | None:
    """Execute a typed command request with the given runner."""
    active_runner = runner or _DEFAULT_COMMAND_RUNNER
    log.trace(f"run: {' '.join(request.argv)}")
    return active_runner.run(request)


def run_tool(
    argv: Sequence[str],
    *,
    failure: str,
    label: str | None = None,
    cwd: Path | None = None,
    runner: CommandRunner | None = None,
) -> CommandResult | None:
    """Run a wrapped tool command, downgrading failures to warnings.

    A missing executable or a nonzero exit status emits ``failure`` as a
    warning, followed by the tool output (prefixed by ``label``) when there
    is any. The caller decides what success looks like.

    Args:
        argv: Executable and arguments.
        failure: Warning text used when the command fails.
        label: Tool label for the output line (``Git``, ``DVC``...).
        cwd: Optional working directory.
        runner: Optional command runner override.

    Returns:
        The command result, or ``None`` when the executable is missing.
    """
    request = CommandRequest(argv=tuple(argv), cwd=cwd)
    result = run_with_runner(request, runner=runner)
    if result is None:
        log.warning(failure)
        log.info(f"cannot run command: {request.argv[0]}")
        return None
    if not result.ok:
        log.warning(failure)
        output = result.output
        if output:
            prefix = f"{label} output" if label else "Output"
            log.info(f"{prefix}: {output}")
    return result


def succeeded(result: CommandResult | None) -> bool:
    return result is not None and result.ok
