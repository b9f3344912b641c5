"""Command runners for git and package manager subprocesses."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        return (self.stderr or self.stdout).strip()


class ExecError(RuntimeError):
    """Raised when a command returns non-zero in check mode."""

    def __init__(self, result: ExecResult):
        rendered = " ".join(result.argv)
        super().__init__(f"command failed ({result.returncode}): {rendered}\n{result.output}")
        self.result = result


class SpawnError(RuntimeError):
    """Raised when the executable cannot be started at all."""

    def __init__(self, argv: list[str], cwd: Path, reason: OSError):
        super().__init__(f"unable to run {argv[0]!r} in {cwd}: {reason.strerror or reason}")
        self.argv = tuple(argv)
        self.cwd = cwd


def run_command(
    argv: list[str],
    *,
    cwd: Path,
    check: bool = True,
) -> ExecResult:
    """Run command and return structured result."""
    logger.debug("$ %s  (cwd=%s)", " ".join(argv), cwd)
    try:
        completed = subprocess.run(argv, cwd=cwd, capture_output=True, text=True, check=False)
    except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
        raise SpawnError(argv, cwd, exc) from exc
    result = ExecResult(
        argv=tuple(argv),
        cwd=cwd.resolve(),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
    if result.returncode != 0:
        logger.debug("exit %s: %s", result.returncode, result.output)
    if check and result.returncode != 0:
        raise ExecError(result)
    return result


def run_git(
    args: list[str],
    *,
    cwd: Path,
    check: bool = True,
) -> ExecResult:
    """Run git command in the given directory."""
    return run_command(["git", *args], cwd=cwd, check=check)


def git_output(args: list[str], *, cwd: Path) -> str:
    """Run git command and return stripped stdout."""
    return run_git(args, cwd=cwd).stdout.strip()
