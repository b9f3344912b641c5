"""Deterministic naming helpers for publish branches and scratch space."""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path

from git_publish.types import RepositoryContext

DEFAULT_BRANCH_PREFIX = "npm/"
TEMPORARY_PREFIX = "git-publish"


def default_publish_branch(current_branch: str, *, package_name: str | None, monorepo: bool) -> str:
    """Build the default target branch: npm/<branch>, plus -<package> for subpackages."""
    branch = f"{DEFAULT_BRANCH_PREFIX}{current_branch}"
    if monorepo and package_name:
        branch = f"{branch}-{package_name}"
    return branch


def resolve_publish_branch(
    context: RepositoryContext,
    *,
    explicit: str | None,
    package_name: str | None,
) -> str:
    """Explicit branch wins; otherwise derive from the source branch."""
    if explicit:
        return explicit
    return default_publish_branch(
        context.current_branch,
        package_name=package_name,
        monorepo=context.is_monorepo_package,
    )


def temporary_branch_name(*, now_ms: int | None = None, pid: int | None = None) -> str:
    """Local branch name unique to this process and moment."""
    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"{TEMPORARY_PREFIX}-{stamp}-{pid if pid is not None else os.getpid()}"


def staging_directory(run_id: str, *, base: Path | None = None) -> Path:
    """Scratch directory for one run, outside any user checkout."""
    root = base if base is not None else Path(tempfile.gettempdir())
    return (root / TEMPORARY_PREFIX / run_id).resolve()
