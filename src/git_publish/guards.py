"""Fail-closed preflight checks run before anything is created."""

from __future__ import annotations

from pathlib import Path

from git_publish.errors import DirtyWorkingTree, NotARepository, PrivatePackageBlocked
from git_publish.exec import ExecError, run_git
from git_publish.types import PackageManifest


def tracked_status(cwd: Path) -> str:
    """Return porcelain status of tracked files only."""
    return run_git(["status", "--porcelain", "--untracked-files=no"], cwd=cwd).stdout


def assert_clean_tree(cwd: Path) -> None:
    """Refuse to publish with uncommitted changes to tracked files.

    Untracked files are ignored; they never reach the published branch
    because packing happens in a worktree of HEAD.
    """
    try:
        status = tracked_status(cwd)
    except ExecError as exc:
        if "not a git repository" in exc.result.stderr.lower():
            raise NotARepository() from exc
        raise
    if status.strip():
        raise DirtyWorkingTree()


def assert_publishable(manifest: PackageManifest, *, force: bool) -> None:
    """Refuse private packages unless forced."""
    if manifest.private and not force:
        raise PrivatePackageBlocked()
