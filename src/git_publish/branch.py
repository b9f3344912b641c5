"""Decide whether the publish branch continues remote history or starts over."""

from __future__ import annotations

import logging
from pathlib import Path

from git_publish.exec import run_git
from git_publish.types import BranchMode, PublishTarget

logger = logging.getLogger(__name__)


def fetch_publish_branch(worktree: Path, *, remote: str, branch: str, local_branch: str) -> bool:
    """Shallow-fetch the remote publish branch into local_branch; False if it is absent."""
    result = run_git(
        ["fetch", "--depth=1", remote, f"{branch}:{local_branch}"],
        cwd=worktree,
        check=False,
    )
    if result.returncode != 0:
        logger.debug("fetch of %s from %s failed, starting orphan: %s", branch, remote, result.output)
        return False
    return True


def resolve_target(
    worktree: Path,
    *,
    remote: str,
    branch: str,
    local_branch: str,
    fresh: bool,
) -> PublishTarget:
    """Fresh runs are always orphans; otherwise one fetch attempt decides."""
    if fresh:
        mode = BranchMode.ORPHAN
    elif fetch_publish_branch(worktree, remote=remote, branch=branch, local_branch=local_branch):
        mode = BranchMode.REPOINT
    else:
        mode = BranchMode.ORPHAN
    return PublishTarget(branch=branch, mode=mode, local_branch=local_branch)


def probe_target(cwd: Path, *, remote: str, branch: str, local_branch: str, fresh: bool) -> PublishTarget:
    """Read-only variant of resolve_target used for dry runs."""
    if fresh:
        return PublishTarget(branch=branch, mode=BranchMode.ORPHAN, local_branch=local_branch)
    result = run_git(
        ["ls-remote", "--exit-code", "--heads", remote, f"refs/heads/{branch}"],
        cwd=cwd,
        check=False,
    )
    mode = BranchMode.REPOINT if result.returncode == 0 else BranchMode.ORPHAN
    return PublishTarget(branch=branch, mode=mode, local_branch=local_branch)


def check_out_target(worktree: Path, target: PublishTarget) -> None:
    """Put the worktree on target.local_branch with an empty index and tree."""
    if target.mode is BranchMode.ORPHAN:
        run_git(["checkout", "--orphan", target.local_branch], cwd=worktree)
    else:
        # Repoint HEAD without checking out the fetched files
        run_git(["symbolic-ref", "HEAD", f"refs/heads/{target.local_branch}"], cwd=worktree)
    clear_worktree(worktree)


def clear_worktree(worktree: Path) -> None:
    """Drop every index entry and every file on disk except .git."""
    run_git(["rm", "--cached", "-r", "--quiet", "--ignore-unmatch", ":/"], cwd=worktree)
    run_git(["clean", "-ffdx"], cwd=worktree)


def prepare_publish_branch(
    worktree: Path,
    *,
    remote: str,
    branch: str,
    local_branch: str,
    fresh: bool,
) -> PublishTarget:
    """Resolve the target and leave the worktree ready for extraction."""
    target = resolve_target(worktree, remote=remote, branch=branch, local_branch=local_branch, fresh=fresh)
    check_out_target(worktree, target)
    logger.debug("publish worktree on %s (%s)", target.local_branch, target.mode.value)
    return target
