"""Tests for the orphan-vs-repoint branch resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from git_publish.branch import prepare_publish_branch, probe_target, resolve_target
from git_publish.types import BranchMode
from git_publish.worktree import PublishWorkspace
from tests.helpers import RepoWithRemote, git


def _seed_remote_branch(repo: Path, branch: str) -> str:
    """Push a one-file orphan commit to origin/<branch> and return its sha."""
    scratch = repo.parent / "seed"
    git(repo, "worktree", "add", "--detach", str(scratch), "HEAD")
    git(scratch, "checkout", "--orphan", "seed")
    git(scratch, "rm", "-rf", "--quiet", ".")
    (scratch / "old.js").write_text("old\n", encoding="utf-8")
    git(scratch, "add", "old.js")
    git(scratch, "commit", "-m", "previous publish")
    sha = git(scratch, "rev-parse", "HEAD")
    git(scratch, "push", "origin", f"HEAD:{branch}")
    git(repo, "worktree", "remove", "--force", str(scratch))
    git(repo, "branch", "-D", "seed")
    return sha


@pytest.fixture
def workspace(repo_with_remote: RepoWithRemote, tmp_path: Path):
    with PublishWorkspace(repo_with_remote.repo, run_id="git-publish-9-9", base_dir=tmp_path / "scratch") as ws:
        yield ws


def test_fresh_is_orphan_without_fetching(workspace: PublishWorkspace, monkeypatch: pytest.MonkeyPatch) -> None:
    def no_fetch(*_args, **_kwargs):
        raise AssertionError("fresh publishes must not fetch")

    monkeypatch.setattr("git_publish.branch.fetch_publish_branch", no_fetch)

    target = resolve_target(
        workspace.publish_worktree,
        remote="origin",
        branch="npm/master",
        local_branch=workspace.local_branch,
        fresh=True,
    )
    assert target.mode is BranchMode.ORPHAN
    assert target.exists_on_remote is False


def test_missing_remote_branch_is_orphan(workspace: PublishWorkspace) -> None:
    target = resolve_target(
        workspace.publish_worktree,
        remote="origin",
        branch="npm/master",
        local_branch=workspace.local_branch,
        fresh=False,
    )
    assert target.mode is BranchMode.ORPHAN


def test_existing_remote_branch_is_repointed(repo_with_remote: RepoWithRemote, workspace: PublishWorkspace) -> None:
    sha = _seed_remote_branch(repo_with_remote.repo, "npm/master")

    target = prepare_publish_branch(
        workspace.publish_worktree,
        remote="origin",
        branch="npm/master",
        local_branch=workspace.local_branch,
        fresh=False,
    )

    worktree = workspace.publish_worktree
    assert target.mode is BranchMode.REPOINT
    assert git(worktree, "symbolic-ref", "HEAD") == f"refs/heads/{workspace.local_branch}"
    assert git(worktree, "rev-parse", "HEAD") == sha
    assert git(worktree, "ls-files") == ""
    assert sorted(path.name for path in worktree.iterdir()) == [".git"]


def test_orphan_checkout_leaves_empty_worktree(workspace: PublishWorkspace) -> None:
    target = prepare_publish_branch(
        workspace.publish_worktree,
        remote="origin",
        branch="npm/master",
        local_branch=workspace.local_branch,
        fresh=True,
    )

    worktree = workspace.publish_worktree
    assert target.mode is BranchMode.ORPHAN
    assert git(worktree, "symbolic-ref", "HEAD") == f"refs/heads/{workspace.local_branch}"
    assert git(worktree, "ls-files") == ""
    assert sorted(path.name for path in worktree.iterdir()) == [".git"]


def test_probe_target_is_read_only(repo_with_remote: RepoWithRemote) -> None:
    repo = repo_with_remote.repo
    assert probe_target(repo, remote="origin", branch="npm/master", local_branch="tmp", fresh=False).mode is (
        BranchMode.ORPHAN
    )

    _seed_remote_branch(repo, "npm/master")
    before = git(repo, "for-each-ref")
    target = probe_target(repo, remote="origin", branch="npm/master", local_branch="tmp", fresh=False)

    assert target.mode is BranchMode.REPOINT
    assert git(repo, "for-each-ref") == before


def test_probe_target_fresh_is_orphan(repo_with_remote: RepoWithRemote) -> None:
    _seed_remote_branch(repo_with_remote.repo, "npm/master")
    target = probe_target(repo_with_remote.repo, remote="origin", branch="npm/master", local_branch="tmp", fresh=True)
    assert target.mode is BranchMode.ORPHAN
