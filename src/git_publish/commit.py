"""Commit the packaged files and push them to the publish branch."""

from __future__ import annotations

from pathlib import Path

from git_publish.errors import PushRejected
from git_publish.exec import ExecError, git_output, run_git

BOT_NAME = "git-publish"
BOT_EMAIL = "bot@git-publish"

_BOT_CONFIG = [
    "-c",
    f"user.name={BOT_NAME}",
    "-c",
    f"user.email={BOT_EMAIL}",
    "-c",
    "commit.gpgsign=false",
]


def build_commit_message(current_branch: str, current_commit: str | None) -> str:
    message = f'Published from "{current_branch}"'
    if current_commit:
        message = f"{message} ({current_commit})"
    return message


def stage_all(worktree: Path) -> None:
    """Stage every file in the worktree, ignore rules included."""
    run_git(["add", "--all", "--force"], cwd=worktree)


def staged_changes(worktree: Path) -> list[str]:
    """Return porcelain lines for tracked changes against HEAD."""
    status = run_git(["status", "--porcelain", "--untracked-files=no"], cwd=worktree).stdout
    return [line for line in status.splitlines() if line.strip()]


def commit_publish(worktree: Path, message: str) -> None:
    """Commit as the bot identity, skipping repository hooks."""
    run_git(
        [
            *_BOT_CONFIG,
            "commit",
            "--no-verify",
            "-m",
            message,
            f"--author={BOT_NAME} <{BOT_EMAIL}>",
        ],
        cwd=worktree,
    )


def head_commit(worktree: Path) -> str:
    return git_output(["rev-parse", "HEAD"], cwd=worktree)


def push_publish(worktree: Path, *, remote: str, branch: str, force: bool) -> None:
    """Push HEAD to remote:branch; force only for orphan history."""
    args = ["push"]
    if force:
        args.append("--force")
    args.extend(["--no-verify", remote, f"HEAD:{branch}"])
    try:
        run_git(args, cwd=worktree)
    except ExecError as exc:
        raise PushRejected(f'Failed to push branch "{branch}" to remote "{remote}": {exc.result.output}') from exc
