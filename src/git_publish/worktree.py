"""Disposable pack/publish worktrees bound to one publish run."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from types import TracebackType

from git_publish.errors import WorktreeCreationFailed
from git_publish.exec import ExecError, SpawnError, run_git
from git_publish.naming import staging_directory, temporary_branch_name

logger = logging.getLogger(__name__)


class PublishWorkspace:
    """Scoped owner of the staging directory, both worktrees and the temp branch.

    Entering creates everything; leaving removes everything, whatever
    happened in between. Cleanup problems are logged, never raised, so the
    error that aborted the run stays the one the user sees.
    """

    def __init__(self, repo_root: Path, *, run_id: str | None = None, base_dir: Path | None = None):
        self.repo_root = repo_root.resolve()
        self.run_id = run_id or temporary_branch_name()
        self.staging = staging_directory(self.run_id, base=base_dir)
        self._created: list[Path] = []
        self._active = False

    @property
    def local_branch(self) -> str:
        return self.run_id

    @property
    def pack_worktree(self) -> Path:
        return self.staging / "pack-worktree"

    @property
    def publish_worktree(self) -> Path:
        return self.staging / "worktree"

    @property
    def pack_destination(self) -> Path:
        return self.staging / "pack"

    def create(self) -> None:
        """Create the staging directory and check out HEAD twice."""
        if self._active:
            raise WorktreeCreationFailed(f"worktrees for {self.run_id} already exist")
        if self.staging.exists():
            raise WorktreeCreationFailed(f"staging directory already exists: {self.staging}")

        self._active = True
        try:
            self.staging.mkdir(parents=True)
            for path in (self.pack_worktree, self.publish_worktree):
                run_git(["worktree", "add", "--force", "--detach", str(path), "HEAD"], cwd=self.repo_root)
                self._created.append(path)
        except (ExecError, SpawnError, OSError) as exc:
            detail = exc.result.output if isinstance(exc, ExecError) else str(exc)
            # __exit__ never runs when __enter__ raises
            self.cleanup()
            raise WorktreeCreationFailed(f"Failed to create worktree: {detail}") from exc
        logger.debug("created worktrees under %s", self.staging)

    def cleanup(self) -> list[str]:
        """Tear down worktrees, temp branch and staging directory.

        Returns the cleanup problems that were logged.
        """
        problems: list[str] = []
        if not self._active:
            return problems

        for path in reversed(self._created):
            try:
                run_git(["worktree", "remove", "--force", str(path)], cwd=self.repo_root)
            except (ExecError, SpawnError) as exc:
                problems.append(f"worktree remove {path}: {exc}")
        self._created.clear()

        try:
            if self._local_branch_exists():
                run_git(["branch", "-D", self.local_branch], cwd=self.repo_root)
        except (ExecError, SpawnError) as exc:
            problems.append(f"branch -D {self.local_branch}: {exc}")

        try:
            shutil.rmtree(self.staging, ignore_errors=False)
        except FileNotFoundError:
            pass
        except OSError as exc:
            problems.append(f"remove {self.staging}: {exc}")

        try:
            run_git(["worktree", "prune"], cwd=self.repo_root)
        except (ExecError, SpawnError) as exc:
            problems.append(f"worktree prune: {exc}")

        for problem in problems:
            logger.warning("cleanup: %s", problem)
        self._active = False
        return problems

    def _local_branch_exists(self) -> bool:
        result = run_git(
            ["show-ref", "--verify", "--quiet", f"refs/heads/{self.local_branch}"],
            cwd=self.repo_root,
            check=False,
        )
        return result.returncode == 0

    def __enter__(self) -> PublishWorkspace:
        self.create()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()
