"""Failure kinds raised while publishing.

Every class carries a single-line, user-facing message; the CLI prints it
as ``Error: <message>`` and exits with status 1.
"""

from __future__ import annotations


class GitPublishError(RuntimeError):
    """Base class for all fatal publish conditions."""


class NotARepository(GitPublishError):
    def __init__(self) -> None:
        super().__init__("Not in a git repository")


class DirtyWorkingTree(GitPublishError):
    def __init__(self) -> None:
        super().__init__("Working tree is not clean. Commit or stash your changes before publishing.")


class ManifestMissing(GitPublishError):
    def __init__(self) -> None:
        super().__init__("No package.json found in current working directory")


class ManifestUnparseable(GitPublishError):
    def __init__(self, path: str, reason: str | None = None) -> None:
        message = f"Failed to parse JSON file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class PrivatePackageBlocked(GitPublishError):
    def __init__(self) -> None:
        super().__init__("This package is marked as private. Use --force to publish it anyway.")


class RemoteNotFound(GitPublishError):
    def __init__(self, remote: str) -> None:
        super().__init__(f'Git remote "{remote}" does not exist')
        self.remote = remote


class BranchNameUnavailable(GitPublishError):
    """HEAD is neither on a branch nor described by a tag."""


class WorktreeCreationFailed(GitPublishError):
    """git worktree add failed; nothing has been pushed."""


class PackagingFailed(GitPublishError):
    """The package manager's pack command failed or produced no tarball."""


class PackagingAmbiguous(PackagingFailed):
    """More than one tarball was produced."""


class NoPublishableFiles(GitPublishError):
    def __init__(self) -> None:
        super().__init__("No publish files found")


class PushRejected(GitPublishError):
    """The remote refused the push."""


class ConfigError(GitPublishError):
    """Malformed .git-publish.toml / .git-publish.json."""


class Interrupted(GitPublishError):
    def __init__(self, signal_name: str) -> None:
        super().__init__(f"Interrupted by {signal_name}")
        self.signal_name = signal_name
