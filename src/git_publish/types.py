"""Types for git-publish runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal

PackageManager = Literal["npm", "pnpm", "yarn", "bun"]

PACKAGE_MANAGERS: tuple[PackageManager, ...] = ("npm", "pnpm", "yarn", "bun")


@dataclass(frozen=True)
class PublishRequest:
    """Options for one publish invocation."""

    branch: str | None = None
    remote: str = "origin"
    fresh: bool = False
    dry: bool = False
    force: bool = False


@dataclass(frozen=True)
class RepositoryContext:
    """Paths and identity of the source checkout, resolved once per run."""

    cwd: Path
    repo_root: Path
    subdirectory: str
    current_branch: str
    current_commit: str | None

    @property
    def is_monorepo_package(self) -> bool:
        return bool(self.subdirectory)


@dataclass(frozen=True)
class PackageManifest:
    """The fields of package.json that drive publishing."""

    path: Path
    name: str | None
    version: str | None
    private: bool = False
    files: tuple[str, ...] | None = None
    scripts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, path: Path, data: dict[str, Any]) -> PackageManifest:
        files = data.get("files")
        scripts = data.get("scripts")
        name = data.get("name")
        version = data.get("version")
        return cls(
            path=path,
            name=name if isinstance(name, str) else None,
            version=version if isinstance(version, str) else None,
            private=data.get("private") is True,
            files=tuple(str(entry) for entry in files) if isinstance(files, list) else None,
            scripts={str(k): str(v) for k, v in scripts.items()} if isinstance(scripts, dict) else {},
        )


class BranchMode(str, Enum):
    """How the publish worktree gets its starting point."""

    ORPHAN = "orphan"
    REPOINT = "repoint"


@dataclass(frozen=True)
class PublishTarget:
    """Resolved publish branch and where its history starts."""

    branch: str
    mode: BranchMode
    local_branch: str

    @property
    def exists_on_remote(self) -> bool:
        return self.mode is BranchMode.REPOINT


@dataclass(frozen=True)
class PackedFile:
    """One regular file extracted from the pack tarball."""

    path: str
    size: int


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a publish run."""

    branch: str
    remote: str
    remote_url: str
    package_manager: PackageManager
    mode: BranchMode | None
    dry_run: bool
    files: tuple[PackedFile, ...] = ()
    commit_sha: str | None = None
    committed: bool = False
    pushed: bool = False
    install_command: str | None = None
    tree_url: str | None = None

    @property
    def success(self) -> bool:
        return self.pushed or self.dry_run
