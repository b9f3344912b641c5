"""Repository, manifest and package manager discovery."""

from __future__ import annotations

import json
from pathlib import Path

from git_publish.errors import BranchNameUnavailable, ManifestMissing, ManifestUnparseable, NotARepository
from git_publish.exec import ExecError, run_git
from git_publish.types import PackageManager, PackageManifest, RepositoryContext

MANIFEST_FILENAME = "package.json"

# Most specific lockfile first; the first marker found anywhere between
# cwd and the repository root decides.
LOCKFILE_MARKERS: tuple[tuple[tuple[str, ...], PackageManager], ...] = (
    (("pnpm-lock.yaml",), "pnpm"),
    (("yarn.lock",), "yarn"),
    (("bun.lockb", "bun.lock"), "bun"),
)
DEFAULT_PACKAGE_MANAGER: PackageManager = "npm"


def resolve_repo_root(cwd: Path) -> Path:
    """Resolve git repo root from cwd."""
    result = run_git(["rev-parse", "--show-toplevel"], cwd=cwd, check=False)
    root = result.stdout.strip()
    if result.returncode != 0 or not root:
        raise NotARepository()
    return Path(root).resolve()


def resolve_subdirectory(cwd: Path) -> str:
    """Return cwd relative to the repository root in POSIX form ('' at the root)."""
    prefix = run_git(["rev-parse", "--show-prefix"], cwd=cwd).stdout.strip()
    return prefix.rstrip("/")


def current_branch_or_tag(cwd: Path) -> str:
    """Return the checked-out branch name, falling back to the nearest tag."""
    branch = run_git(["symbolic-ref", "--short", "-q", "HEAD"], cwd=cwd, check=False)
    if branch.stdout.strip():
        return branch.stdout.strip()

    tag = run_git(["describe", "--tags"], cwd=cwd, check=False)
    if tag.stdout.strip():
        return tag.stdout.strip()

    raise BranchNameUnavailable(
        f"Failed to get current branch name: {branch.stderr.strip()} {tag.stderr.strip()}".rstrip()
    )


def current_commit(cwd: Path) -> str | None:
    """Return the abbreviated HEAD commit, or None before the first commit."""
    result = run_git(["rev-parse", "--short", "HEAD"], cwd=cwd, check=False)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def build_context(cwd: Path) -> RepositoryContext:
    """Resolve the immutable repository context for a publish run."""
    resolved = cwd.resolve()
    repo_root = resolve_repo_root(resolved)
    try:
        subdirectory = resolve_subdirectory(resolved)
    except ExecError as exc:
        raise NotARepository() from exc
    return RepositoryContext(
        cwd=resolved,
        repo_root=repo_root,
        subdirectory=subdirectory,
        current_branch=current_branch_or_tag(resolved),
        current_commit=current_commit(resolved),
    )


def find_up(names: tuple[str, ...], *, start: Path, stop_at: Path) -> Path | None:
    """Find the nearest ancestor of start (up to stop_at) containing one of names."""
    current = start.resolve()
    boundary = stop_at.resolve()
    while True:
        for name in names:
            candidate = current / name
            if candidate.exists():
                return candidate
        if current == boundary or current.parent == current:
            return None
        current = current.parent


def detect_package_manager(cwd: Path, stop_at: Path) -> PackageManager:
    """Pick the package manager from lockfiles between cwd and stop_at."""
    for names, manager in LOCKFILE_MARKERS:
        if find_up(names, start=cwd, stop_at=stop_at) is not None:
            return manager
    return DEFAULT_PACKAGE_MANAGER


def read_manifest(package_dir: Path) -> PackageManifest:
    """Load package.json from the package directory."""
    path = package_dir / MANIFEST_FILENAME
    if not path.is_file():
        raise ManifestMissing()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ManifestUnparseable(MANIFEST_FILENAME, exc.msg) from exc
    except OSError as exc:
        raise ManifestUnparseable(MANIFEST_FILENAME, exc.strerror) from exc
    if not isinstance(data, dict):
        raise ManifestUnparseable(MANIFEST_FILENAME, "expected a JSON object")
    return PackageManifest.from_dict(path, data)
