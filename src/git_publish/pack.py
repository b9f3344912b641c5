"""Run the package manager's pack command inside the pack worktree."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from git_publish.errors import PackagingAmbiguous, PackagingFailed
from git_publish.exec import ExecError, SpawnError, run_command
from git_publish.types import PackageManager, PackageManifest, RepositoryContext

logger = logging.getLogger(__name__)

TARBALL_SUFFIX = ".tgz"


@dataclass(frozen=True)
class PackJob:
    """Everything a packer needs to produce one tarball."""

    package_manager: PackageManager
    context: RepositoryContext
    manifest: PackageManifest
    pack_worktree: Path
    destination: Path

    @property
    def package_root(self) -> Path:
        """The package directory inside the pack worktree."""
        if self.context.subdirectory:
            return self.pack_worktree / self.context.subdirectory
        return self.pack_worktree


Packer = Callable[[PackJob], Path]


def pack_arguments(package_manager: PackageManager, destination: Path) -> list[str]:
    """Build the pack command line for a package manager."""
    if package_manager == "bun":
        return ["bun", "pm", "pack", "--destination", str(destination)]
    return [package_manager, "pack", "--pack-destination", str(destination)]


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def expand_file_entries(package_dir: Path, entries: tuple[str, ...]) -> list[str]:
    """Expand a manifest `files` list into concrete package-relative paths.

    Directories expand recursively, dotfiles are included and ignore
    files are not consulted. Negated entries are left to the pack tool.
    """
    matched: set[str] = set()
    for raw in entries:
        entry = raw.strip()
        while entry.startswith("./"):
            entry = entry[2:]
        entry = entry.lstrip("/")
        if not entry or entry.startswith("!"):
            continue

        candidate = package_dir / entry
        if candidate.is_dir():
            hits = list(candidate.rglob("*"))
        elif candidate.is_file():
            hits = [candidate]
        else:
            try:
                hits = list(package_dir.glob(entry))
            except (ValueError, NotImplementedError):
                logger.debug("skipping unsupported files pattern %r", raw)
                continue
            expanded: list[Path] = []
            for hit in hits:
                expanded.extend(hit.rglob("*") if hit.is_dir() else [hit])
            hits = expanded

        for hit in hits:
            if hit.is_file() and _is_within(hit, package_dir):
                matched.add(hit.relative_to(package_dir).as_posix())
    return sorted(matched)


def copy_declared_files(package_dir: Path, target_root: Path, entries: tuple[str, ...]) -> list[str]:
    """Copy `files` matches from the user's package into the pack worktree.

    Build output is usually git-ignored, so the worktree of HEAD lacks it.
    """
    copied = expand_file_entries(package_dir, entries)
    for relative in copied:
        destination = target_root / relative
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(package_dir / relative, destination)
    logger.debug("copied %d declared file(s) into %s", len(copied), target_root)
    return copied


def _replace_with_symlink(link: Path, target: Path) -> None:
    if link.is_symlink() or link.is_file():
        link.unlink()
    elif link.is_dir():
        shutil.rmtree(link)
    if not target.is_dir():
        return
    link.symlink_to(target, target_is_directory=True)


def link_node_modules(context: RepositoryContext, pack_worktree: Path) -> None:
    """Expose installed dependencies to lifecycle hooks run in the worktree."""
    if context.subdirectory:
        _replace_with_symlink(pack_worktree / "node_modules", context.repo_root / "node_modules")
        _replace_with_symlink(
            pack_worktree / context.subdirectory / "node_modules",
            context.cwd / "node_modules",
        )
    else:
        _replace_with_symlink(pack_worktree / "node_modules", context.cwd / "node_modules")


def find_tarball(destination: Path) -> Path:
    """Return the single tarball the pack command wrote."""
    tarballs = sorted(path for path in destination.iterdir() if path.name.endswith(TARBALL_SUFFIX))
    if not tarballs:
        raise PackagingFailed("No tarball found after pack")
    if len(tarballs) > 1:
        names = ", ".join(path.name for path in tarballs)
        raise PackagingAmbiguous(f"Expected one tarball after pack, found {len(tarballs)}: {names}")
    return tarballs[0]


def pack_package(job: PackJob) -> Path:
    """Pack the package from the isolated worktree and return the tarball path."""
    job.destination.mkdir(parents=True, exist_ok=True)

    try:
        if job.manifest.files:
            copy_declared_files(job.context.cwd, job.package_root, job.manifest.files)
        link_node_modules(job.context, job.pack_worktree)
    except OSError as exc:
        raise PackagingFailed(f"Failed to prepare pack worktree: {exc}") from exc

    argv = pack_arguments(job.package_manager, job.destination)
    try:
        run_command(argv, cwd=job.package_root)
    except SpawnError as exc:
        raise PackagingFailed(f"{job.package_manager} is not installed or not on PATH") from exc
    except ExecError as exc:
        raise PackagingFailed(f"{' '.join(argv[:2])} failed: {exc.result.output}") from exc

    return find_tarball(job.destination)
