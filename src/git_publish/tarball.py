"""Stream-extract a pack tarball into the publish worktree."""

from __future__ import annotations

import shutil
import tarfile
from pathlib import Path, PurePosixPath

from git_publish.errors import PackagingFailed
from git_publish.types import PackedFile

# npm, pnpm, yarn and bun all nest the package under this directory
TARBALL_ROOT = "package"


def strip_root(name: str) -> str:
    """Drop the synthetic top-level directory of a pack tarball entry."""
    parts = [part for part in name.split("/") if part not in ("", ".")]
    if parts and parts[0] == TARBALL_ROOT:
        parts = parts[1:]
    return "/".join(parts)


def _safe_target(destination: Path, relative: str) -> Path:
    pure = PurePosixPath(relative)
    if pure.is_absolute() or ".." in pure.parts or pure.parts[0] == ".git":
        raise PackagingFailed(f"Refusing to extract unsafe tarball entry: {relative}")
    return destination.joinpath(*pure.parts)


def extract_tarball(tarball: Path, destination: Path) -> list[PackedFile]:
    """Extract regular files and directories, returning files sorted by path."""
    files: dict[str, PackedFile] = {}
    try:
        # r|* streams and transparently handles gzip or no compression
        with tarfile.open(tarball, mode="r|*") as archive:
            for member in archive:
                relative = strip_root(member.name)
                if not relative:
                    continue
                target = _safe_target(destination, relative)
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                if not member.isfile():
                    continue
                source = archive.extractfile(member)
                if source is None:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with source, open(target, "wb") as sink:
                    shutil.copyfileobj(source, sink)
                target.chmod((member.mode & 0o777) | 0o600)
                files[relative] = PackedFile(path=relative, size=member.size)
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise PackagingFailed(f"Failed to extract {tarball.name}: {exc}") from exc
    return sorted(files.values(), key=lambda packed: packed.path)
