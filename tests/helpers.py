"""Shared helpers for git-publish tests."""

from __future__ import annotations

import json
import subprocess
import tarfile
from dataclasses import dataclass
from pathlib import Path

from git_publish.pack import PackJob, expand_file_entries


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "--initial-branch=master")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "user.name", "Test User")
    return path


def write_package(path: Path, manifest: dict, files: dict[str, str] | None = None) -> None:
    path.mkdir(parents=True, exist_ok=True)
    (path / "package.json").write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    for relative, content in (files or {}).items():
        target = path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


def commit_all(repo: Path, message: str = "update") -> None:
    git(repo, "add", "-A")
    git(repo, "commit", "-m", message)


def remote_files(remote: Path, branch: str) -> set[str]:
    listing = git(remote, "ls-tree", "-r", "--name-only", branch)
    return {line for line in listing.splitlines() if line}


def remote_commit_count(remote: Path, branch: str) -> int:
    return int(git(remote, "rev-list", "--count", branch))


@dataclass(frozen=True)
class RepoWithRemote:
    repo: Path
    remote: Path


def make_repo_with_remote(tmp_path: Path) -> RepoWithRemote:
    remote = tmp_path / "origin.git"
    subprocess.run(["git", "init", "--bare", str(remote)], check=True, capture_output=True)

    repo = init_repo(tmp_path / "repo")
    write_package(
        repo,
        {"name": "test-pkg", "version": "1.0.0"},
        {"index.js": "module.exports = 1;\n"},
    )
    commit_all(repo, "initial")
    git(repo, "remote", "add", "origin", str(remote))
    return RepoWithRemote(repo=repo, remote=remote)


def stub_packer(job: PackJob) -> Path:
    """Stand-in for `npm pack`: runs prepack, honours `files`, writes package/ tarball."""
    root = job.package_root
    prepack = job.manifest.scripts.get("prepack")
    if prepack:
        subprocess.run(prepack, shell=True, cwd=root, check=True)

    if job.manifest.files:
        selected = set(expand_file_entries(root, job.manifest.files)) | {"package.json"}
    else:
        selected = {
            path.relative_to(root).as_posix()
            for path in root.rglob("*")
            if path.is_file() and not ({".git", "node_modules"} & set(path.relative_to(root).parts))
        }

    job.destination.mkdir(parents=True, exist_ok=True)
    stem = (job.manifest.name or "package").lstrip("@").replace("/", "-")
    tarball = job.destination / f"{stem}-{job.manifest.version or '0.0.0'}.tgz"
    with tarfile.open(tarball, "w:gz") as archive:
        for relative in sorted(selected):
            archive.add(root / relative, arcname=f"package/{relative}")
    return tarball
