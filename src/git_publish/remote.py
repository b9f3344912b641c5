"""Remote URL resolution and hosted-repository shorthands."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from git_publish.errors import RemoteNotFound
from git_publish.exec import run_git
from git_publish.types import PackageManager


@dataclass(frozen=True)
class HostedRepo:
    """A remote recognized as a known git host."""

    host: str
    owner_repo: str

    @property
    def shorthand(self) -> str:
        """npm-style dependency shorthand (GitHub needs no prefix)."""
        if self.host == "github.com":
            return self.owner_repo
        return f"{_HOSTS[self.host][0]}:{self.owner_repo}"

    def tree_url(self, branch: str) -> str:
        return f"https://{self.host}/{self.owner_repo}/{_HOSTS[self.host][1]}/{branch}"


# host -> (shorthand prefix, tree path segment)
_HOSTS: dict[str, tuple[str, str]] = {
    "github.com": ("github", "tree"),
    "gitlab.com": ("gitlab", "-/tree"),
    "bitbucket.org": ("bitbucket", "src"),
}

_SSH_URL = re.compile(r"^(?:ssh://)?git@(?P<host>[^:/]+)[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$")
_HTTPS_URL = re.compile(r"^https?://(?:[^@/]+@)?(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$")


def resolve_remote_url(cwd: Path, remote: str) -> str:
    """Return the configured URL of remote, or fail with RemoteNotFound."""
    result = run_git(["remote", "get-url", remote], cwd=cwd, check=False)
    url = result.stdout.strip()
    if result.returncode != 0 or not url:
        raise RemoteNotFound(remote)
    return url


def parse_hosted_repo(remote_url: str) -> HostedRepo | None:
    """Recognize SSH/HTTPS URLs of GitHub, GitLab and Bitbucket."""
    for pattern in (_SSH_URL, _HTTPS_URL):
        match = pattern.match(remote_url.strip())
        if match and match.group("host") in _HOSTS:
            return HostedRepo(
                host=match.group("host"),
                owner_repo=f"{match.group('owner')}/{match.group('repo')}",
            )
    return None


def install_command(package_manager: PackageManager, hosted: HostedRepo, branch: str) -> str:
    return f"{package_manager} i '{hosted.shorthand}#{branch}'"
