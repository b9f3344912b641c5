"""Pytest configuration and fixtures for git-publish tests."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from tests.helpers import RepoWithRemote, make_repo_with_remote


def pytest_sessionfinish(session, exitstatus):
    """Fail the run if --cov was requested but no data was collected."""
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    if not list(Path.cwd().glob(".coverage*")):
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'git_publish' (the package) not 'src/git_publish'.",
            returncode=1,
        )


@pytest.fixture(autouse=True)
def isolated_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep git from discovering repositories above tmp_path or reading user config."""
    global_config = tmp_path / ".gitconfig-test"
    global_config.write_text("[init]\n\tdefaultBranch = master\n", encoding="utf-8")
    scratch = tmp_path / "tmp"
    scratch.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_PUBLISH_PROGRESS", "0")
    monkeypatch.setenv("TMPDIR", str(scratch))
    monkeypatch.setattr(tempfile, "tempdir", None)


@pytest.fixture
def repo_with_remote(tmp_path: Path) -> RepoWithRemote:
    return make_repo_with_remote(tmp_path)
