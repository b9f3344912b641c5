"""Publish orchestration: probe, guard, isolate, pack, commit, push, clean up."""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from types import FrameType

from git_publish import ui
from git_publish.branch import prepare_publish_branch, probe_target
from git_publish.commit import (
    build_commit_message,
    commit_publish,
    head_commit,
    push_publish,
    stage_all,
    staged_changes,
)
from git_publish.errors import Interrupted, NoPublishableFiles
from git_publish.guards import assert_clean_tree, assert_publishable
from git_publish.naming import resolve_publish_branch, temporary_branch_name
from git_publish.pack import PackJob, Packer, pack_package
from git_publish.probe import build_context, detect_package_manager, read_manifest
from git_publish.remote import install_command, parse_hosted_repo, resolve_remote_url
from git_publish.tarball import extract_tarball
from git_publish.types import (
    PackageManager,
    PackageManifest,
    PackedFile,
    PublishRequest,
    PublishResult,
    PublishTarget,
    RepositoryContext,
)
from git_publish.worktree import PublishWorkspace

logger = logging.getLogger(__name__)

_CLEANUP_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


@contextmanager
def interrupt_on_signals() -> Iterator[None]:
    """Turn termination signals into Interrupted so cleanup still runs."""

    def _raise(signum: int, _frame: FrameType | None) -> None:
        raise Interrupted(signal.Signals(signum).name)

    previous: dict[int, object] = {}
    try:
        for signum in _CLEANUP_SIGNALS:
            previous[signum] = signal.signal(signum, _raise)
    except ValueError:
        # signal handlers can only be installed from the main thread
        logger.debug("not in main thread; termination signals will skip cleanup")
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)  # type: ignore[arg-type]


def pack_into_worktree(
    job: PackJob,
    publish_worktree: Path,
    *,
    packer: Packer = pack_package,
) -> list[PackedFile]:
    """Pack in the pack worktree and extract the tarball into the publish worktree."""
    tarball = packer(job)
    files = extract_tarball(tarball, publish_worktree)
    if not files:
        raise NoPublishableFiles()
    return files


def commit_packed_files(worktree: Path, context: RepositoryContext) -> tuple[str, bool]:
    """Stage and commit the extracted files; returns (HEAD sha, committed)."""
    stage_all(worktree)
    if not staged_changes(worktree):
        ui.render_warning("No new changes found to commit.")
        logger.info("package contents unchanged; pushing the existing branch tip")
        return head_commit(worktree), False
    commit_publish(worktree, build_commit_message(context.current_branch, context.current_commit))
    return head_commit(worktree), True


def run_publish(
    request: PublishRequest,
    *,
    cwd: Path,
    package_manager: PackageManager | None = None,
    packer: Packer | None = None,
    staging_base: Path | None = None,
) -> PublishResult:
    """Publish the package at cwd to request.branch (or its default) on request.remote."""
    assert_clean_tree(cwd)
    context = build_context(cwd)
    manifest = read_manifest(context.cwd)
    assert_publishable(manifest, force=request.force)

    branch = resolve_publish_branch(context, explicit=request.branch, package_name=manifest.name)
    remote_url = resolve_remote_url(context.cwd, request.remote)
    manager = package_manager or detect_package_manager(context.cwd, context.repo_root)
    logger.debug("repo_root=%s subdirectory=%r manager=%s", context.repo_root, context.subdirectory, manager)

    ui.render_header(context.current_branch, branch, dry=request.dry)

    if request.dry:
        target = probe_target(
            context.cwd,
            remote=request.remote,
            branch=branch,
            local_branch=temporary_branch_name(),
            fresh=request.fresh,
        )
        return PublishResult(
            branch=branch,
            remote=request.remote,
            remote_url=remote_url,
            package_manager=manager,
            mode=target.mode,
            dry_run=True,
        )

    return _publish(
        request,
        context=context,
        manifest=manifest,
        branch=branch,
        remote_url=remote_url,
        manager=manager,
        packer=packer or pack_package,
        staging_base=staging_base,
    )


def _publish(
    request: PublishRequest,
    *,
    context: RepositoryContext,
    manifest: PackageManifest,
    branch: str,
    remote_url: str,
    manager: PackageManager,
    packer: Packer,
    staging_base: Path | None,
) -> PublishResult:
    with ExitStack() as stack:
        stack.enter_context(interrupt_on_signals())
        workspace = PublishWorkspace(context.repo_root, base_dir=staging_base)
        ui.StepSpinner("Creating worktree").run(workspace.create)
        stack.callback(ui.StepSpinner("Cleaning up").run, workspace.cleanup)
        worktree = workspace.publish_worktree

        target: PublishTarget = ui.StepSpinner("Checking out branch").run(
            lambda: prepare_publish_branch(
                worktree,
                remote=request.remote,
                branch=branch,
                local_branch=workspace.local_branch,
                fresh=request.fresh,
            )
        )

        job = PackJob(
            package_manager=manager,
            context=context,
            manifest=manifest,
            pack_worktree=workspace.pack_worktree,
            destination=workspace.pack_destination,
        )
        files = ui.StepSpinner("Packing package").run(
            lambda: pack_into_worktree(job, worktree, packer=packer)
        )
        ui.render_files(manifest.name, files)

        commit_sha, committed = ui.StepSpinner("Commiting publish assets").run(
            lambda: commit_packed_files(worktree, context)
        )

        ui.StepSpinner(f'Pushing branch "{branch}" to remote "{request.remote}"').run(
            lambda: push_publish(worktree, remote=request.remote, branch=branch, force=request.fresh)
        )
        logger.debug("pushed %s to %s:%s (%s)", commit_sha, request.remote, branch, target.mode.value)

    hosted = parse_hosted_repo(remote_url)
    return PublishResult(
        branch=branch,
        remote=request.remote,
        remote_url=remote_url,
        package_manager=manager,
        mode=target.mode,
        dry_run=False,
        files=tuple(files),
        commit_sha=commit_sha,
        committed=committed,
        pushed=True,
        install_command=install_command(manager, hosted, branch) if hosted else None,
        tree_url=hosted.tree_url(branch) if hosted else None,
    )
