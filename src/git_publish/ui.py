from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text

from git_publish.types import BranchMode, PackedFile, PublishResult

_T = TypeVar("_T")

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

_UNITS = ("B", "kB", "MB", "GB", "TB")


def progress_enabled() -> bool:
    return os.getenv("GIT_PUBLISH_PROGRESS", "1") == "1" and console.is_terminal


def format_bytes(size: int) -> str:
    """Human-readable SI size: 512 B, 1.2 kB, 3.4 MB."""
    value = float(size)
    for unit in _UNITS:
        if abs(value) < 1000 or unit == _UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.1f} {unit}"
        value /= 1000
    raise AssertionError("unreachable")


@dataclass(frozen=True)
class StepSpinner:
    message: str

    def run(self, fn: Callable[[], _T]) -> _T:
        if not progress_enabled():
            return fn()

        with Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold]{task.description}[/bold]"),
            transient=True,
            console=console,
        ) as prog:
            task_id = prog.add_task(self.message, total=None)
            try:
                return fn()
            finally:
                prog.update(task_id, completed=1)


def render_header(current_branch: str, publish_branch: str, *, dry: bool) -> None:
    title = Text(f'Publishing branch "{current_branch}" → "{publish_branch}"', style="bold")
    if dry:
        title.append("  (dry run)", style="yellow")
    console.print(title)


def render_files(package_name: str | None, files: Iterable[PackedFile]) -> None:
    packed = list(files)
    console.print(Text(f"Publishing {package_name or '(unnamed package)'}", style="bright_blue"))
    for entry in packed:
        line = Text(entry.path)
        line.append(f" {format_bytes(entry.size)}", style="dim")
        console.print(line)
    console.print()
    total = Text("Total size", style="bright_blue")
    total.append(f" {format_bytes(sum(entry.size for entry in packed))}")
    console.print(total)


def render_warning(message: str) -> None:
    err_console.print(Text(f"⚠️  {message}", style="yellow"))


def render_dry_run(result: PublishResult, *, fresh: bool) -> None:
    if fresh:
        action = "replace the branch with a single commit (force push)"
    elif result.mode is BranchMode.REPOINT:
        action = "add a commit on top of the existing branch"
    else:
        action = "create the branch with no history"
    console.print(Text("Dry run: nothing was committed or pushed", style="yellow"))
    console.print(Text(f"  branch:          {result.branch}"))
    console.print(Text(f"  remote:          {result.remote} ({result.remote_url})"))
    console.print(Text(f"  package manager: {result.package_manager}"))
    console.print(Text(f"  would:           {action}"))


def render_success(result: PublishResult) -> None:
    short = (result.commit_sha or "")[:7]
    line = Text("✔ Successfully published branch: ", style="green")
    line.append(result.branch, style="cyan")
    if short:
        line.append(f" ({short})", style="dim")
    console.print(line)
    if result.tree_url:
        console.print(Text(f"  {result.tree_url}", style="dim"))
    if result.install_command:
        console.print()
        console.print("Install command")
        console.print(Text(result.install_command))
