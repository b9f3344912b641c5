"""git-publish CLI: publish a package to a git branch."""

from __future__ import annotations

from pathlib import Path

import typer

from git_publish import __version__, ui
from git_publish.config import load_publish_config
from git_publish.errors import GitPublishError
from git_publish.exec import ExecError, SpawnError
from git_publish.log import configure_logging
from git_publish.publish import run_publish
from git_publish.types import PublishResult

app = typer.Typer(
    name="git-publish",
    help="Publish your npm package to a GitHub repository branch",
    add_completion=False,
)


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _fail(message: str) -> typer.Exit:
    # git and npm output can span lines; errors are printed as one
    single_line = " ".join(line.strip() for line in message.splitlines() if line.strip())
    typer.echo(f"Error: {single_line}", err=True)
    return typer.Exit(1)


def _render_result(result: PublishResult, *, fresh: bool) -> None:
    if result.dry_run:
        ui.render_dry_run(result, fresh=fresh)
        return
    ui.render_success(result)


@app.command()
def publish(
    branch: str | None = typer.Option(
        None,
        "--branch",
        "-b",
        metavar="<branch name>",
        help='The branch to publish the package to. Defaults to prefixing "npm/" to the current branch or tag name.',
    ),
    remote: str | None = typer.Option(
        None,
        "--remote",
        "-r",
        metavar="<remote>",
        help="The remote to push to. [default: origin]",
    ),
    fresh: bool | None = typer.Option(
        None,
        "--fresh/--no-fresh",
        "-o",
        help="Publish without a commit history. Warning: Force-pushes to remote",
        show_default=False,
    ),
    dry: bool = typer.Option(
        False,
        "--dry",
        "-d",
        help="Dry run mode. Will not commit or push to the remote.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip checks and force publish.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every git and package manager command.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Publish the package in the current directory to a git branch."""
    _ = version
    configure_logging(verbose)
    cwd = Path.cwd()
    try:
        config = load_publish_config(cwd)
        request = config.apply(
            branch=branch,
            remote=remote,
            fresh=fresh,
            dry=dry,
            force=force,
        )
        result = run_publish(request, cwd=cwd, package_manager=config.package_manager)
    except KeyboardInterrupt:
        raise _fail("Interrupted") from None
    except (GitPublishError, ExecError, SpawnError) as exc:
        raise _fail(str(exc)) from exc

    _render_result(result, fresh=request.fresh)


def main() -> None:
    app(prog_name="git-publish")
