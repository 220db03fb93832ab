"""The ``pls`` command-line application."""

from __future__ import annotations

from pathlib import Path

import typer

from pls_release import __version__
from pls_release.cli.commands.init import run_init
from pls_release.cli.commands.local import run_local, run_transition
from pls_release.cli.commands.propose import run_propose
from pls_release.cli.commands.release import run_release
from pls_release.cli.commands.sync import run_sync
from pls_release.cli.output import console, err_console
from pls_release.core.version import BumpKind, Stage
from pls_release.logging import configure_logging

app = typer.Typer(
    name="pls",
    help="Release automation from conventional commits.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

PathOption = typer.Option(None, "--path", "-p", help="Repository root (default: current directory)")
TokenOption = typer.Option(None, "--token", help="GitHub token (default: $GITHUB_TOKEN)")
RepoOption = typer.Option(None, "--repo", help="GitHub repository as owner/name (default: from origin)")
JsonOutputOption = typer.Option(None, "--json-output", help="Write the result as JSON to this file")


@app.callback(invoke_without_command=True)
def _main(
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    configure_logging(verbose=verbose, json_logs=json_logs)


@app.command()
def init(
    path: str | None = PathOption,
    version: str | None = typer.Option(None, "--version", help="Starting version (default: from the project manifest)"),
    version_file: str | None = typer.Option(
        None,
        "--version-file",
        help="Source file with an @pls-version marker to keep in sync",
    ),
    strategy: str | None = typer.Option(None, "--strategy", help="Branch strategy: simple or two-branch"),
    base_branch: str | None = typer.Option(None, "--base-branch", help="Branch where commits land"),
    target_branch: str | None = typer.Option(None, "--target-branch", help="Branch where releases are tagged"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing anything"),
    json_output: Path | None = JsonOutputOption,
) -> None:
    """Set up pls in this repository and tag the current version."""
    run_init(
        path,
        version,
        version_file,
        strategy,
        base_branch,
        target_branch,
        dry_run,
        json_output,
        console,
        err_console,
    )


@app.command()
def propose(
    path: str | None = PathOption,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing anything"),
    token: str | None = TokenOption,
    repo: str | None = RepoOption,
    json_output: Path | None = JsonOutputOption,
) -> None:
    """Open or update the release pull request."""
    run_propose(path, dry_run, token, repo, json_output, console, err_console)


@app.command()
def sync(
    pr: int = typer.Option(..., "--pr", help="Release pull request number"),
    path: str | None = PathOption,
    token: str | None = TokenOption,
    repo: str | None = RepoOption,
    json_output: Path | None = JsonOutputOption,
) -> None:
    """Apply the version selected in the release pull request."""
    run_sync(path, pr, token, repo, json_output, console, err_console)


@app.command()
def release(
    path: str | None = PathOption,
    token: str | None = TokenOption,
    repo: str | None = RepoOption,
    json_output: Path | None = JsonOutputOption,
) -> None:
    """Tag and publish the merged release (safe to run on every push)."""
    run_release(path, token, repo, json_output, console, err_console)


@app.command()
def local(
    path: str | None = PathOption,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing anything"),
    push: bool = typer.Option(False, "--push", help="Push the release commit and tag"),
    json_output: Path | None = JsonOutputOption,
) -> None:
    """Release from the working copy without a pull request."""
    run_local(path, dry_run, push, json_output, console, err_console)


@app.command()
def transition(
    target: Stage = typer.Argument(..., help="Stage to move to: alpha, beta, rc or stable"),
    bump: BumpKind = typer.Option(
        BumpKind.MINOR,
        "--bump",
        help="Numeric bump applied when leaving a stable version",
    ),
    path: str | None = PathOption,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing anything"),
    push: bool = typer.Option(False, "--push", help="Push the release commit and tag"),
    json_output: Path | None = JsonOutputOption,
) -> None:
    """Move to another release stage from the working copy."""
    run_transition(path, target, bump, dry_run, push, json_output, console, err_console)


def main() -> None:
    app()
