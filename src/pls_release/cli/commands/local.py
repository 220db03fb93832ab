"""Implementation of the 'local' and 'transition' commands.

Both release from the working copy without a pull request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from pls_release.cli.context import load_project
from pls_release.cli.output import print_error, write_json_output
from pls_release.exceptions import PlsError
from pls_release.workflows import release_locally, transition_locally

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from pls_release.core.version import BumpKind, Stage
    from pls_release.workflows import LocalReleaseResult


def run_local(
    path: str | None,
    dry_run: bool,
    push: bool,
    json_output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    project = load_project(path, err_console)

    try:
        result = release_locally(project.repo, project.config, dry_run=dry_run, push=push)
    except PlsError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    write_json_output(json_output, result)
    _report(result, console)


def run_transition(
    path: str | None,
    target: Stage,
    kind: BumpKind,
    dry_run: bool,
    push: bool,
    json_output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    project = load_project(path, err_console)

    try:
        result = transition_locally(
            project.repo,
            project.config,
            target,
            kind=kind,
            dry_run=dry_run,
            push=push,
        )
    except PlsError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    write_json_output(json_output, result)
    _report(result, console)


def _report(result: LocalReleaseResult, console: Console) -> None:
    if result.bump is None:
        console.print("[yellow]No releasable changes since the last release. Nothing to do.[/]")
        return

    line = f"[cyan]{result.bump.from_version}[/] -> [green]{result.bump.to_version}[/]"

    if result.dry_run:
        console.print(
            Panel(
                f"{line}\n\nWould commit the release files and create tag [cyan]{result.tag}[/].",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        return

    console.print(f"[green]Released {result.tag}[/] ({line})")
    if not result.pushed:
        console.print(f"[dim]Push with: git push origin HEAD {result.tag}[/]")
