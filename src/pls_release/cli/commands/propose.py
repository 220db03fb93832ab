"""Implementation of the 'propose' command.

Opens or refreshes the release pull request for the base branch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from pls_release.cli.context import load_project, open_host
from pls_release.cli.output import print_error, write_json_output
from pls_release.exceptions import PlsError
from pls_release.workflows import propose_release

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console


def run_propose(
    path: str | None,
    dry_run: bool,
    token: str | None,
    repository: str | None,
    json_output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the propose command.

    Args:
        path: Optional path to the repository
        dry_run: Preview the proposal without writing anything
        token: GitHub token override
        repository: ``owner/name`` override
        json_output: Optional file for the JSON result
        console: Console for standard output
        err_console: Console for error output
    """
    project = load_project(path, err_console)

    with open_host(project, token, repository, err_console) as host:
        try:
            result = propose_release(project.repo, host, project.config, dry_run=dry_run)
        except PlsError as e:
            print_error(err_console, e)
            raise SystemExit(1) from e

    write_json_output(json_output, result)

    if result.pr is None:
        console.print(f"[yellow]No releasable changes since {result.version}. Nothing to do.[/]")
        return

    if result.bootstrap:
        headline = f"Initialize pls at [green]{result.version}[/]"
    else:
        assert result.bump is not None
        headline = (
            f"[cyan]{result.bump.from_version}[/] -> [green]{result.bump.to_version}[/] "
            f"([bold]{result.bump.kind}[/])"
        )

    if result.dry_run:
        console.print(
            Panel(
                f"{headline}\n\n[bold]{result.pr.title}[/]\n\n{result.pr.body}",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        return

    console.print(f"[green]Proposal ready:[/] {headline}")
    if result.pr.url:
        console.print(f"  {result.pr.url}")
