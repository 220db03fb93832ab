"""Implementation of the 'sync' command.

Rebuilds the release pull request after the version selection changed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pls_release.cli.context import load_project, open_host
from pls_release.cli.output import print_error, write_json_output
from pls_release.exceptions import PlsError
from pls_release.workflows import sync_proposal

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console


def run_sync(
    path: str | None,
    pr_number: int,
    token: str | None,
    repository: str | None,
    json_output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    project = load_project(path, err_console)

    with open_host(project, token, repository, err_console) as host:
        try:
            result = sync_proposal(host, project.config, pr_number)
        except PlsError as e:
            print_error(err_console, e)
            raise SystemExit(1) from e

    write_json_output(json_output, result)

    if result.synced:
        console.print(
            f"[green]Synced #{pr_number}:[/] [cyan]{result.old_version}[/] -> "
            f"[green]{result.new_version}[/]"
        )
    elif result.new_version is None:
        console.print(f"[yellow]No version selection found in #{pr_number}.[/]")
    else:
        console.print(f"[dim]#{pr_number} already proposes {result.new_version}.[/]")
