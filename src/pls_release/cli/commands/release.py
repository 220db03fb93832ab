"""Implementation of the 'release' command.

Tags and publishes the release on the target branch. Safe to run on every
push: it only does what is still missing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pls_release.cli.context import load_project, open_host
from pls_release.cli.output import print_error, write_json_output
from pls_release.exceptions import PlsError
from pls_release.workflows import finalize_release

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console


def run_release(
    path: str | None,
    token: str | None,
    repository: str | None,
    json_output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Exit status is 0 even when the two-branch sync fails; the failure is
    printed as a warning since it needs manual follow-up, not a rerun.
    """
    project = load_project(path, err_console)

    with open_host(project, token, repository, err_console) as host:
        try:
            result = finalize_release(project.repo, host, project.config)
        except PlsError as e:
            print_error(err_console, e)
            raise SystemExit(1) from e

    write_json_output(json_output, result)

    if result.version is None:
        console.print("[yellow]No release found on this commit. Nothing to do.[/]")
    elif result.unmanaged_tag:
        err_console.print(
            f"[yellow]Warning:[/] Tag [cyan]{result.tag}[/] exists but was not created by pls. "
            "It was left untouched."
        )
    elif result.released:
        console.print(f"[green]Released {result.tag}[/]")
        if result.url:
            console.print(f"  {result.url}")
    elif result.already_exists:
        console.print(f"[dim]{result.tag} is already released.[/]")
    else:
        console.print(f"[dim]{result.version} is the initial version; nothing to tag.[/]")

    sync = result.branch_sync
    if sync is not None:
        if sync.synced:
            console.print(f"[green]Rebased {project.config.base_branch} onto {project.config.target_branch}[/]")
        else:
            err_console.print(f"[yellow]Warning:[/] {sync.error}")
