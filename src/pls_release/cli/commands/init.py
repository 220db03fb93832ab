"""Implementation of the 'init' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from pls_release.cli.context import load_project
from pls_release.cli.output import print_error, write_json_output
from pls_release.config.loader import validate_config
from pls_release.exceptions import PlsError
from pls_release.workflows import init_locally

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from pls_release.config import PlsConfig


def _config_with_overrides(
    config: PlsConfig,
    strategy: str | None,
    base_branch: str | None,
    target_branch: str | None,
) -> PlsConfig | None:
    """Loaded config plus command-line settings, or None if none were given."""
    overrides = {
        key: value
        for key, value in (
            ("strategy", strategy),
            ("base_branch", base_branch),
            ("target_branch", target_branch),
        )
        if value is not None
    }
    if not overrides:
        return None
    return validate_config({**config.model_dump(exclude_defaults=True), **overrides}, source="command line")


def run_init(
    path: str | None,
    version: str | None,
    version_file: str | None,
    strategy: str | None,
    base_branch: str | None,
    target_branch: str | None,
    dry_run: bool,
    json_output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    project = load_project(path, err_console)

    try:
        config = _config_with_overrides(project.config, strategy, base_branch, target_branch)
        result = init_locally(
            project.repo,
            version=version,
            version_file=version_file,
            config=config,
            dry_run=dry_run,
        )
    except PlsError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    write_json_output(json_output, result)

    source = f" (from {result.manifest})" if result.manifest and version is None else ""
    files = "\n".join(f"  [green]+[/] {name}" for name in result.files_created)
    summary = f"Version: [cyan]{result.version}[/]{source}\nTag: [cyan]{result.tag}[/]\n\nFiles:\n{files}"

    if result.dry_run:
        console.print(Panel(summary, title="[yellow]Dry Run Preview[/]", border_style="yellow"))
        console.print("[dim]Run without --dry-run to initialize.[/]")
        return

    console.print(Panel(summary, title="[green]Initialized pls[/]", border_style="green"))
    if not result.tag_created:
        console.print(f"[dim]Tag {result.tag} already existed and was left as is.[/]")
    console.print("\nNext steps:")
    console.print('  1. [cyan]git add .pls && git commit -m "chore: initialize pls"[/]')
    console.print(f"  2. [cyan]git push && git push origin {result.tag}[/]")
    console.print("  3. [cyan]pls propose[/] to open the first release pull request")
