"""Ambient state for CLI commands.

The working directory, environment variables and git remote are read here
and nowhere else; workflows receive what they need as arguments.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pls_release.config import load_config
from pls_release.exceptions import HostError, PlsError
from pls_release.vcs import GitHubHost, GitRepository
from pls_release.vcs.github import DEFAULT_API_URL

if TYPE_CHECKING:
    from rich.console import Console

    from pls_release.config import PlsConfig

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
API_URL_ENV_VAR = "GITHUB_API_URL"


@dataclass(frozen=True, slots=True)
class Project:
    root: Path
    config: PlsConfig
    repo: GitRepository


def load_project(path: str | None, err_console: Console) -> Project:
    """Load configuration and open the repository at ``path`` (default: cwd).

    Exits with status 1 on configuration errors.
    """
    root = Path(path) if path else Path.cwd()

    try:
        config = load_config(root)
    except PlsError as e:
        err_console.print(f"[red]Error loading config:[/] {e.message}")
        raise SystemExit(1) from e

    return Project(root=root, config=config, repo=GitRepository(root))


def resolve_token(token: str | None) -> str | None:
    if token:
        return token
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def open_host(
    project: Project,
    token: str | None,
    repository: str | None,
    err_console: Console,
) -> GitHubHost:
    """Create the GitHub client for the project.

    Args:
        project: Loaded project
        token: Explicit token, else taken from the environment
        repository: ``owner/name``, else detected from the ``origin`` remote
        err_console: Console for error output
    """
    if repository:
        owner, _, name = repository.partition("/")
        slug = (owner, name) if owner and name else None
    else:
        try:
            slug = project.repo.remote_info()
        except PlsError as e:
            err_console.print(f"[red]Error:[/] {e.message}")
            raise SystemExit(1) from e

    if slug is None:
        err_console.print(
            "[red]Error:[/] Could not determine the GitHub repository.\n"
            "Pass [cyan]--repo owner/name[/] or add a GitHub [cyan]origin[/] remote."
        )
        raise SystemExit(1)

    api_url = os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL
    try:
        return GitHubHost(slug[0], slug[1], resolve_token(token) or "", api_url=api_url)
    except HostError as e:
        err_console.print(f"[red]Error:[/] {e.message}")
        raise SystemExit(1) from e
