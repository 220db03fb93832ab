"""Console output and machine-readable result files."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console

if TYPE_CHECKING:
    from pls_release.exceptions import PlsError

console = Console()
err_console = Console(stderr=True)


def result_to_dict(result: Any) -> dict[str, Any]:
    """Convert a workflow result dataclass into JSON-ready data."""
    return dataclasses.asdict(result)


def write_json_output(path: Path | None, result: Any) -> None:
    """Write a workflow result to ``path`` as JSON, if a path was given."""
    if path is None:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result_to_dict(result), indent=2) + "\n", encoding="utf-8")


def print_error(err_console: Console, error: PlsError) -> None:
    err_console.print(f"[red]Error:[/] {error.message} [dim]({error.code})[/]")
