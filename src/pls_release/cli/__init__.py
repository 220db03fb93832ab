"""Command-line interface for pls-release."""

from __future__ import annotations

from pls_release.cli.app import app, main

__all__ = ["app", "main"]
