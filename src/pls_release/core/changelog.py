"""Changelog generation from classified commits.

Groups commits by type and renders markdown sections. The same body is
used in three places: the ``CHANGELOG.md`` entry, the proposal
description and the hosted release notes.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from pls_release.core.commits import CommitType, get_breaking_changes, group_by_type

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pls_release.core.bump import VersionBump
    from pls_release.core.commits import Commit

CHANGELOG_HEADER = "# Changelog"

BREAKING_LABEL = "### ⚠️ Breaking Changes"

# Section order in the rendered changelog
TYPE_LABELS: dict[CommitType, str] = {
    CommitType.FEAT: "### ✨ Features",
    CommitType.FIX: "### 🐛 Bug Fixes",
    CommitType.PERF: "### ⚡ Performance",
    CommitType.REFACTOR: "### ♻️ Refactoring",
    CommitType.DOCS: "### 📚 Documentation",
    CommitType.STYLE: "### 💄 Style",
    CommitType.TEST: "### 🧪 Tests",
    CommitType.BUILD: "### 📦 Build",
    CommitType.CI: "### 🔧 CI",
    CommitType.CHORE: "### 🔨 Chores",
    CommitType.REVERT: "### ⏪ Reverts",
}


def format_commit(commit: Commit, *, include_revision: bool = False) -> str:
    """Format a single commit as a changelog bullet.

    Args:
        commit: Commit to format
        include_revision: Append the short revision id

    Returns:
        Markdown list item
    """
    scope = f"**{commit.scope}:** " if commit.scope else ""
    line = f"- {scope}{commit.description}"
    if include_revision:
        line += f" ({commit.revision[:7]})"
    return line


def _section(label: str, commits: Iterable[Commit]) -> str:
    items = "\n".join(format_commit(c) for c in commits)
    return f"{label}\n\n{items}"


def generate_changelog(bump: VersionBump) -> str:
    """Render the grouped changelog body for a bump.

    Breaking changes come first and are not repeated in their type section.
    Types without a known label get a section named after the raw token.

    Returns:
        Markdown body, empty if the bump carries no commits
    """
    sections: list[str] = []

    breaking = get_breaking_changes(bump.commits)
    if breaking:
        sections.append(_section(BREAKING_LABEL, breaking))

    grouped = group_by_type(c for c in bump.commits if not c.breaking)

    for commit_type, label in TYPE_LABELS.items():
        commits = grouped.get(commit_type.value)
        if commits:
            sections.append(_section(label, commits))

    for type_token, commits in grouped.items():
        if CommitType.from_token(type_token) == CommitType.OTHER:
            sections.append(_section(f"### {type_token}", commits))

    return "\n\n".join(sections)


def render_release_notes(version: str, body: str, release_date: date | None = None) -> str:
    """Prefix a changelog body with the ``## [version] - date`` header."""
    day = release_date or datetime.now(UTC).date()
    header = f"## [{version}] - {day.isoformat()}"
    return f"{header}\n\n{body}" if body else header


def generate_release_notes(bump: VersionBump, release_date: date | None = None) -> str:
    """Changelog body with a version header, for ``CHANGELOG.md``."""
    return render_release_notes(bump.to_version, generate_changelog(bump), release_date)


def prepend_changelog(existing: str | None, entry: str) -> str:
    """Insert a new entry below the ``# Changelog`` header.

    Args:
        existing: Current file content, or None if the file does not exist
        entry: Rendered release notes for the new version

    Returns:
        New file content with exactly one header
    """
    header = f"{CHANGELOG_HEADER}\n\n"

    if not existing:
        return f"{header}{entry}\n"

    body = existing
    if body.startswith(CHANGELOG_HEADER):
        header_end = body.find("\n\n")
        body = body[header_end + 2 :] if header_end > 0 else ""

    return f"{header}{entry}\n\n{body}"
