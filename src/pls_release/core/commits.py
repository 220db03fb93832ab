"""Conventional commit parsing.

Parses commit messages following the Conventional Commits specification:
https://www.conventionalcommits.org/

Format: <type>[optional scope][!]: <description>

Examples:
    feat: add user authentication
    fix(api): handle null response
    feat!: redesign configuration format
    feat(core)!: change API structure

Messages that do not follow the format are kept as ``chore`` commits so
they still count towards a patch release.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

COMMIT_REGEX = re.compile(r"^(\w+)(?:\(([^)]+)\))?(!)?: (.+)$")
BREAKING_MARKER = "BREAKING CHANGE"

# Subjects of commits this tool creates itself, or that only merge history
RELEASE_PREFIXES = ("release v", "chore: release", "chore: initialize pls")
MERGE_PREFIX = "Merge "


class CommitType(StrEnum):
    """Known conventional commit types, with a catch-all for the rest."""

    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    DOCS = "docs"
    STYLE = "style"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    REVERT = "revert"
    OTHER = "other"

    @classmethod
    def from_token(cls, token: str) -> CommitType:
        try:
            return cls(token.lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, slots=True)
class Commit:
    """A classified commit.

    Attributes:
        revision: Opaque revision id (never parsed)
        type: Lowercase commit type token, free-form
        scope: Optional scope from ``type(scope):``
        description: Subject text after the colon
        breaking: True for ``!`` or a ``BREAKING CHANGE`` body marker
        body: Everything after the subject line, if anything
        is_merge: True when the VCS reports more than one parent
    """

    revision: str
    type: str
    description: str
    scope: str | None = None
    breaking: bool = False
    body: str | None = None
    is_merge: bool = False

    @property
    def kind(self) -> CommitType:
        return CommitType.from_token(self.type)


def parse_commit_message(revision: str, message: str, *, is_merge: bool = False) -> Commit | None:
    """Classify a single commit message.

    Args:
        revision: Revision id of the commit
        message: Full commit message
        is_merge: Structural merge flag from the VCS

    Returns:
        Commit, or None if the message has no subject line
    """
    lines = message.split("\n")
    subject = lines[0].strip() if lines else ""
    if not subject:
        return None

    body = "\n".join(lines[1:]).strip() or None

    match = COMMIT_REGEX.match(subject)
    if not match:
        return Commit(
            revision=revision,
            type=CommitType.CHORE.value,
            description=subject,
            body=body,
            is_merge=is_merge,
        )

    commit_type, scope, bang, description = match.groups()
    breaking = bang == "!" or (body is not None and BREAKING_MARKER in body)

    return Commit(
        revision=revision,
        type=commit_type.lower(),
        scope=scope or None,
        description=description,
        breaking=breaking,
        body=body,
        is_merge=is_merge,
    )


def is_releasable(commit: Commit) -> bool:
    """Whether a commit should count towards the next release."""
    if commit.is_merge:
        return False
    if commit.description.startswith(MERGE_PREFIX):
        return False
    subject = f"{commit.type}: {commit.description}"
    return not any(
        commit.description.startswith(prefix) or subject.startswith(prefix)
        for prefix in RELEASE_PREFIXES
    )


def filter_releasable_commits(commits: Iterable[Commit]) -> list[Commit]:
    """Drop merge commits and the release commits this tool creates."""
    return [c for c in commits if is_releasable(c)]


def group_by_type(commits: Iterable[Commit]) -> dict[str, list[Commit]]:
    """Group commits by their type token, preserving first-seen order."""
    groups: dict[str, list[Commit]] = {}
    for commit in commits:
        groups.setdefault(commit.type, []).append(commit)
    return groups


def get_breaking_changes(commits: Iterable[Commit]) -> list[Commit]:
    return [c for c in commits if c.breaking]
