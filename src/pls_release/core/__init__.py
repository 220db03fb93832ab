"""Core business logic for pls-release.

This module contains the fundamental building blocks:
- Version parsing and prerelease progression
- Conventional commit classification
- Bump calculation
- Changelog rendering
- Release metadata and the proposal version-selection block
"""

from __future__ import annotations

from pls_release.core.bump import (
    VersionBump,
    calculate_bump,
    calculate_transition,
    determine_bump_kind,
)
from pls_release.core.changelog import generate_changelog, generate_release_notes
from pls_release.core.commits import (
    Commit,
    CommitType,
    filter_releasable_commits,
    group_by_type,
    parse_commit_message,
)
from pls_release.core.metadata import (
    ReleaseMetadata,
    parse_release_metadata,
    release_commit_message,
    release_tag_message,
)
from pls_release.core.options import (
    VersionOption,
    VersionSelection,
    generate_options,
    generate_options_block,
    parse_options_block,
)
from pls_release.core.version import (
    BumpKind,
    ParsedVersion,
    Prerelease,
    Stage,
    compare_versions,
    parse_version,
)

__all__ = [
    # Version
    "BumpKind",
    # Commits
    "Commit",
    "CommitType",
    "ParsedVersion",
    "Prerelease",
    # Metadata
    "ReleaseMetadata",
    "Stage",
    # Bump
    "VersionBump",
    # Options
    "VersionOption",
    "VersionSelection",
    "calculate_bump",
    "calculate_transition",
    "compare_versions",
    "determine_bump_kind",
    "filter_releasable_commits",
    # Changelog
    "generate_changelog",
    "generate_options",
    "generate_options_block",
    "generate_release_notes",
    "group_by_type",
    "parse_commit_message",
    "parse_options_block",
    "parse_release_metadata",
    "parse_version",
    "release_commit_message",
    "release_tag_message",
]
