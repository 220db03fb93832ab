"""Release file set construction.

Builds every file a release commit touches (ecosystem manifests, the
versions manifest, an optional tracked version file and ``CHANGELOG.md``)
plus the commit message carrying the release metadata.

Pure functions; I/O goes through a ``read_file`` callable so the same code
serves the local checkout and the code host.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pls_release.core.changelog import prepend_changelog
from pls_release.core.metadata import ReleaseMetadata, release_commit_message
from pls_release.project.manifests import (
    ManifestFile,
    read_updatable_manifests,
    update_manifest_version,
)
from pls_release.project.versions import (
    VERSIONS_MANIFEST_PATH,
    parse_versions_manifest,
    root_entry,
    update_versions_manifest,
)

if TYPE_CHECKING:
    from pls_release.core.version import BumpKind
    from pls_release.project.manifests import ReadFile

CHANGELOG_PATH = "CHANGELOG.md"

# Marker must not be followed by a word on the same line, so prose such as
# "@pls-version marks the line below" is ignored
VERSION_MARKER_REGEX = re.compile(r"@pls-version(?![ \t]+\w)")
SEMVER_LITERAL_REGEX = re.compile(r"\d+\.\d+\.\d+(?:-[\w.]+)?")


@dataclass(frozen=True, slots=True)
class TrackedFile:
    path: str
    content: str


@dataclass(frozen=True, slots=True)
class ReleaseInputs:
    """Current repository state a release is computed from."""

    current_version: str
    versions_json: str
    manifests: list[ManifestFile] = field(default_factory=list)
    version_file: TrackedFile | None = None
    existing_changelog: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseFiles:
    files: dict[str, str]
    commit_message: str


def update_version_file(content: str, version: str) -> str | None:
    """Replace the semver on the line after the ``@pls-version`` marker.

    Quoting and surrounding syntax on that line are preserved.

    Returns:
        Updated content, or None if no marker/version pair was found
    """
    if not VERSION_MARKER_REGEX.search(content):
        return None

    lines = content.split("\n")
    for i in range(len(lines) - 1):
        if VERSION_MARKER_REGEX.search(lines[i]) and SEMVER_LITERAL_REGEX.search(lines[i + 1]):
            lines[i + 1] = SEMVER_LITERAL_REGEX.sub(version, lines[i + 1], count=1)
            return "\n".join(lines)
    return None


def read_release_inputs(read_file: ReadFile, version_file: str | None = None) -> ReleaseInputs | None:
    """Read the state a release is built from.

    Args:
        read_file: Returns file content for a path, or None if missing
        version_file: Configured tracked version file, overriding the one
            recorded in the versions manifest

    Returns:
        ReleaseInputs, or None if the versions manifest does not exist

    Raises:
        ManifestError: If the versions manifest is malformed
    """
    versions_json = read_file(VERSIONS_MANIFEST_PATH)
    if versions_json is None:
        return None

    entry = root_entry(parse_versions_manifest(versions_json))

    tracked: TrackedFile | None = None
    tracked_path = version_file or entry.version_file
    if tracked_path:
        content = read_file(tracked_path)
        if content is not None:
            tracked = TrackedFile(tracked_path, content)

    return ReleaseInputs(
        current_version=entry.version,
        versions_json=versions_json,
        manifests=read_updatable_manifests(read_file),
        version_file=tracked,
        existing_changelog=read_file(CHANGELOG_PATH),
    )


def build_release_files(
    inputs: ReleaseInputs,
    *,
    version: str,
    from_version: str,
    kind: BumpKind,
    changelog_entry: str,
) -> ReleaseFiles:
    """Build the full file set for a release commit.

    Args:
        inputs: Current repository state
        version: Version being released
        from_version: Version being replaced
        kind: Bump kind recorded in the commit metadata
        changelog_entry: Rendered notes to prepend to ``CHANGELOG.md``

    Returns:
        ReleaseFiles with path -> content and the commit message
    """
    files: dict[str, str] = {}

    for manifest in inputs.manifests:
        updated = update_manifest_version(manifest.path, manifest.content, version)
        if updated != manifest.content:
            files[manifest.path] = updated

    files[VERSIONS_MANIFEST_PATH] = update_versions_manifest(inputs.versions_json, version)

    if inputs.version_file is not None:
        updated = update_version_file(inputs.version_file.content, version)
        if updated is not None:
            files[inputs.version_file.path] = updated

    files[CHANGELOG_PATH] = prepend_changelog(inputs.existing_changelog, changelog_entry)

    metadata = ReleaseMetadata(version=version, from_version=from_version, kind=kind)
    return ReleaseFiles(files=files, commit_message=release_commit_message(metadata))
