"""Helpers shared by the release workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pls_release.core.version import parse_version
from pls_release.logging import get_logger
from pls_release.project.versions import VERSIONS_MANIFEST_PATH, version_needle

if TYPE_CHECKING:
    from pls_release.project.manifests import ReadFile
    from pls_release.vcs.base import CodeHost, LocalRepository

logger = get_logger(__name__)

INITIAL_VERSION = "0.0.0"


def tag_name(version: str) -> str:
    return f"v{version}"


def host_reader(host: CodeHost, ref: str) -> ReadFile:
    """Bind a code host and ref into a ``read_file(path)`` callable."""

    def read(path: str) -> str | None:
        return host.read_file(path, ref)

    return read


def find_release_revision(repo: LocalRepository, host: CodeHost, version: str) -> str | None:
    """Find the revision of the release that produced ``version``.

    A managed tag wins. Without one (tags can be lost when history is
    rewritten) the most recent commit that wrote ``version`` into the
    versions manifest is used instead.

    Returns:
        Revision id, or None for a repository with no release yet
    """
    tag = host.get_tag(tag_name(version))
    if tag is not None:
        if tag.is_managed:
            return tag.revision
        logger.warning("unmanaged_tag_ignored", tag=tag.name)

    revision = repo.find_commit_by_content(version_needle(version), VERSIONS_MANIFEST_PATH)
    if revision is None:
        logger.info("release_revision_not_found", version=version)
    return revision


def find_previous_version(host: CodeHost, version: str) -> str:
    """Best-effort guess at the version released before ``version``.

    Checks the previous patch and then the previous minor for an existing
    tag. Falls back to ``0.0.0``.
    """
    parsed = parse_version(version)
    if parsed is None:
        return INITIAL_VERSION

    candidates = []
    if parsed.patch > 0:
        candidates.append(f"{parsed.major}.{parsed.minor}.{parsed.patch - 1}")
    if parsed.minor > 0:
        candidates.append(f"{parsed.major}.{parsed.minor - 1}.0")

    for candidate in candidates:
        if host.get_tag(tag_name(candidate)) is not None:
            return candidate
    return INITIAL_VERSION


def version_change_note(from_version: str, to_version: str) -> str:
    """Fallback changelog when no commit list is available."""
    return f"Version changed from {from_version} to {to_version}"
