"""Tag and publish a merged release.

Runs on every push to the target branch and repairs whatever an earlier run
left unfinished. The tag is the lock: once a managed tag exists the release
is done, and "already exists" answers from the host count as success, so
overlapping runs need no coordination.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pls_release.core.bump import VersionBump, classify_change
from pls_release.core.changelog import generate_changelog
from pls_release.core.commits import filter_releasable_commits
from pls_release.core.metadata import (
    ReleaseMetadata,
    is_baseline,
    parse_release_metadata,
    release_tag_message,
    tag_message_notes,
)
from pls_release.core.options import declared_version, extract_changelog
from pls_release.core.version import Stage, get_stage
from pls_release.exceptions import HostConflictError
from pls_release.logging import get_logger
from pls_release.project.versions import (
    VERSIONS_MANIFEST_PATH,
    parse_versions_manifest,
    root_entry,
    version_needle,
)
from pls_release.workflows.branch_sync import BranchSyncResult, sync_branches
from pls_release.workflows.common import find_previous_version, tag_name, version_change_note

if TYPE_CHECKING:
    from pls_release.config.models import PlsConfig
    from pls_release.vcs.base import CodeHost, ReleaseRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FinalizeResult:
    """Outcome of a finalize run.

    Attributes:
        released: This run created the tag
        version: Version found on the target branch
        tag: Tag name for ``version``
        url: Release URL when this run created the release
        already_exists: A managed tag was already there (earlier or
            concurrent run)
        recovered: Intent was reconstructed from the versions manifest
            because HEAD carries no release metadata
        unmanaged_tag: A tag made outside this tool holds the name; it is
            left untouched and nothing is released
        branch_sync: Result of the two-branch sync, if it ran
    """

    released: bool = False
    version: str | None = None
    tag: str | None = None
    url: str | None = None
    already_exists: bool = False
    recovered: bool = False
    unmanaged_tag: bool = False
    branch_sync: BranchSyncResult | None = None


def finalize_release(
    repo: ReleaseRepository,
    host: CodeHost,
    config: PlsConfig,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> FinalizeResult:
    """Create the tag and release for the version on the target branch.

    Args:
        repo: Local checkout of the target branch
        host: Code host for tags and releases
        config: Branch configuration
        sleep: Backoff sleep for the two-branch sync

    Returns:
        FinalizeResult

    Raises:
        ManifestError: If the versions manifest is malformed
        HostError: On host failures other than "already exists"
    """
    result = _finalize(repo, host, config)

    if config.is_two_branch and (result.released or result.already_exists):
        result = replace(result, branch_sync=sync_branches(repo, config, sleep=sleep))
    return result


def _finalize(repo: ReleaseRepository, host: CodeHost, config: PlsConfig) -> FinalizeResult:
    head = repo.get_head_revision()
    metadata = parse_release_metadata(repo.get_commit_message(head))
    release_revision = head
    recovered = False

    if metadata is None:
        found = _recover_intent(repo, host)
        if found is None:
            return FinalizeResult()
        metadata, release_revision = found
        recovered = True

    version = metadata.version
    tag = tag_name(version)

    if is_baseline(metadata):
        logger.info("baseline_commit", version=version)
        return FinalizeResult(version=version, tag=tag)

    existing = host.get_tag(tag)
    if existing is not None:
        if not existing.is_managed:
            logger.warning("unmanaged_tag_exists", tag=tag, revision=existing.revision)
            return FinalizeResult(version=version, tag=tag, unmanaged_tag=True, recovered=recovered)

        logger.info("tag_exists", tag=tag, revision=existing.revision)
        url = _ensure_release(host, tag, version, tag_message_notes(existing.message or ""))
        return FinalizeResult(
            version=version,
            tag=tag,
            url=url,
            already_exists=True,
            recovered=recovered,
        )

    notes = _release_notes(repo, host, config, metadata)
    try:
        host.create_tag(tag, release_revision, release_tag_message(metadata, notes))
    except HostConflictError:
        logger.info("tag_created_concurrently", tag=tag)
        url = _ensure_release(host, tag, version, notes)
        return FinalizeResult(
            version=version,
            tag=tag,
            url=url,
            already_exists=True,
            recovered=recovered,
        )

    logger.info("tag_created", tag=tag, revision=release_revision, recovered=recovered)
    url = _ensure_release(host, tag, version, notes)
    return FinalizeResult(released=True, version=version, tag=tag, url=url, recovered=recovered)


def _recover_intent(
    repo: ReleaseRepository,
    host: CodeHost,
) -> tuple[ReleaseMetadata, str] | None:
    """Rebuild release metadata when HEAD is not a release commit.

    Happens after a squash merge or when unrelated commits landed on top of
    the release. The version comes from the versions manifest and the
    release commit from a history search.
    """
    versions_json = repo.read_file(VERSIONS_MANIFEST_PATH)
    if versions_json is None:
        logger.info("no_versions_manifest")
        return None

    version = root_entry(parse_versions_manifest(versions_json)).version
    revision = repo.find_commit_by_content(version_needle(version), VERSIONS_MANIFEST_PATH)

    if revision is not None:
        metadata = parse_release_metadata(repo.get_commit_message(revision))
        if metadata is not None and metadata.version == version:
            return metadata, revision
    else:
        revision = repo.get_head_revision()

    from_version = find_previous_version(host, version)
    metadata = ReleaseMetadata(
        version=version,
        from_version=from_version,
        kind=classify_change(from_version, version),
    )
    logger.info("release_intent_recovered", version=version, from_version=from_version)
    return metadata, revision


def _release_notes(
    repo: ReleaseRepository,
    host: CodeHost,
    config: PlsConfig,
    metadata: ReleaseMetadata,
) -> str:
    """Changelog for the tag and release.

    The merged proposal's changelog is reused when it declares this version,
    so the release shows exactly what was reviewed. Otherwise the commits
    since the previous tag are rendered.
    """
    merged = host.find_merged_pr(config.release_branch)
    if merged is not None and declared_version(merged.title) == metadata.version:
        changelog = extract_changelog(merged.body)
        if changelog:
            return changelog

    previous = host.get_tag(tag_name(metadata.from_version))
    commits = filter_releasable_commits(repo.get_commits_since(previous.revision if previous else None))
    bump = VersionBump(
        from_version=metadata.from_version,
        to_version=metadata.version,
        kind=metadata.kind,
        commits=tuple(commits),
    )
    return generate_changelog(bump) or version_change_note(metadata.from_version, metadata.version)


def _ensure_release(host: CodeHost, tag: str, version: str, notes: str) -> str | None:
    """Create the release for ``tag`` unless one exists. Conflicts are success."""
    if host.release_exists(tag):
        logger.info("release_exists", tag=tag)
        return None

    try:
        url = host.create_release(
            tag,
            f"Release {tag}",
            notes,
            prerelease=get_stage(version) != Stage.STABLE,
        )
    except HostConflictError:
        logger.info("release_created_concurrently", tag=tag)
        return None

    logger.info("release_created", tag=tag, url=url)
    return url
