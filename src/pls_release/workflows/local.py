"""Release straight from a local checkout, without a proposal.

Writes the release files, commits, creates the annotated tag and optionally
pushes both. Everything happens in the working copy, so the usual git
safety nets (reset, tag -d) apply until the push.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pls_release.core.bump import VersionBump, calculate_bump, calculate_transition
from pls_release.core.changelog import generate_changelog, render_release_notes
from pls_release.core.commits import filter_releasable_commits
from pls_release.core.metadata import ReleaseMetadata, has_release_metadata, release_tag_message
from pls_release.core.version import BumpKind
from pls_release.exceptions import ManifestError
from pls_release.logging import get_logger
from pls_release.project.files import build_release_files, read_release_inputs
from pls_release.project.versions import VERSIONS_MANIFEST_PATH, version_needle
from pls_release.workflows.common import tag_name

if TYPE_CHECKING:
    from pls_release.config.models import PlsConfig
    from pls_release.core.version import Stage
    from pls_release.project.files import ReleaseFiles, ReleaseInputs
    from pls_release.vcs.base import LocalRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LocalReleaseResult:
    released: bool
    version: str | None = None
    tag: str | None = None
    bump: VersionBump | None = None
    dry_run: bool = False
    pushed: bool = False


def _read_inputs(repo: LocalRepository, config: PlsConfig) -> ReleaseInputs:
    inputs = read_release_inputs(repo.read_file, config.version_file)
    if inputs is None:
        raise ManifestError(
            f"No {VERSIONS_MANIFEST_PATH} found. Run `pls propose` to open the setup proposal",
            code="NO_VERSIONS_MANIFEST",
            path=VERSIONS_MANIFEST_PATH,
        )
    return inputs


def _local_release_revision(repo: LocalRepository, version: str) -> str | None:
    """Revision of the last release, from a managed tag or a history search."""
    tag = tag_name(version)
    message = repo.get_tag_message(tag)
    if message is not None and has_release_metadata(message):
        revision = repo.get_tag_revision(tag)
        if revision is not None:
            return revision
    return repo.find_commit_by_content(version_needle(version), VERSIONS_MANIFEST_PATH)


def release_locally(
    repo: LocalRepository,
    config: PlsConfig,
    *,
    dry_run: bool = False,
    push: bool = False,
) -> LocalReleaseResult:
    """Release the commits since the last release from the working copy.

    Args:
        repo: Local repository
        config: Configuration (for the tracked version file)
        dry_run: Compute the release but change nothing
        push: Push the release commit and tag to ``origin``

    Returns:
        LocalReleaseResult; ``released`` is False when there is nothing to
        release or on a dry run

    Raises:
        ManifestError: If the versions manifest is missing or malformed
    """
    inputs = _read_inputs(repo, config)
    current = inputs.current_version

    since = _local_release_revision(repo, current)
    commits = filter_releasable_commits(repo.get_commits_since(since))
    bump = calculate_bump(current, commits)
    if bump is None:
        logger.info("no_changes", version=current)
        return LocalReleaseResult(released=False, dry_run=dry_run)

    changelog = generate_changelog(bump)
    files = build_release_files(
        inputs,
        version=bump.to_version,
        from_version=current,
        kind=bump.kind,
        changelog_entry=render_release_notes(bump.to_version, changelog),
    )
    metadata = ReleaseMetadata(version=bump.to_version, from_version=current, kind=bump.kind)

    if dry_run:
        return LocalReleaseResult(
            released=False,
            version=bump.to_version,
            tag=tag_name(bump.to_version),
            bump=bump,
            dry_run=True,
        )

    _apply(repo, files, metadata, changelog, push=push)
    return LocalReleaseResult(
        released=True,
        version=bump.to_version,
        tag=tag_name(bump.to_version),
        bump=bump,
        pushed=push,
    )


def transition_locally(
    repo: LocalRepository,
    config: PlsConfig,
    target: Stage,
    *,
    kind: BumpKind = BumpKind.MINOR,
    dry_run: bool = False,
    push: bool = False,
) -> LocalReleaseResult:
    """Move to another release stage, e.g. ``1.2.0-beta.3`` -> ``1.2.0-rc.0``.

    From a stable version ``kind`` selects the numeric bump applied before
    the prerelease suffix. The release is recorded with kind ``transition``.

    Raises:
        ManifestError: If the versions manifest is missing or malformed
        VersionError: If the target stage is not ahead of the current one
    """
    inputs = _read_inputs(repo, config)
    current = inputs.current_version
    version = calculate_transition(current, target, kind)

    notes = f"Transition to {target}: {current} -> {version}"
    files = build_release_files(
        inputs,
        version=version,
        from_version=current,
        kind=BumpKind.TRANSITION,
        changelog_entry=render_release_notes(version, notes),
    )
    metadata = ReleaseMetadata(version=version, from_version=current, kind=BumpKind.TRANSITION)
    bump = VersionBump(from_version=current, to_version=version, kind=BumpKind.TRANSITION)

    if dry_run:
        return LocalReleaseResult(
            released=False,
            version=version,
            tag=tag_name(version),
            bump=bump,
            dry_run=True,
        )

    _apply(repo, files, metadata, notes, push=push)
    return LocalReleaseResult(
        released=True,
        version=version,
        tag=tag_name(version),
        bump=bump,
        pushed=push,
    )


def _apply(
    repo: LocalRepository,
    files: ReleaseFiles,
    metadata: ReleaseMetadata,
    notes: str,
    *,
    push: bool,
) -> None:
    for path, content in files.files.items():
        repo.write_file(path, content)

    revision = repo.commit(files.commit_message)
    tag = tag_name(metadata.version)
    repo.create_tag(tag, release_tag_message(metadata, notes))
    logger.info("local_release_created", tag=tag, revision=revision)

    if push:
        repo.push("HEAD")
        repo.push(tag)
        logger.info("local_release_pushed", tag=tag)
