"""Apply a version picked in the proposal description.

Runs whenever the proposal is edited. The proposal branch is moved straight
from its old commit to a freshly built one; it never passes through the base
head, since a branch identical to its base gets the pull request closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pls_release.core.changelog import render_release_notes
from pls_release.core.options import (
    declared_version,
    extract_changelog,
    parse_options_block,
    proposal_title,
    update_pr_body,
)
from pls_release.core.version import require_version
from pls_release.exceptions import ManifestError, NotFoundError
from pls_release.logging import get_logger
from pls_release.project.files import build_release_files, read_release_inputs
from pls_release.project.versions import VERSIONS_MANIFEST_PATH
from pls_release.workflows.common import host_reader, version_change_note

if TYPE_CHECKING:
    from pls_release.config.models import PlsConfig
    from pls_release.vcs.base import CodeHost

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SyncResult:
    synced: bool
    old_version: str | None
    new_version: str | None
    revision: str | None = None


def sync_proposal(host: CodeHost, config: PlsConfig, pr_number: int) -> SyncResult:
    """Rebuild the proposal for the version selected in its description.

    Args:
        host: Code host holding the proposal
        config: Branch configuration
        pr_number: Proposal pull request number

    Returns:
        SyncResult; ``synced`` is False when the selection already matches
        the version the proposal declares

    Raises:
        NotFoundError: If the base branch does not exist
        ManifestError: If the base branch has no versions manifest
        VersionError: If the selected version is not a valid version
    """
    pr = host.get_pr(pr_number)
    declared = declared_version(pr.title)

    selection = parse_options_block(pr.body)
    if selection is None or selection.selected is None:
        logger.info("selection_missing", pr=pr.number)
        return SyncResult(synced=False, old_version=declared, new_version=None)

    selected = selection.selected
    if selected.version == declared:
        logger.info("selection_unchanged", pr=pr.number, version=declared)
        return SyncResult(synced=False, old_version=declared, new_version=selected.version)

    require_version(selected.version)

    base_revision = host.get_branch_revision(config.base_branch)
    if base_revision is None:
        raise NotFoundError(
            f"Base branch {config.base_branch} not found",
            code="BRANCH_NOT_FOUND",
            branch=config.base_branch,
        )

    inputs = read_release_inputs(host_reader(host, base_revision), config.version_file)
    if inputs is None:
        raise ManifestError(
            f"No {VERSIONS_MANIFEST_PATH} on {config.base_branch}",
            code="NO_VERSIONS_MANIFEST",
            branch=config.base_branch,
        )

    from_version = inputs.current_version
    changelog = extract_changelog(pr.body) or version_change_note(from_version, selected.version)

    files = build_release_files(
        inputs,
        version=selected.version,
        from_version=from_version,
        kind=selected.kind,
        changelog_entry=render_release_notes(selected.version, changelog),
    )

    # The new commit must exist before the branch moves
    revision = host.commit(files.files, files.commit_message, base_revision)
    host.point_branch(pr.branch, revision, force=True)
    host.update_pr(
        pr.number,
        title=proposal_title(selected.version),
        body=update_pr_body(pr.body, selected.version),
    )

    logger.info(
        "proposal_synced",
        pr=pr.number,
        old_version=declared,
        new_version=selected.version,
        revision=revision,
    )
    return SyncResult(
        synced=True,
        old_version=declared,
        new_version=selected.version,
        revision=revision,
    )
