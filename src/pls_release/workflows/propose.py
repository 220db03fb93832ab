"""Open or refresh the release proposal.

Safe to run any number of times: each run rebuilds the proposal branch as a
single commit on top of the current base head and updates the open pull
request in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pls_release.core.bump import VersionBump, calculate_bump
from pls_release.core.changelog import generate_changelog, render_release_notes
from pls_release.core.commits import filter_releasable_commits
from pls_release.core.metadata import bootstrap_commit_message
from pls_release.core.options import (
    generate_bootstrap_pr_body,
    generate_options,
    generate_pr_body,
    parse_options_block,
    proposal_title,
)
from pls_release.core.version import BumpKind, compare_versions, parse_version, require_version
from pls_release.exceptions import HostConflictError, NotFoundError
from pls_release.logging import get_logger
from pls_release.project.files import build_release_files, read_release_inputs
from pls_release.project.manifests import detect_manifest
from pls_release.project.versions import VERSIONS_MANIFEST_PATH, create_versions_manifest
from pls_release.vcs.base import PullRequest
from pls_release.workflows.common import find_release_revision, host_reader

if TYPE_CHECKING:
    from pls_release.config.models import PlsConfig
    from pls_release.project.manifests import ReadFile
    from pls_release.vcs.base import CodeHost, LocalRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProposeResult:
    """Outcome of a propose run.

    Attributes:
        pr: The created or updated proposal (a preview with number 0 on a
            dry run), None when there is nothing to release
        bump: The bump actually proposed, with any preserved override applied
        version: Version the proposal releases, or the current version when
            there are no changes
        dry_run: Nothing was written to the host
        bootstrap: The proposal adds the versions manifest instead of
            releasing
    """

    pr: PullRequest | None
    bump: VersionBump | None
    version: str | None
    dry_run: bool = False
    bootstrap: bool = False

    @property
    def has_changes(self) -> bool:
        return self.pr is not None


def bootstrap_title(version: str) -> str:
    return f"chore: initialize pls v{version}"


def propose_release(
    repo: LocalRepository,
    host: CodeHost,
    config: PlsConfig,
    *,
    dry_run: bool = False,
) -> ProposeResult:
    """Create or update the release proposal for the base branch.

    Args:
        repo: Local checkout of the base branch, used for history
        host: Code host holding the base branch and the proposal
        config: Branch configuration
        dry_run: Compute everything but write nothing

    Returns:
        ProposeResult

    Raises:
        NotFoundError: If the base branch does not exist, or no version can
            be detected while bootstrapping
        ManifestError: If the versions manifest is malformed
    """
    base_revision = host.get_branch_revision(config.base_branch)
    if base_revision is None:
        raise NotFoundError(
            f"Base branch {config.base_branch} not found",
            code="BRANCH_NOT_FOUND",
            branch=config.base_branch,
        )

    read_file = host_reader(host, base_revision)
    inputs = read_release_inputs(read_file, config.version_file)
    if inputs is None:
        return _bootstrap(host, config, read_file, base_revision, dry_run=dry_run)

    current = inputs.current_version
    release_revision = find_release_revision(repo, host, current)
    commits = filter_releasable_commits(repo.get_commits_since(release_revision))

    bump = calculate_bump(current, commits)
    if bump is None:
        logger.info("no_changes", version=current, since=release_revision)
        return ProposeResult(pr=None, bump=None, version=current, dry_run=dry_run)

    existing = host.find_pr(config.release_branch)
    # Only stage switches survive a re-run; commit-derived picks are recomputed
    override = _preserved_override(existing, bump)

    version = override or bump.to_version
    kind = BumpKind.TRANSITION if override else bump.kind
    effective = replace(bump, to_version=version)

    changelog = generate_changelog(effective)
    files = build_release_files(
        inputs,
        version=version,
        from_version=current,
        kind=kind,
        changelog_entry=render_release_notes(version, changelog),
    )

    title = proposal_title(version)
    body = generate_pr_body(effective, changelog, generate_options(bump, override))

    if dry_run:
        logger.info("proposal_preview", version=version, files=sorted(files.files))
        preview = PullRequest(number=0, title=title, body=body, branch=config.release_branch)
        return ProposeResult(pr=preview, bump=effective, version=version, dry_run=True)

    revision = host.commit(files.files, files.commit_message, base_revision)
    host.ensure_branch(config.release_branch, revision)
    pr = _upsert_proposal(host, config, existing, title=title, body=body)

    logger.info("proposal_ready", version=version, pr=pr.number, revision=revision)
    return ProposeResult(pr=pr, bump=effective, version=version)


def _preserved_override(existing: PullRequest | None, bump: VersionBump) -> str | None:
    """Version a human picked on the open proposal, if it still applies.

    Only stage switches are carried over. A selection that merely echoes an
    earlier commit-derived target is recomputed so new commits can raise the
    bump.
    """
    if existing is None:
        return None

    selection = parse_options_block(existing.body)
    if selection is None or selection.selected is None:
        return None

    selected = selection.selected
    if selected.kind != BumpKind.TRANSITION or selected.version == bump.to_version:
        return None
    if parse_version(selected.version) is None:
        logger.warning("selection_invalid", version=selected.version, pr=existing.number)
        return None
    if compare_versions(selected.version, bump.from_version) <= 0:
        logger.info("selection_outdated", version=selected.version, current=bump.from_version)
        return None

    logger.info("selection_preserved", version=selected.version, pr=existing.number)
    return selected.version


def _upsert_proposal(
    host: CodeHost,
    config: PlsConfig,
    existing: PullRequest | None,
    *,
    title: str,
    body: str,
) -> PullRequest:
    if existing is None:
        try:
            return host.create_pr(
                title=title,
                body=body,
                head=config.release_branch,
                base=config.base_branch,
            )
        except HostConflictError:
            # Another run opened it between our lookup and create
            existing = host.find_pr(config.release_branch)
            if existing is None:
                raise

    host.update_pr(existing.number, title=title, body=body)
    return replace(existing, title=title, body=body)


def _bootstrap(
    host: CodeHost,
    config: PlsConfig,
    read_file: ReadFile,
    base_revision: str,
    *,
    dry_run: bool,
) -> ProposeResult:
    """Propose adding the versions manifest, seeded from a detected version."""
    manifest = detect_manifest(read_file)
    version = manifest.version if manifest else None
    if manifest is None or version is None:
        raise NotFoundError(
            "Could not detect a version from a project manifest. "
            'Add a "version" field to pyproject.toml, package.json or deno.json',
            code="NO_VERSION_DETECTED",
        )
    require_version(version)

    files = {VERSIONS_MANIFEST_PATH: create_versions_manifest(version, config.version_file)}
    title = bootstrap_title(version)
    body = generate_bootstrap_pr_body(version, manifest.path)

    if dry_run:
        preview = PullRequest(number=0, title=title, body=body, branch=config.release_branch)
        return ProposeResult(pr=preview, bump=None, version=version, dry_run=True, bootstrap=True)

    revision = host.commit(files, bootstrap_commit_message(version), base_revision)
    host.ensure_branch(config.release_branch, revision)
    existing = host.find_pr(config.release_branch)
    pr = _upsert_proposal(host, config, existing, title=title, body=body)

    logger.info("bootstrap_proposed", version=version, manifest=manifest.path, pr=pr.number)
    return ProposeResult(pr=pr, bump=None, version=version, bootstrap=True)
