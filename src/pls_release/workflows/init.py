"""Adopt pls in an existing repository.

Writes ``.pls/versions.json`` (and ``.pls/config.json`` when settings
differ from the defaults) and tags the current commit as the managed
baseline. Committing the new files is left to the user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pls_release.config.loader import CONFIG_PATH, generate_config_file
from pls_release.config.models import PlsConfig
from pls_release.core.metadata import ReleaseMetadata, release_tag_message
from pls_release.core.version import BumpKind, require_version
from pls_release.exceptions import ManifestError, NotFoundError
from pls_release.logging import get_logger
from pls_release.project.files import VERSION_MARKER_REGEX
from pls_release.project.manifests import detect_manifest
from pls_release.project.versions import VERSIONS_MANIFEST_PATH, create_versions_manifest
from pls_release.workflows.common import tag_name

if TYPE_CHECKING:
    from pls_release.vcs.base import LocalRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class InitResult:
    version: str
    tag: str
    manifest: str | None = None
    files_created: list[str] = field(default_factory=list)
    tag_created: bool = False
    dry_run: bool = False


def init_locally(
    repo: LocalRepository,
    *,
    version: str | None = None,
    version_file: str | None = None,
    config: PlsConfig | None = None,
    dry_run: bool = False,
) -> InitResult:
    """Initialise pls in the working copy.

    Args:
        repo: Local repository
        version: Starting version; detected from the project manifest if omitted
        version_file: Source file carrying an ``@pls-version`` marker, recorded
            in the versions manifest
        config: Settings to persist; only non-default values are written
        dry_run: Report what would be created without touching anything

    Returns:
        InitResult

    Raises:
        ManifestError: If pls is already initialised, or the version file
            has no marker
        NotFoundError: If no version can be detected, or the version file
            does not exist
        VersionError: If the version is not a valid semantic version
    """
    if repo.file_exists(VERSIONS_MANIFEST_PATH):
        raise ManifestError(
            f"pls is already initialized. Found {VERSIONS_MANIFEST_PATH}",
            code="ALREADY_INITIALIZED",
            path=VERSIONS_MANIFEST_PATH,
        )

    manifest = detect_manifest(repo.read_file)
    if version is None:
        version = manifest.version if manifest else None
    if version is None:
        raise NotFoundError(
            "Could not detect the version. Pass --version, e.g. `pls init --version 1.0.0`",
            code="NO_VERSION_DETECTED",
            manifest=manifest.path if manifest else None,
        )
    require_version(version)

    if version_file is not None:
        _check_version_file(repo, version_file)

    files = {VERSIONS_MANIFEST_PATH: create_versions_manifest(version, version_file)}
    if config is not None and config != PlsConfig():
        if repo.file_exists(CONFIG_PATH):
            logger.warning("config_exists", path=CONFIG_PATH)
        else:
            files[CONFIG_PATH] = generate_config_file(config)

    tag = tag_name(version)
    result = InitResult(
        version=version,
        tag=tag,
        manifest=manifest.path if manifest else None,
        files_created=list(files),
        dry_run=dry_run,
    )
    if dry_run:
        return result

    for path, content in files.items():
        repo.write_file(path, content)

    if repo.get_tag_revision(tag) is not None:
        logger.info("tag_exists", tag=tag)
        return result

    # Baseline metadata (from == version): finalize never publishes it
    metadata = ReleaseMetadata(version=version, from_version=version, kind=BumpKind.TRANSITION)
    repo.create_tag(tag, release_tag_message(metadata, f"Initial release at {version}"))
    logger.info("initialized", version=version, tag=tag)
    return InitResult(
        version=version,
        tag=tag,
        manifest=result.manifest,
        files_created=result.files_created,
        tag_created=True,
    )


def _check_version_file(repo: LocalRepository, path: str) -> None:
    content = repo.read_file(path)
    if content is None:
        raise NotFoundError(f"Version file not found: {path}", code="VERSION_FILE_NOT_FOUND", path=path)
    if not VERSION_MARKER_REGEX.search(content):
        raise ManifestError(
            f"Version file {path} has no @pls-version marker. "
            "Add a comment containing @pls-version on the line above the version",
            code="VERSION_FILE_NO_MARKER",
            path=path,
        )
