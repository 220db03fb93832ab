"""Project file handling: manifests, the versions manifest and release files."""

from __future__ import annotations

from pls_release.project.files import (
    CHANGELOG_PATH,
    ReleaseFiles,
    ReleaseInputs,
    build_release_files,
    read_release_inputs,
    update_version_file,
)
from pls_release.project.manifests import ManifestFile, detect_manifest
from pls_release.project.versions import (
    VERSIONS_MANIFEST_PATH,
    VersionEntry,
    create_versions_manifest,
    parse_versions_manifest,
)

__all__ = [
    "CHANGELOG_PATH",
    "VERSIONS_MANIFEST_PATH",
    "ManifestFile",
    "ReleaseFiles",
    "ReleaseInputs",
    "VersionEntry",
    "build_release_files",
    "create_versions_manifest",
    "detect_manifest",
    "parse_versions_manifest",
    "read_release_inputs",
    "update_version_file",
]
