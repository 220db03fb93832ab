"""The ``.pls/versions.json`` manifest.

The manifest is a JSON object keyed by package path (``"."`` for the root)::

    {
      ".": {"version": "1.2.3", "versionFile": "src/pkg/__init__.py"}
    }

Older manifests stored bare version strings; they are accepted on read and
always written back in object form.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from pls_release.exceptions import ManifestError

VERSIONS_MANIFEST_PATH = ".pls/versions.json"
ROOT_KEY = "."


@dataclass(frozen=True, slots=True)
class VersionEntry:
    version: str
    version_file: str | None = None

    def to_json(self) -> dict[str, str]:
        data = {"version": self.version}
        if self.version_file:
            data["versionFile"] = self.version_file
        return data


def parse_versions_manifest(content: str) -> dict[str, VersionEntry]:
    """Parse manifest content, normalising legacy string values.

    Raises:
        ManifestError: If the content is not a JSON object of entries
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(
            f"{VERSIONS_MANIFEST_PATH} is not valid JSON: {e.msg}",
            path=VERSIONS_MANIFEST_PATH,
        ) from e

    if not isinstance(data, dict):
        raise ManifestError(
            f"{VERSIONS_MANIFEST_PATH} must contain a JSON object",
            path=VERSIONS_MANIFEST_PATH,
        )

    entries: dict[str, VersionEntry] = {}
    for key, value in data.items():
        if isinstance(value, str):
            entries[key] = VersionEntry(version=value)
        elif isinstance(value, dict) and isinstance(value.get("version"), str):
            version_file = value.get("versionFile")
            entries[key] = VersionEntry(
                version=value["version"],
                version_file=version_file if isinstance(version_file, str) else None,
            )
        else:
            raise ManifestError(
                f"Invalid entry for {key!r} in {VERSIONS_MANIFEST_PATH}",
                code="INVALID_VERSIONS_ENTRY",
                path=VERSIONS_MANIFEST_PATH,
                key=key,
            )
    return entries


def root_entry(entries: dict[str, VersionEntry]) -> VersionEntry:
    """Return the root package entry.

    Raises:
        ManifestError: If there is no root entry
    """
    entry = entries.get(ROOT_KEY)
    if entry is None:
        raise ManifestError(
            f"No root version in {VERSIONS_MANIFEST_PATH}",
            code="NO_ROOT_VERSION",
            path=VERSIONS_MANIFEST_PATH,
        )
    return entry


def serialize_versions_manifest(entries: dict[str, VersionEntry]) -> str:
    return json.dumps({k: v.to_json() for k, v in entries.items()}, indent=2) + "\n"


def update_versions_manifest(content: str | None, version: str) -> str:
    """Set the root version, keeping other entries and the root version file."""
    entries = parse_versions_manifest(content) if content else {}
    existing = entries.get(ROOT_KEY)
    entries[ROOT_KEY] = VersionEntry(
        version=version,
        version_file=existing.version_file if existing else None,
    )
    return serialize_versions_manifest(entries)


def create_versions_manifest(version: str, version_file: str | None = None) -> str:
    return serialize_versions_manifest({ROOT_KEY: VersionEntry(version, version_file)})


def version_needle(version: str) -> str:
    """Text that is in the serialised manifest only while it holds ``version``.

    The closing quote keeps ``1.2.0`` from matching ``1.2.0-rc.0``, so a
    history search finds the stable release and not the prerelease that
    first mentioned the same numbers.
    """
    return f'"version": "{version}"'
