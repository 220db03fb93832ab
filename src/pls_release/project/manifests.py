"""Ecosystem manifest detection and version updates.

Recognised manifests, in priority order:
    - ``pyproject.toml`` ([project] or [tool.poetry] version)
    - ``package.json`` / ``deno.json`` (top-level ``version`` key)
    - ``go.mod`` (detected, but carries no version)

TOML manifests are updated with a targeted regex replacement so that
formatting and comments survive. JSON manifests are re-serialised.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass

ReadFile = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class KnownManifest:
    path: str
    updatable: bool


KNOWN_MANIFESTS = (
    KnownManifest("pyproject.toml", updatable=True),
    KnownManifest("package.json", updatable=True),
    KnownManifest("deno.json", updatable=True),
    KnownManifest("go.mod", updatable=False),
)

# [project] or [tool.poetry] section up to the next section or EOF
TOML_SECTION_PATTERNS = (
    r"^\[project\].*?(?=^\[|\Z)",
    r"^\[tool\.poetry\].*?(?=^\[|\Z)",
)
TOML_VERSION_PATTERN = r'^(version\s*=\s*)["\']([^"\']+)["\']'


@dataclass(frozen=True, slots=True)
class ManifestFile:
    """A manifest read from the repository."""

    path: str
    content: str

    @property
    def version(self) -> str | None:
        return extract_manifest_version(self.path, self.content)


def detect_manifest(read_file: ReadFile) -> ManifestFile | None:
    """Return the first recognised manifest that exists."""
    for known in KNOWN_MANIFESTS:
        content = read_file(known.path)
        if content is not None:
            return ManifestFile(known.path, content)
    return None


def read_updatable_manifests(read_file: ReadFile) -> list[ManifestFile]:
    """Read every existing manifest whose version field can be updated."""
    manifests = []
    for known in KNOWN_MANIFESTS:
        if not known.updatable:
            continue
        content = read_file(known.path)
        if content is not None:
            manifests.append(ManifestFile(known.path, content))
    return manifests


def extract_manifest_version(path: str, content: str) -> str | None:
    if path.endswith(".toml"):
        return _extract_toml_version(content)
    if path.endswith(".json"):
        return _extract_json_version(content)
    return None


def update_manifest_version(path: str, content: str, version: str) -> str:
    """Return manifest content with its version replaced.

    Content is returned unchanged when no version field is found.
    """
    if path.endswith(".toml"):
        return _update_toml_version(content, version)
    if path.endswith(".json"):
        return _update_json_version(content, version)
    return content


def _extract_toml_version(content: str) -> str | None:
    for section_pattern in TOML_SECTION_PATTERNS:
        section = re.search(section_pattern, content, re.MULTILINE | re.DOTALL)
        if not section:
            continue
        match = re.search(TOML_VERSION_PATTERN, section.group(0), re.MULTILINE)
        if match:
            return match.group(2)
    return None


def _update_toml_version(content: str, version: str) -> str:
    def replace_in_section(match: re.Match[str]) -> str:
        return re.sub(
            TOML_VERSION_PATTERN,
            rf'\g<1>"{version}"',
            match.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for section_pattern in TOML_SECTION_PATTERNS:
        new_content, count = re.subn(
            section_pattern,
            replace_in_section,
            content,
            count=1,
            flags=re.MULTILINE | re.DOTALL,
        )
        if count > 0 and new_content != content:
            return new_content
    return content


def _extract_json_version(content: str) -> str | None:
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return version if isinstance(version, str) else None


def _update_json_version(content: str, version: str) -> str:
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return content
    if not isinstance(data, dict) or "version" not in data:
        return content
    data["version"] = version
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
