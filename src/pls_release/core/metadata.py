"""Release metadata embedded in commit and tag messages.

Format::

    chore: release v1.2.3

    ---pls-release---
    version: 1.2.3
    from: 1.2.2
    type: minor
    ---pls-release---

The block records why a commit or tag exists so later runs can recover the
intent without recomputing it. A tag whose message carries the block is a
managed release; any other tag was made by a human and is left alone.
"""

from __future__ import annotations

from dataclasses import dataclass

from pls_release.core.version import BumpKind

DELIMITER = "---pls-release---"


@dataclass(frozen=True, slots=True)
class ReleaseMetadata:
    version: str
    from_version: str
    kind: BumpKind


def has_release_metadata(message: str) -> bool:
    return DELIMITER in message


def parse_release_metadata(message: str) -> ReleaseMetadata | None:
    """Parse the metadata block out of a commit or tag message.

    Returns:
        ReleaseMetadata, or None if the block is absent, unterminated or
        missing a field
    """
    start = message.find(DELIMITER)
    if start == -1:
        return None

    rest = message[start + len(DELIMITER) :]
    end = rest.find(DELIMITER)
    if end == -1:
        return None

    fields: dict[str, str] = {}
    for line in rest[:end].strip().splitlines():
        key, sep, value = line.partition(":")
        if sep:
            fields[key.strip()] = value.strip()

    version = fields.get("version")
    from_version = fields.get("from")
    kind = fields.get("type")
    if not version or not from_version or not kind:
        return None

    try:
        return ReleaseMetadata(version=version, from_version=from_version, kind=BumpKind(kind))
    except ValueError:
        return None


def format_release_metadata(metadata: ReleaseMetadata) -> str:
    return "\n".join(
        [
            DELIMITER,
            f"version: {metadata.version}",
            f"from: {metadata.from_version}",
            f"type: {metadata.kind}",
            DELIMITER,
        ]
    )


def release_commit_message(metadata: ReleaseMetadata) -> str:
    return f"chore: release v{metadata.version}\n\n{format_release_metadata(metadata)}"


def release_tag_message(metadata: ReleaseMetadata, changelog: str) -> str:
    return f"Release v{metadata.version}\n\n{changelog}\n\n{format_release_metadata(metadata)}"


def tag_message_notes(message: str) -> str:
    """Recover the changelog from a message built by :func:`release_tag_message`."""
    start = message.find(DELIMITER)
    text = message[:start] if start != -1 else message
    _, _, notes = text.partition("\n\n")
    return notes.strip()


def bootstrap_commit_message(version: str) -> str:
    """Commit message for adopting an existing version as the baseline.

    ``from`` equals ``version``: nothing is released, so no tag follows.
    """
    metadata = ReleaseMetadata(version=version, from_version=version, kind=BumpKind.TRANSITION)
    return f"chore: initialize pls at v{version}\n\n{format_release_metadata(metadata)}"


def is_baseline(metadata: ReleaseMetadata) -> bool:
    return metadata.version == metadata.from_version
