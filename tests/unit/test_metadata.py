"""Tests for release metadata blocks."""

from __future__ import annotations

import pytest

from pls_release.core.metadata import (
    DELIMITER,
    ReleaseMetadata,
    bootstrap_commit_message,
    format_release_metadata,
    has_release_metadata,
    is_baseline,
    parse_release_metadata,
    release_commit_message,
    release_tag_message,
    tag_message_notes,
)
from pls_release.core.version import BumpKind


class TestReleaseMetadata:
    """Tests for formatting and parsing the metadata block."""

    def test_format(self):
        """Block lines are emitted in a fixed order."""
        block = format_release_metadata(ReleaseMetadata("1.2.3", "1.2.2", BumpKind.PATCH))

        assert block == f"{DELIMITER}\nversion: 1.2.3\nfrom: 1.2.2\ntype: patch\n{DELIMITER}"

    @pytest.mark.parametrize("kind", list(BumpKind))
    def test_round_trip_in_commit_message(self, kind):
        """Metadata survives embedding in a commit message."""
        metadata = ReleaseMetadata("2.0.0-beta.0", "1.9.0", kind)

        assert parse_release_metadata(release_commit_message(metadata)) == metadata

    def test_commit_subject(self):
        """Release commits use a fixed subject."""
        message = release_commit_message(ReleaseMetadata("1.2.3", "1.2.2", BumpKind.PATCH))

        assert message.startswith("chore: release v1.2.3\n\n")

    def test_missing_block(self):
        """Messages without the block have no metadata."""
        assert parse_release_metadata("feat: something") is None
        assert not has_release_metadata("feat: something")

    def test_unterminated_block(self):
        """An unterminated block is ignored."""
        assert parse_release_metadata(f"x\n\n{DELIMITER}\nversion: 1.0.0\nfrom: 0.9.0\ntype: minor\n") is None

    def test_missing_field(self):
        """Every field is required."""
        message = f"{DELIMITER}\nversion: 1.0.0\ntype: minor\n{DELIMITER}"

        assert parse_release_metadata(message) is None

    def test_invalid_kind(self):
        """Unknown bump kinds are rejected."""
        message = f"{DELIMITER}\nversion: 1.0.0\nfrom: 0.9.0\ntype: huge\n{DELIMITER}"

        assert parse_release_metadata(message) is None


class TestTagMessages:
    """Tests for tag message helpers."""

    def test_tag_message_notes(self):
        """The changelog can be read back out of a tag message."""
        metadata = ReleaseMetadata("1.1.0", "1.0.0", BumpKind.MINOR)
        message = release_tag_message(metadata, "### ✨ Features\n\n- b")

        assert message.startswith("Release v1.1.0\n\n")
        assert parse_release_metadata(message) == metadata
        assert tag_message_notes(message) == "### ✨ Features\n\n- b"

    def test_bootstrap_is_baseline(self):
        """Bootstrap commits record the adopted version as its own origin."""
        metadata = parse_release_metadata(bootstrap_commit_message("1.4.0"))

        assert metadata is not None
        assert metadata.version == metadata.from_version == "1.4.0"
        assert is_baseline(metadata)
        assert not is_baseline(ReleaseMetadata("1.5.0", "1.4.0", BumpKind.MINOR))
