"""Tests for conventional commit parsing."""

from __future__ import annotations

from pls_release.core.commits import (
    CommitType,
    filter_releasable_commits,
    get_breaking_changes,
    group_by_type,
    is_releasable,
    parse_commit_message,
)


class TestParseCommitMessage:
    """Tests for parse_commit_message()."""

    def test_parse_simple_feat(self):
        """Parse a simple feat commit."""
        commit = parse_commit_message("abc123", "feat: add new feature")

        assert commit is not None
        assert commit.type == "feat"
        assert commit.kind == CommitType.FEAT
        assert commit.scope is None
        assert commit.description == "add new feature"
        assert not commit.breaking
        assert commit.body is None

    def test_parse_with_scope(self):
        """Parse commit with scope."""
        commit = parse_commit_message("abc123", "fix(api): handle null response")

        assert commit is not None
        assert commit.type == "fix"
        assert commit.scope == "api"
        assert commit.description == "handle null response"

    def test_parse_breaking_with_exclamation(self):
        """Parse breaking change with ! indicator."""
        commit = parse_commit_message("abc123", "feat(core)!: change config format")

        assert commit is not None
        assert commit.breaking
        assert commit.scope == "core"

    def test_parse_breaking_in_body(self):
        """BREAKING CHANGE in the body marks the commit as breaking."""
        message = "refactor: drop legacy loader\n\nBREAKING CHANGE: config.ini is no longer read"
        commit = parse_commit_message("abc123", message)

        assert commit is not None
        assert commit.breaking
        assert commit.body == "BREAKING CHANGE: config.ini is no longer read"

    def test_non_conventional_becomes_chore(self):
        """Non-matching subjects are kept verbatim as chore."""
        commit = parse_commit_message("abc123", "Update README with examples")

        assert commit is not None
        assert commit.type == "chore"
        assert commit.description == "Update README with examples"

    def test_unknown_type_kept(self):
        """Unknown types keep their token and classify as OTHER."""
        commit = parse_commit_message("abc123", "wip: half done")

        assert commit is not None
        assert commit.type == "wip"
        assert commit.kind == CommitType.OTHER

    def test_type_is_lowercased(self):
        """Type tokens are normalised to lowercase."""
        commit = parse_commit_message("abc123", "FEAT: shout")

        assert commit is not None
        assert commit.type == "feat"

    def test_empty_message(self):
        """Empty messages produce no commit."""
        assert parse_commit_message("abc123", "") is None
        assert parse_commit_message("abc123", "\n\nbody only") is None

    def test_merge_flag_preserved(self):
        """Structural merge flag is carried on the record."""
        commit = parse_commit_message("abc123", "feat: x", is_merge=True)

        assert commit is not None
        assert commit.is_merge


class TestReleasableFilter:
    """Tests for is_releasable() and filter_releasable_commits()."""

    def test_structural_merge_excluded(self, make_commit):
        """Merge commits are excluded by flag regardless of message."""
        assert not is_releasable(make_commit("feat: looks normal", is_merge=True))

    def test_merge_message_excluded(self, make_commit):
        """Merge subjects are excluded when the flag is unavailable."""
        assert not is_releasable(make_commit("Merge pull request #4 from org/branch"))

    def test_release_commits_excluded(self, make_commit):
        """The tool's own release and bootstrap commits never count."""
        assert not is_releasable(make_commit("chore: release v1.2.0"))
        assert not is_releasable(make_commit("release v1.2.0"))
        assert not is_releasable(make_commit("chore: initialize pls at v1.0.0"))

    def test_filter_keeps_order(self, make_commit):
        """Releasable commits keep their order."""
        commits = [
            make_commit("feat: a", "r1"),
            make_commit("chore: release v1.0.0", "r2"),
            make_commit("fix: b", "r3"),
        ]

        assert [c.revision for c in filter_releasable_commits(commits)] == ["r1", "r3"]


class TestGrouping:
    """Tests for group_by_type() and get_breaking_changes()."""

    def test_group_by_type(self, make_commit):
        """Commits are grouped by their type token."""
        commits = [make_commit("feat: a"), make_commit("fix: b"), make_commit("feat: c")]
        groups = group_by_type(commits)

        assert list(groups) == ["feat", "fix"]
        assert [c.description for c in groups["feat"]] == ["a", "c"]

    def test_get_breaking_changes(self, make_commit):
        """Only breaking commits are returned."""
        commits = [make_commit("feat!: a"), make_commit("fix: b")]

        assert [c.description for c in get_breaking_changes(commits)] == ["a"]
