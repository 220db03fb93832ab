"""Shared fixtures and in-memory port implementations."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import pytest
import structlog

from pls_release.config.models import PlsConfig
from pls_release.core.commits import parse_commit_message
from pls_release.core.metadata import has_release_metadata, parse_release_metadata
from pls_release.exceptions import HostConflictError, HostError
from pls_release.vcs.base import PullRequest, ReleaseTag

if TYPE_CHECKING:
    from pls_release.core.commits import Commit


@dataclass
class HostCommit:
    parent: str | None
    files: dict[str, str]
    message: str


@dataclass
class FakeCodeHost:
    """In-memory code host.

    Every mutating call is appended to ``calls`` so tests can assert on
    ordering, e.g. that a commit is created before a branch moves.
    """

    commits: dict[str, HostCommit] = field(default_factory=dict)
    branches: dict[str, str] = field(default_factory=dict)
    tags: dict[str, ReleaseTag] = field(default_factory=dict)
    prs: dict[int, PullRequest] = field(default_factory=dict)
    merged_prs: list[PullRequest] = field(default_factory=list)
    releases: dict[str, str] = field(default_factory=dict)
    calls: list[tuple] = field(default_factory=list)

    def seed(self, branch: str, files: dict[str, str], message: str = "chore: initial") -> str:
        """Create a commit with ``files`` on top of ``branch`` (or as root)."""
        parent = self.branches.get(branch)
        base = dict(self.commits[parent].files) if parent else {}
        revision = f"host{len(self.commits) + 1}"
        self.commits[revision] = HostCommit(parent, {**base, **files}, message)
        self.branches[branch] = revision
        return revision

    def add_tag(self, name: str, revision: str, message: str | None = None) -> None:
        self.tags[name] = ReleaseTag(
            name=name,
            revision=revision,
            message=message,
            is_managed=bool(message) and has_release_metadata(message),
            metadata=parse_release_metadata(message) if message else None,
        )

    def mutations(self) -> list[str]:
        return [call[0] for call in self.calls]

    # --- CodeHost ---

    def _resolve(self, ref: str | None) -> str | None:
        if ref is None:
            return None
        return self.branches.get(ref, ref)

    def read_file(self, path: str, ref: str | None = None) -> str | None:
        revision = self._resolve(ref)
        if revision is None or revision not in self.commits:
            return None
        return self.commits[revision].files.get(path)

    def file_exists(self, path: str, ref: str | None = None) -> bool:
        return self.read_file(path, ref) is not None

    def commit(self, files: dict[str, str], message: str, parent_revision: str) -> str:
        parent = self.commits[parent_revision]
        revision = f"host{len(self.commits) + 1}"
        self.commits[revision] = HostCommit(parent_revision, {**parent.files, **files}, message)
        self.calls.append(("commit", revision, parent_revision))
        return revision

    def get_branch_revision(self, branch: str) -> str | None:
        return self.branches.get(branch)

    def point_branch(self, branch: str, revision: str, *, force: bool = False) -> None:
        self.calls.append(("point_branch", branch, revision, force))
        self.branches[branch] = revision

    def create_branch(self, branch: str, revision: str) -> None:
        if branch in self.branches:
            raise HostConflictError(f"Reference refs/heads/{branch} already exists", status=422)
        self.calls.append(("create_branch", branch, revision))
        self.branches[branch] = revision

    def ensure_branch(self, branch: str, revision: str) -> None:
        if branch in self.branches:
            self.point_branch(branch, revision, force=True)
        else:
            self.create_branch(branch, revision)

    def create_tag(self, name: str, revision: str, message: str) -> None:
        if name in self.tags:
            raise HostConflictError(f"Reference refs/tags/{name} already exists", status=422)
        self.calls.append(("create_tag", name, revision))
        self.add_tag(name, revision, message)

    def get_tag(self, name: str) -> ReleaseTag | None:
        return self.tags.get(name)

    def find_pr(self, head_branch: str) -> PullRequest | None:
        return next((pr for pr in self.prs.values() if pr.branch == head_branch), None)

    def find_merged_pr(self, head_branch: str) -> PullRequest | None:
        return next((pr for pr in reversed(self.merged_prs) if pr.branch == head_branch), None)

    def get_pr(self, number: int) -> PullRequest:
        if number not in self.prs:
            raise HostError(f"Pull request #{number} not found", status=404)
        return self.prs[number]

    def create_pr(self, *, title: str, body: str, head: str, base: str) -> PullRequest:
        number = max(self.prs, default=0) + 1
        pr = PullRequest(number=number, title=title, body=body, branch=head, url=f"https://example.test/pull/{number}")
        self.prs[number] = pr
        self.calls.append(("create_pr", number))
        return pr

    def update_pr(self, number: int, *, title: str | None = None, body: str | None = None) -> None:
        pr = self.prs[number]
        self.prs[number] = replace(
            pr,
            title=title if title is not None else pr.title,
            body=body if body is not None else pr.body,
        )
        self.calls.append(("update_pr", number))

    def create_release(self, tag: str, name: str, body: str, *, prerelease: bool = False) -> str:
        if tag in self.releases:
            raise HostConflictError(f"Release for {tag} already exists", status=422)
        self.releases[tag] = body
        self.calls.append(("create_release", tag, prerelease))
        return f"https://example.test/releases/{tag}"

    def release_exists(self, tag: str) -> bool:
        return tag in self.releases


@dataclass
class LocalCommit:
    revision: str
    message: str
    files: dict[str, str]


@dataclass
class FakeLocalRepo:
    """In-memory working copy with a linear history.

    ``rebase_results`` and ``push_results`` script the branch-sync
    operations; each call pops the next value (default True).
    """

    files: dict[str, str] = field(default_factory=dict)
    history: list[LocalCommit] = field(default_factory=list)
    tags: dict[str, tuple[str, str]] = field(default_factory=dict)
    pushed: list[str] = field(default_factory=list)
    rebase_results: list[bool] = field(default_factory=list)
    push_results: list[bool] = field(default_factory=list)
    sync_calls: list[tuple] = field(default_factory=list)
    pending: dict[str, str] = field(default_factory=dict)

    def add_commit(self, message: str, files: dict[str, str] | None = None) -> str:
        """Record a commit, applying ``files`` to the working copy."""
        if files:
            self.files.update(files)
        revision = f"local{len(self.history) + 1}"
        self.history.append(LocalCommit(revision, message, dict(files or {})))
        return revision

    # --- LocalRepository ---

    def read_file(self, path: str) -> str | None:
        return self.files.get(path)

    def write_file(self, path: str, content: str) -> None:
        self.files[path] = content
        self.pending[path] = content

    def file_exists(self, path: str) -> bool:
        return path in self.files

    def commit(self, message: str) -> str:
        pending, self.pending = self.pending, {}
        return self.add_commit(message, pending)

    def create_tag(self, name: str, message: str) -> None:
        self.tags[name] = (self.get_head_revision(), message)

    def get_tag_revision(self, tag: str) -> str | None:
        entry = self.tags.get(tag)
        return entry[0] if entry else None

    def get_tag_message(self, tag: str) -> str | None:
        entry = self.tags.get(tag)
        return entry[1] if entry else None

    def get_commits_since(self, revision: str | None) -> list[Commit]:
        start = 0
        if revision is not None:
            start = next(i for i, c in enumerate(self.history) if c.revision == revision) + 1
        commits = []
        for entry in reversed(self.history[start:]):
            commit = parse_commit_message(entry.revision, entry.message)
            if commit is not None:
                commits.append(commit)
        return commits

    def get_head_revision(self) -> str:
        return self.history[-1].revision

    def get_commit_message(self, ref: str) -> str:
        revision = self.get_head_revision() if ref == "HEAD" else ref
        return next(c.message for c in self.history if c.revision == revision)

    def find_commit_by_content(self, needle: str, path: str) -> str | None:
        """Same matching as ``git log -S``: the occurrence count must change."""
        found = None
        content = ""
        for entry in self.history:
            if path not in entry.files:
                continue
            if entry.files[path].count(needle) != content.count(needle):
                found = entry.revision
            content = entry.files[path]
        return found

    def push(self, ref: str) -> None:
        self.pushed.append(ref)

    # --- BranchSyncable ---

    def fetch(self, remote: str = "origin") -> None:
        self.sync_calls.append(("fetch", remote))

    def checkout_branch(self, branch: str, from_ref: str) -> None:
        self.sync_calls.append(("checkout_branch", branch, from_ref))

    def rebase(self, onto: str) -> bool:
        self.sync_calls.append(("rebase", onto))
        return self.rebase_results.pop(0) if self.rebase_results else True

    def push_force_with_lease(self, remote: str, branch: str) -> bool:
        self.sync_calls.append(("push_force_with_lease", remote, branch))
        return self.push_results.pop(0) if self.push_results else True


def versions_json(version: str) -> str:
    return f'{{\n  ".": {{\n    "version": "{version}"\n  }}\n}}\n'


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (or CLI invocation) applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config() -> PlsConfig:
    return PlsConfig()


@pytest.fixture
def two_branch_config() -> PlsConfig:
    return PlsConfig(strategy="two-branch")


@pytest.fixture
def host() -> FakeCodeHost:
    return FakeCodeHost()


@pytest.fixture
def repo() -> FakeLocalRepo:
    return FakeLocalRepo()


@pytest.fixture
def make_commit():
    """Build a classified commit from a message."""

    def _make(message: str, revision: str = "abc1234def", *, is_merge: bool = False) -> Commit:
        commit = parse_commit_message(revision, message, is_merge=is_merge)
        assert commit is not None
        return commit

    return _make
