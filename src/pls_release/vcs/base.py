"""Ports the release workflows depend on.

Two separate concerns:
    - :class:`LocalRepository`: the checked-out repository (git CLI)
    - :class:`CodeHost`: the hosting platform (pull requests, tags, releases)

Workflows only see these protocols and never know which adapter they hold.
Revision ids are opaque strings; nothing outside an adapter parses them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pls_release.core.commits import Commit
    from pls_release.core.metadata import ReleaseMetadata


@dataclass(frozen=True, slots=True)
class PullRequest:
    number: int
    title: str
    body: str
    branch: str
    url: str = ""


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    """A tag as seen on the host.

    ``is_managed`` is True when the tag message carries release metadata,
    i.e. this tool created it. Unmanaged tags are never overwritten.
    """

    name: str
    revision: str
    message: str | None = None
    is_managed: bool = False
    metadata: ReleaseMetadata | None = None


class LocalRepository(Protocol):
    def read_file(self, path: str) -> str | None: ...

    def write_file(self, path: str, content: str) -> None: ...

    def file_exists(self, path: str) -> bool: ...

    def commit(self, message: str) -> str: ...

    def create_tag(self, name: str, message: str) -> None: ...

    def get_tag_revision(self, tag: str) -> str | None: ...

    def get_tag_message(self, tag: str) -> str | None: ...

    def get_commits_since(self, revision: str | None) -> list[Commit]: ...

    def get_head_revision(self) -> str: ...

    def get_commit_message(self, ref: str) -> str: ...

    def find_commit_by_content(self, needle: str, path: str) -> str | None: ...

    def push(self, ref: str) -> None: ...


class BranchSyncable(Protocol):
    """Operations needed only by the two-branch strategy."""

    def fetch(self, remote: str = "origin") -> None: ...

    def checkout_branch(self, branch: str, from_ref: str) -> None: ...

    def rebase(self, onto: str) -> bool: ...

    def push_force_with_lease(self, remote: str, branch: str) -> bool: ...


class CodeHost(Protocol):
    def read_file(self, path: str, ref: str | None = None) -> str | None: ...

    def file_exists(self, path: str, ref: str | None = None) -> bool: ...

    def commit(self, files: dict[str, str], message: str, parent_revision: str) -> str:
        """Create one commit with all files on top of ``parent_revision``.

        Does not move any branch.
        """
        ...

    def get_branch_revision(self, branch: str) -> str | None: ...

    def point_branch(self, branch: str, revision: str, *, force: bool = False) -> None: ...

    def create_branch(self, branch: str, revision: str) -> None: ...

    def ensure_branch(self, branch: str, revision: str) -> None: ...

    def create_tag(self, name: str, revision: str, message: str) -> None:
        """Create an annotated tag.

        Raises:
            HostConflictError: If the tag already exists
        """
        ...

    def get_tag(self, name: str) -> ReleaseTag | None: ...

    def find_pr(self, head_branch: str) -> PullRequest | None: ...

    def find_merged_pr(self, head_branch: str) -> PullRequest | None: ...

    def get_pr(self, number: int) -> PullRequest: ...

    def create_pr(self, *, title: str, body: str, head: str, base: str) -> PullRequest: ...

    def update_pr(self, number: int, *, title: str | None = None, body: str | None = None) -> None: ...

    def create_release(self, tag: str, name: str, body: str, *, prerelease: bool = False) -> str:
        """Create a release for an existing tag and return its URL.

        Raises:
            HostConflictError: If a release for the tag already exists
        """
        ...

    def release_exists(self, tag: str) -> bool: ...


class ReleaseRepository(LocalRepository, BranchSyncable, Protocol):
    """A local repository that can also keep the two branches in step."""
