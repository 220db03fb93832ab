"""Version control and code host integrations."""

from __future__ import annotations

from pls_release.vcs.base import (
    BranchSyncable,
    CodeHost,
    LocalRepository,
    PullRequest,
    ReleaseRepository,
    ReleaseTag,
)
from pls_release.vcs.git import GitRepository, parse_git_log
from pls_release.vcs.github import GitHubHost

__all__ = [
    "BranchSyncable",
    "CodeHost",
    "GitHubHost",
    "GitRepository",
    "LocalRepository",
    "PullRequest",
    "ReleaseRepository",
    "ReleaseTag",
    "parse_git_log",
]
