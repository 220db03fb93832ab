"""Local repository adapter backed by the git CLI."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path

from pls_release.core.commits import Commit, parse_commit_message
from pls_release.exceptions import GitError
from pls_release.logging import get_logger

logger = get_logger(__name__)

COMMIT_SEPARATOR = "---commit---"
# revision, parent revisions, raw message
LOG_FORMAT = f"%H%n%P%n%B%n{COMMIT_SEPARATOR}"

GITHUB_REMOTE_REGEX = re.compile(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$")


def parse_git_log(output: str) -> list[Commit]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`.

    A commit with more than one parent is flagged as a merge.
    """
    commits: list[Commit] = []
    for entry in output.split(COMMIT_SEPARATOR):
        lines = entry.strip().split("\n")
        revision = lines[0].strip() if lines else ""
        if not revision:
            continue

        parents = lines[1].split() if len(lines) > 1 else []
        message = "\n".join(lines[2:]).strip()
        commit = parse_commit_message(revision, message, is_merge=len(parents) > 1)
        if commit is not None:
            commits.append(commit)
    return commits


class GitRepository:
    """Git operations on a working copy.

    Args:
        path: Repository root directory
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or Path.cwd()).resolve()

    def _run(self, *args: str) -> str:
        """Run a git command and return stripped stdout.

        Raises:
            GitError: If git exits non-zero or is not installed
        """
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found", code="GIT_NOT_FOUND") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
                args=list(args),
            ) from e
        return result.stdout.strip()

    def _run_optional(self, *args: str) -> str | None:
        """Run a git command, returning None when git reports failure."""
        try:
            return self._run(*args)
        except GitError as e:
            if e.code == "GIT_NOT_FOUND":
                raise
            return None

    # --- Files ---

    def read_file(self, path: str) -> str | None:
        file_path = self.path / path
        if not file_path.is_file():
            return None
        return file_path.read_text(encoding="utf-8")

    def write_file(self, path: str, content: str) -> None:
        file_path = self.path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    def file_exists(self, path: str) -> bool:
        return (self.path / path).exists()

    # --- History ---

    def get_commits_since(self, revision: str | None) -> list[Commit]:
        range_spec = f"{revision}..HEAD" if revision else "HEAD"
        output = self._run_optional("log", range_spec, f"--format={LOG_FORMAT}")
        if not output:
            return []
        return parse_git_log(output)

    def get_head_revision(self) -> str:
        return self._run("rev-parse", "HEAD")

    def get_commit_message(self, ref: str) -> str:
        return self._run("log", "-1", "--format=%B", ref)

    def find_commit_by_content(self, needle: str, path: str) -> str | None:
        """Most recent commit that changed how often ``needle`` occurs in ``path``.

        This is ``git log -S``: a commit that swaps one occurrence for another
        does not match, so the needle must be unique to the wanted content.
        """
        output = self._run_optional("log", "-S", needle, "--format=%H", "--", path)
        if not output:
            return None
        return output.splitlines()[0].strip() or None

    # --- Tags ---

    def get_tag_revision(self, tag: str) -> str | None:
        return self._run_optional("rev-list", "-1", tag)

    def get_tag_message(self, tag: str) -> str | None:
        output = self._run_optional("tag", "-l", "--format=%(contents)", tag)
        return output or None

    def create_tag(self, name: str, message: str) -> None:
        self._run("tag", "-a", name, "-m", message)

    # --- Writing ---

    def commit(self, message: str) -> str:
        self._run("add", "-A")
        self._run("commit", "-m", message)
        return self.get_head_revision()

    def push(self, ref: str) -> None:
        self._run("push", "origin", ref)

    # --- Branch sync ---

    def fetch(self, remote: str = "origin") -> None:
        self._run("fetch", remote)

    def checkout_branch(self, branch: str, from_ref: str) -> None:
        self._run("checkout", "-B", branch, from_ref)

    def rebase(self, onto: str) -> bool:
        """Rebase the current branch, aborting and returning False on conflict."""
        if self._run_optional("rebase", onto) is not None:
            return True
        self._run_optional("rebase", "--abort")
        logger.warning("rebase_aborted", onto=onto)
        return False

    def push_force_with_lease(self, remote: str, branch: str) -> bool:
        return self._run_optional("push", "--force-with-lease", remote, branch) is not None

    # --- Remote ---

    def remote_info(self, remote: str = "origin") -> tuple[str, str] | None:
        """Owner and repository name parsed from a GitHub remote URL."""
        url = self._run_optional("remote", "get-url", remote)
        if not url:
            return None
        match = GITHUB_REMOTE_REGEX.search(url)
        if not match:
            return None
        return match.group(1), match.group(2)
