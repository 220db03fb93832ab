"""Code host adapter for the GitHub REST API.

Branches are parameters of each call, never configuration, so one client
serves the base, target and release branches alike.
"""

from __future__ import annotations

import base64
from typing import Any
from urllib.parse import quote

import httpx

from pls_release.core.metadata import has_release_metadata, parse_release_metadata
from pls_release.exceptions import HostConflictError, HostError
from pls_release.logging import get_logger
from pls_release.vcs.base import PullRequest, ReleaseTag

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
DEFAULT_TIMEOUT = 30.0


def is_conflict(response: httpx.Response) -> bool:
    """Whether an error response means "the object already exists".

    The structured ``errors[].code`` field is checked first; the message is
    only consulted when the payload carries no error codes.
    """
    if response.status_code != 422:
        return False
    try:
        payload = response.json()
    except ValueError:
        return "already exists" in response.text.lower()

    errors = payload.get("errors") if isinstance(payload, dict) else None
    if errors:
        codes = {e.get("code") for e in errors if isinstance(e, dict)}
        if "already_exists" in codes:
            return True
        messages = " ".join(str(e.get("message", "")) for e in errors if isinstance(e, dict))
        return "already exists" in messages.lower()

    message = payload.get("message", "") if isinstance(payload, dict) else ""
    return "already exists" in str(message).lower()


def _pull_request(data: dict[str, Any]) -> PullRequest:
    return PullRequest(
        number=data["number"],
        title=data["title"],
        body=data.get("body") or "",
        branch=data["head"]["ref"],
        url=data.get("html_url", ""),
    )


class GitHubHost:
    """GitHub implementation of the code host port.

    Args:
        owner: Repository owner
        repo: Repository name
        token: API token with contents and pull request write access
        api_url: API base URL (GitHub Enterprise uses ``https://host/api/v3``)
        client: Preconfigured client, mainly for tests
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        client: httpx.Client | None = None,
    ) -> None:
        if not token:
            raise HostError(
                "GitHub token required. Set GITHUB_TOKEN or pass --token",
                code="HOST_AUTH_ERROR",
            )
        self.owner = owner
        self.repo = repo
        self._client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self._base = f"{api_url.rstrip('/')}/repos/{owner}/{repo}"
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubHost:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- Transport ---

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            HostConflictError: On "already exists" responses
            HostError: On any other error status or transport failure
        """
        url = f"{self._base}{path}"
        try:
            response = self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            raise HostError(f"{method} {path} failed: {e}", code="HOST_UNREACHABLE", path=path) from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()

        if is_conflict(response):
            raise HostConflictError(
                f"{method} {path}: object already exists",
                status=response.status_code,
                path=path,
                body=response.text,
            )
        raise HostError(
            f"GitHub API error: {response.status_code} {response.reason_phrase} for {method} {path}",
            status=response.status_code,
            path=path,
            body=response.text,
        )

    def _request_optional(self, method: str, path: str, **kwargs: Any) -> Any | None:
        """Like :meth:`_request`, but a 404 returns None."""
        try:
            return self._request(method, path, **kwargs)
        except HostError as e:
            if e.status == 404:
                return None
            raise

    # --- Files ---

    def read_file(self, path: str, ref: str | None = None) -> str | None:
        params = {"ref": ref} if ref else None
        data = self._request_optional("GET", f"/contents/{quote(path)}", params=params)
        if not data or "content" not in data:
            return None
        return base64.b64decode(data["content"]).decode("utf-8")

    def file_exists(self, path: str, ref: str | None = None) -> bool:
        return self.read_file(path, ref) is not None

    # --- Atomic commit ---

    def commit(self, files: dict[str, str], message: str, parent_revision: str) -> str:
        """Create a commit via blobs -> tree -> commit. No branch is moved."""
        parent = self._request("GET", f"/git/commits/{parent_revision}")

        tree_items = []
        for path, content in files.items():
            blob = self._request("POST", "/git/blobs", json={"content": content, "encoding": "utf-8"})
            tree_items.append({"path": path, "mode": "100644", "type": "blob", "sha": blob["sha"]})

        tree = self._request(
            "POST",
            "/git/trees",
            json={"base_tree": parent["tree"]["sha"], "tree": tree_items},
        )
        commit = self._request(
            "POST",
            "/git/commits",
            json={"message": message, "tree": tree["sha"], "parents": [parent_revision]},
        )
        logger.debug("host_commit_created", revision=commit["sha"], files=sorted(files))
        return commit["sha"]

    # --- Branches ---

    def get_branch_revision(self, branch: str) -> str | None:
        ref = self._request_optional("GET", f"/git/ref/heads/{quote(branch)}")
        return ref["object"]["sha"] if ref else None

    def point_branch(self, branch: str, revision: str, *, force: bool = False) -> None:
        self._request(
            "PATCH",
            f"/git/refs/heads/{quote(branch)}",
            json={"sha": revision, "force": force},
        )

    def create_branch(self, branch: str, revision: str) -> None:
        self._request("POST", "/git/refs", json={"ref": f"refs/heads/{branch}", "sha": revision})

    def ensure_branch(self, branch: str, revision: str) -> None:
        """Point ``branch`` at ``revision``, creating it if needed.

        An existing branch moves straight from its old commit to the new one.
        """
        if self.get_branch_revision(branch) is None:
            self.create_branch(branch, revision)
        else:
            self.point_branch(branch, revision, force=True)

    # --- Tags ---

    def create_tag(self, name: str, revision: str, message: str) -> None:
        tag_object = self._request(
            "POST",
            "/git/tags",
            json={"tag": name, "message": message, "object": revision, "type": "commit"},
        )
        self._request("POST", "/git/refs", json={"ref": f"refs/tags/{name}", "sha": tag_object["sha"]})

    def get_tag(self, name: str) -> ReleaseTag | None:
        ref = self._request_optional("GET", f"/git/ref/tags/{quote(name)}")
        if not ref:
            return None

        revision = ref["object"]["sha"]
        message: str | None = None

        if ref["object"]["type"] == "tag":
            tag_object = self._request_optional("GET", f"/git/tags/{revision}")
            if tag_object:
                message = tag_object.get("message")
                revision = tag_object["object"]["sha"]

        return ReleaseTag(
            name=name,
            revision=revision,
            message=message,
            is_managed=bool(message) and has_release_metadata(message),
            metadata=parse_release_metadata(message) if message else None,
        )

    # --- Pull requests ---

    def find_pr(self, head_branch: str) -> PullRequest | None:
        prs = self._request(
            "GET",
            "/pulls",
            params={"head": f"{self.owner}:{head_branch}", "state": "open"},
        )
        return _pull_request(prs[0]) if prs else None

    def find_merged_pr(self, head_branch: str) -> PullRequest | None:
        prs = self._request(
            "GET",
            "/pulls",
            params={
                "head": f"{self.owner}:{head_branch}",
                "state": "closed",
                "sort": "updated",
                "direction": "desc",
            },
        )
        merged = next((pr for pr in prs if pr.get("merged_at")), None)
        return _pull_request(merged) if merged else None

    def get_pr(self, number: int) -> PullRequest:
        return _pull_request(self._request("GET", f"/pulls/{number}"))

    def create_pr(self, *, title: str, body: str, head: str, base: str) -> PullRequest:
        data = self._request(
            "POST",
            "/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        return _pull_request(data)

    def update_pr(self, number: int, *, title: str | None = None, body: str | None = None) -> None:
        payload = {k: v for k, v in {"title": title, "body": body}.items() if v is not None}
        self._request("PATCH", f"/pulls/{number}", json=payload)

    # --- Releases ---

    def create_release(self, tag: str, name: str, body: str, *, prerelease: bool = False) -> str:
        release = self._request(
            "POST",
            "/releases",
            json={"tag_name": tag, "name": name, "body": body, "prerelease": prerelease},
        )
        return release.get("html_url", "")

    def release_exists(self, tag: str) -> bool:
        return self._request_optional("GET", f"/releases/tags/{quote(tag)}") is not None
