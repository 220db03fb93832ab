"""Tests for the GitHub adapter."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from pls_release.core.metadata import ReleaseMetadata, release_tag_message
from pls_release.core.version import BumpKind
from pls_release.exceptions import HostConflictError, HostError
from pls_release.vcs.github import GitHubHost, is_conflict


class Recorder:
    """MockTransport handler answering from a route table and recording requests."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response | list[httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        response = self.routes.get(key)
        if response is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(response, list):
            return response.pop(0)
        return response

    def bodies(self, method: str, path: str) -> list[dict]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == method and r.url.path == path
        ]


def _host(recorder: Recorder) -> GitHubHost:
    client = httpx.Client(transport=httpx.MockTransport(recorder))
    return GitHubHost("acme", "widgets", "token-123", client=client)


def _path(suffix: str) -> str:
    return f"/repos/acme/widgets{suffix}"


class TestIsConflict:
    """Tests for is_conflict()."""

    def test_structured_code(self):
        """errors[].code == already_exists is a conflict."""
        response = httpx.Response(
            422,
            json={"message": "Validation Failed", "errors": [{"resource": "Release", "code": "already_exists"}]},
        )

        assert is_conflict(response)

    def test_message_fallback(self):
        """Without error codes the message is checked."""
        response = httpx.Response(422, json={"message": "Reference already exists"})

        assert is_conflict(response)

    def test_other_validation_error(self):
        """Other 422s are real failures."""
        response = httpx.Response(
            422,
            json={"message": "Validation Failed", "errors": [{"code": "invalid", "field": "tag_name"}]},
        )

        assert not is_conflict(response)

    def test_other_status(self):
        """Only 422 responses can be conflicts."""
        assert not is_conflict(httpx.Response(500, json={"message": "already exists"}))


class TestGitHubHost:
    """Tests for GitHubHost over a mock transport."""

    def test_requires_token(self):
        """An empty token is rejected up front."""
        with pytest.raises(HostError) as exc:
            GitHubHost("acme", "widgets", "")

        assert exc.value.code == "HOST_AUTH_ERROR"

    def test_auth_header(self):
        """Requests carry the bearer token and API version."""
        recorder = Recorder({("GET", _path("/git/ref/heads/main")): httpx.Response(200, json={"object": {"sha": "s1"}})})

        assert _host(recorder).get_branch_revision("main") == "s1"

        request = recorder.requests[0]
        assert request.headers["Authorization"] == "Bearer token-123"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    def test_read_file(self):
        """File content is base64-decoded; missing files are None."""
        content = base64.b64encode(b'{"version": "1.0.0"}').decode()
        recorder = Recorder({("GET", _path("/contents/package.json")): httpx.Response(200, json={"content": content})})
        host = _host(recorder)

        assert host.read_file("package.json", "main") == '{"version": "1.0.0"}'
        assert recorder.requests[0].url.params["ref"] == "main"
        assert host.read_file("deno.json", "main") is None

    def test_commit_blob_tree_commit(self):
        """A commit is built from blobs, a tree and a commit and moves no branch."""
        recorder = Recorder(
            {
                ("GET", _path("/git/commits/base1")): httpx.Response(200, json={"tree": {"sha": "tree0"}}),
                ("POST", _path("/git/blobs")): [
                    httpx.Response(201, json={"sha": "blob1"}),
                    httpx.Response(201, json={"sha": "blob2"}),
                ],
                ("POST", _path("/git/trees")): httpx.Response(201, json={"sha": "tree1"}),
                ("POST", _path("/git/commits")): httpx.Response(201, json={"sha": "new1"}),
            }
        )

        revision = _host(recorder).commit({"a.txt": "A", "b.txt": "B"}, "chore: release v1.0.0", "base1")

        assert revision == "new1"
        tree = recorder.bodies("POST", _path("/git/trees"))[0]
        assert tree["base_tree"] == "tree0"
        assert [item["sha"] for item in tree["tree"]] == ["blob1", "blob2"]
        commit = recorder.bodies("POST", _path("/git/commits"))[0]
        assert commit["parents"] == ["base1"]
        assert not any(r.method == "PATCH" for r in recorder.requests)

    def test_ensure_branch_moves_existing(self):
        """An existing branch is force-moved, never recreated."""
        recorder = Recorder(
            {
                ("GET", _path("/git/ref/heads/pls-release")): httpx.Response(200, json={"object": {"sha": "old"}}),
                ("PATCH", _path("/git/refs/heads/pls-release")): httpx.Response(200, json={}),
            }
        )

        _host(recorder).ensure_branch("pls-release", "new")

        assert recorder.bodies("PATCH", _path("/git/refs/heads/pls-release")) == [{"sha": "new", "force": True}]

    def test_ensure_branch_creates_missing(self):
        """A missing branch is created."""
        recorder = Recorder({("POST", _path("/git/refs")): httpx.Response(201, json={})})

        _host(recorder).ensure_branch("pls-release", "new")

        assert recorder.bodies("POST", _path("/git/refs")) == [{"ref": "refs/heads/pls-release", "sha": "new"}]

    def test_create_tag_conflict(self):
        """An existing tag ref raises HostConflictError."""
        recorder = Recorder(
            {
                ("POST", _path("/git/tags")): httpx.Response(201, json={"sha": "tagobj"}),
                ("POST", _path("/git/refs")): httpx.Response(422, json={"message": "Reference already exists"}),
            }
        )

        with pytest.raises(HostConflictError) as exc:
            _host(recorder).create_tag("v1.0.0", "rev1", "Release v1.0.0")

        assert exc.value.code == "ALREADY_EXISTS"
        assert exc.value.status == 422

    def test_get_annotated_tag(self):
        """Annotated tags are dereferenced and classified as managed."""
        message = release_tag_message(ReleaseMetadata("1.1.0", "1.0.0", BumpKind.MINOR), "- b")
        recorder = Recorder(
            {
                ("GET", _path("/git/ref/tags/v1.1.0")): httpx.Response(
                    200, json={"object": {"sha": "tagobj", "type": "tag"}}
                ),
                ("GET", _path("/git/tags/tagobj")): httpx.Response(
                    200, json={"message": message, "object": {"sha": "commit1"}}
                ),
            }
        )

        tag = _host(recorder).get_tag("v1.1.0")

        assert tag is not None
        assert tag.revision == "commit1"
        assert tag.is_managed
        assert tag.metadata == ReleaseMetadata("1.1.0", "1.0.0", BumpKind.MINOR)

    def test_get_lightweight_tag_unmanaged(self):
        """Lightweight tags carry no metadata."""
        recorder = Recorder(
            {
                ("GET", _path("/git/ref/tags/v1.0.0")): httpx.Response(
                    200, json={"object": {"sha": "commit0", "type": "commit"}}
                ),
            }
        )

        tag = _host(recorder).get_tag("v1.0.0")

        assert tag is not None
        assert tag.revision == "commit0"
        assert not tag.is_managed
        assert tag.metadata is None

    def test_find_pr(self):
        """Open proposals are looked up by head branch."""
        pr_json = {"number": 7, "title": "chore: release v1.1.0", "body": None, "head": {"ref": "pls-release"}}
        recorder = Recorder({("GET", _path("/pulls")): httpx.Response(200, json=[pr_json])})

        pr = _host(recorder).find_pr("pls-release")

        assert pr is not None
        assert (pr.number, pr.body, pr.branch) == (7, "", "pls-release")
        assert recorder.requests[0].url.params["head"] == "acme:pls-release"

    def test_find_merged_pr_skips_closed(self):
        """Closed but unmerged proposals are skipped."""
        closed = {"number": 3, "title": "t", "body": "", "head": {"ref": "pls-release"}, "merged_at": None}
        merged = {
            "number": 2,
            "title": "chore: release v1.0.0",
            "body": "",
            "head": {"ref": "pls-release"},
            "merged_at": "2024-01-01T00:00:00Z",
        }
        recorder = Recorder({("GET", _path("/pulls")): httpx.Response(200, json=[closed, merged])})

        pr = _host(recorder).find_merged_pr("pls-release")

        assert pr is not None
        assert pr.number == 2

    def test_create_release_conflict(self):
        """A release for an existing tag raises HostConflictError."""
        recorder = Recorder(
            {
                ("POST", _path("/releases")): httpx.Response(
                    422,
                    json={"message": "Validation Failed", "errors": [{"resource": "Release", "code": "already_exists"}]},
                ),
            }
        )

        with pytest.raises(HostConflictError):
            _host(recorder).create_release("v1.0.0", "Release v1.0.0", "notes")

    def test_release_exists(self):
        """Release lookup by tag; 404 means missing."""
        recorder = Recorder({("GET", _path("/releases/tags/v1.0.0")): httpx.Response(200, json={"id": 1})})
        host = _host(recorder)

        assert host.release_exists("v1.0.0")
        assert not host.release_exists("v2.0.0")

    def test_server_error(self):
        """Other failures raise HostError with the status."""
        recorder = Recorder({("GET", _path("/pulls/9")): httpx.Response(502, text="Bad Gateway")})

        with pytest.raises(HostError) as exc:
            _host(recorder).get_pr(9)

        assert not isinstance(exc.value, HostConflictError)
        assert exc.value.status == 502
        assert exc.value.code == "HOST_API_ERROR"

    def test_transport_error(self):
        """Network failures raise HostError(HOST_UNREACHABLE)."""

        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        host = GitHubHost("acme", "widgets", "t", client=httpx.Client(transport=httpx.MockTransport(fail)))

        with pytest.raises(HostError) as exc:
            host.get_branch_revision("main")

        assert exc.value.code == "HOST_UNREACHABLE"
