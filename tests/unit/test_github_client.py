"""Unit tests for the GitHub REST commit status client."""

from __future__ import annotations

import json
import typing as typ

import httpx
import pytest

from herald.github import (
    ChangeState,
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubRestConfig,
    GitHubStatusClient,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

HEAD_SHA = "abc123"


def _make_client(
    handler: cabc.Callable[[httpx.Request], httpx.Response],
    *,
    token: str | None = "ghp_example",
    username: str | None = None,
    password: str | None = None,
) -> GitHubStatusClient:
    config = GitHubRestConfig(
        server_url="https://ghe.example.com/api/v3/",
        token=token,
        username=username,
        password=password,
    )
    return GitHubStatusClient(config, transport=httpx.MockTransport(handler))


class _Recorder:
    """Keeps requests and replies with a fixed response."""

    def __init__(self, response: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response


@pytest.mark.asyncio
async def test_set_change_status_posts_status() -> None:
    """Statuses are created with token auth and the full payload."""
    recorder = _Recorder(httpx.Response(201, json={"id": 1}))
    client = _make_client(recorder)

    await client.set_change_status(
        "acme",
        "widgets",
        "0f1e2d",
        ChangeState.FAILURE,
        "https://ci.example.com/viewLog.html?buildId=7",
        "Finished CI build Reef: Tests failed: 1",
        "continuous-integration/herald",
    )

    (request,) = recorder.requests
    assert request.method == "POST", "Expected POST."
    assert request.url == (
        "https://ghe.example.com/api/v3/repos/acme/widgets/statuses/0f1e2d"
    ), "Unexpected statuses URL."
    assert request.headers["Authorization"] == "token ghp_example", (
        "Expected token authorization."
    )
    assert json.loads(request.content) == {
        "state": "failure",
        "target_url": "https://ci.example.com/viewLog.html?buildId=7",
        "description": "Finished CI build Reef: Tests failed: 1",
        "context": "continuous-integration/herald",
    }, "Unexpected status payload."


@pytest.mark.asyncio
async def test_post_comment_uses_basic_auth() -> None:
    """Comments are posted with basic auth for password settings."""
    recorder = _Recorder(httpx.Response(201, json={"id": 2}))
    client = _make_client(recorder, token=None, username="ci-bot", password="pw")

    await client.post_comment("acme", "widgets", "0f1e2d", "CI build is now running")

    (request,) = recorder.requests
    assert request.url.path == "/api/v3/repos/acme/widgets/commits/0f1e2d/comments", (
        "Unexpected comments path."
    )
    assert request.headers["Authorization"].startswith("Basic "), (
        "Expected basic authorization."
    )
    assert json.loads(request.content) == {"body": "CI build is now running"}, (
        "Unexpected comment payload."
    )


@pytest.mark.asyncio
async def test_error_status_raises_api_error() -> None:
    """Non-201 replies become GitHubAPIError carrying the status code."""
    client = _make_client(lambda _: httpx.Response(422, text="Validation Failed"))

    with pytest.raises(GitHubAPIError, match="Validation Failed") as excinfo:
        await client.post_comment("acme", "widgets", "0f1e2d", "body")

    assert excinfo.value.status_code == 422, "Expected the HTTP status code."


@pytest.mark.asyncio
async def test_timeout_raises_api_error() -> None:
    """Transport timeouts are mapped to GitHubAPIError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = _make_client(handler)

    with pytest.raises(GitHubAPIError, match="timed out"):
        await client.set_change_status(
            "acme", "widgets", "0f1e2d", ChangeState.PENDING, "u", "d", "c"
        )


@pytest.mark.asyncio
async def test_connection_error_raises_api_error() -> None:
    """Network failures are mapped to GitHubAPIError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _make_client(handler)

    with pytest.raises(GitHubAPIError, match="network error"):
        await client.post_comment("acme", "widgets", "0f1e2d", "body")


@pytest.mark.asyncio
async def test_malformed_server_url_raises_api_error() -> None:
    """A server URL httpx cannot parse surfaces as GitHubAPIError."""
    recorder = _Recorder(httpx.Response(201))
    client = GitHubStatusClient(
        GitHubRestConfig(server_url="https://ghe\x00.example.com", token="t"),
        transport=httpx.MockTransport(recorder),
    )

    with pytest.raises(GitHubAPIError, match="invalid URL"):
        await client.find_pull_request_head_commit(
            "acme", "widgets", "refs/pull/7/merge"
        )

    assert recorder.requests == [], "Nothing should have been sent."


@pytest.mark.parametrize(
    ("branch_ref", "expected"),
    [
        ("refs/pull/42/merge", True),
        ("/refs/pull/42/merge", True),
        ("refs/pull/42/head", False),
        ("refs/heads/main", False),
        ("refs/pull/abc/merge", False),
    ],
    ids=["merge", "leading-slash", "head", "branch", "non-numeric"],
)
def test_is_pull_request_merge_ref(branch_ref: str, *, expected: bool) -> None:
    """Only numbered merge refs are classified as merge refs."""
    client = _make_client(lambda _: httpx.Response(500))

    assert client.is_pull_request_merge_ref(branch_ref) is expected, (
        f"Unexpected classification of {branch_ref!r}."
    )


@pytest.mark.asyncio
async def test_find_pull_request_head_commit() -> None:
    """The head SHA is read from the pull request."""
    recorder = _Recorder(
        httpx.Response(200, json={"number": 42, "head": {"sha": HEAD_SHA}})
    )
    client = _make_client(recorder)

    head = await client.find_pull_request_head_commit(
        "acme", "widgets", "refs/pull/42/merge"
    )

    assert head == HEAD_SHA, "Expected the head SHA."
    assert recorder.requests[0].url.path == "/api/v3/repos/acme/widgets/pulls/42", (
        "Unexpected pull request path."
    )


@pytest.mark.asyncio
async def test_find_pull_request_head_commit_not_found() -> None:
    """A missing pull request yields None."""
    client = _make_client(lambda _: httpx.Response(404, json={"message": "x"}))

    head = await client.find_pull_request_head_commit(
        "acme", "widgets", "refs/pull/42/merge"
    )

    assert head is None, "Expected None for a missing pull request."


@pytest.mark.asyncio
async def test_find_pull_request_head_commit_skips_non_merge_refs() -> None:
    """Non-merge refs are answered without a request."""
    recorder = _Recorder(httpx.Response(500))
    client = _make_client(recorder)

    head = await client.find_pull_request_head_commit(
        "acme", "widgets", "refs/heads/main"
    )

    assert head is None, "Expected None for a branch ref."
    assert recorder.requests == [], "No request should be sent."


@pytest.mark.asyncio
async def test_find_pull_request_head_commit_rejects_bad_payload() -> None:
    """Payloads without head.sha raise a shape error."""
    client = _make_client(lambda _: httpx.Response(200, json={"number": 42}))

    with pytest.raises(GitHubResponseShapeError, match=r"head\.sha"):
        await client.find_pull_request_head_commit(
            "acme", "widgets", "refs/pull/42/merge"
        )


@pytest.mark.parametrize(
    ("config", "match"),
    [
        (GitHubRestConfig(server_url=" ", token="t"), "server URL"),
        (GitHubRestConfig(server_url="https://x", token=""), "token"),
        (GitHubRestConfig(server_url="https://x"), "username"),
    ],
    ids=["blank-server", "blank-token", "no-credentials"],
)
def test_invalid_config_rejected(config: GitHubRestConfig, match: str) -> None:
    """Unusable configuration fails at construction."""
    with pytest.raises(GitHubConfigError, match=match):
        GitHubStatusClient(config)
