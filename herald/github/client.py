"""GitHub REST client used to publish commit statuses and comments."""

from __future__ import annotations

import dataclasses
import re
import typing as typ

import httpx
import msgspec

from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)

if typ.TYPE_CHECKING:
    from .models import ChangeState

_PULL_REQUEST_REF = re.compile(r"^/?refs/pull/(?P<number>\d+)/(?P<kind>[^/]+)$")
_HTTP_NOT_FOUND = 404
_ERROR_DETAIL_LIMIT = 200


class CommitStatusClient(typ.Protocol):
    """Remote operations the status publisher needs from a hosting service."""

    async def set_change_status(  # noqa: PLR0913 - mirrors the statuses API
        self,
        owner: str,
        repo: str,
        commit_hash: str,
        state: ChangeState,
        target_url: str,
        description: str,
        context: str,
    ) -> None:
        """Create a commit status on ``commit_hash``."""
        ...

    async def post_comment(
        self, owner: str, repo: str, commit_hash: str, body: str
    ) -> None:
        """Add a comment to ``commit_hash``."""
        ...

    def is_pull_request_merge_ref(self, branch_ref: str) -> bool:
        """Return True when ``branch_ref`` names a pull request merge ref."""
        ...

    async def find_pull_request_head_commit(
        self, owner: str, repo: str, branch_ref: str
    ) -> str | None:
        """Return the head commit of the pull request behind ``branch_ref``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Connection settings for one GitHub (or GitHub Enterprise) endpoint.

    Attributes
    ----------
    server_url
        REST API base URL, e.g. ``https://api.github.com`` or
        ``https://ghe.example.com/api/v3``.
    token
        Personal access token. Mutually exclusive with username/password.
    username, password
        Basic authentication credentials.
    timeout_s
        Per-request timeout in seconds.
    user_agent
        ``User-Agent`` header sent with every request.

    """

    server_url: str
    token: str | None = None
    username: str | None = None
    password: str | None = dataclasses.field(default=None, repr=False)
    timeout_s: float = 20.0
    user_agent: str = "herald/0.1"


class _PullRequestHead(msgspec.Struct):
    sha: str


class _PullRequest(msgspec.Struct):
    head: _PullRequestHead


def _pull_request_number(branch_ref: str) -> int | None:
    match = _PULL_REQUEST_REF.match(branch_ref)
    if match is None or match.group("kind") != "merge":
        return None
    return int(match.group("number"))


class GitHubStatusClient:
    """GitHub REST implementation of :class:`CommitStatusClient`.

    A fresh :class:`httpx.AsyncClient` is opened per call, so one instance can
    be shared by worker threads that each drive their own event loop.
    """

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Validate ``config`` and keep an optional transport for tests."""
        if not config.server_url.strip():
            raise GitHubConfigError.empty_server_url()
        if config.token is not None:
            if not config.token.strip():
                raise GitHubConfigError.empty_credential("token")
        elif not (config.username or "").strip():
            raise GitHubConfigError.empty_credential("username")

        self._config = config
        self._transport = transport
        self._base_url = config.server_url.strip().rstrip("/")

    @property
    def config(self) -> GitHubRestConfig:
        """Return the connection settings this client is bound to."""
        return self._config

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._config.user_agent,
        }
        if self._config.token is not None:
            headers["Authorization"] = f"token {self._config.token}"
        return headers

    def _auth(self) -> httpx.BasicAuth | None:
        if self._config.token is not None:
            return None
        return httpx.BasicAuth(self._config.username or "", self._config.password or "")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request, mapping transport failures to GitHubAPIError."""
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers(),
                auth=self._auth(),
                timeout=self._config.timeout_s,
                transport=self._transport,
            ) as client:
                return await client.request(method, path, json=json)
        except httpx.TimeoutException as exc:
            raise GitHubAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise GitHubAPIError.network_error(str(exc)) from exc
        except httpx.InvalidURL as exc:
            raise GitHubAPIError.invalid_url(str(exc)) from exc

    @staticmethod
    def _check_status(response: httpx.Response, *expected: int) -> None:
        if response.status_code not in expected:
            raise GitHubAPIError.http_error(
                response.status_code, response.text[:_ERROR_DETAIL_LIMIT]
            )

    async def set_change_status(  # noqa: PLR0913 - mirrors the statuses API
        self,
        owner: str,
        repo: str,
        commit_hash: str,
        state: ChangeState,
        target_url: str,
        description: str,
        context: str,
    ) -> None:
        """Create a commit status via ``POST /repos/{owner}/{repo}/statuses/{sha}``."""
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/statuses/{commit_hash}",
            json={
                "state": str(state),
                "target_url": target_url,
                "description": description,
                "context": context,
            },
        )
        self._check_status(response, httpx.codes.CREATED)

    async def post_comment(
        self, owner: str, repo: str, commit_hash: str, body: str
    ) -> None:
        """Comment on a commit via the commit comments endpoint.

        ``POST /repos/{owner}/{repo}/commits/{sha}/comments``
        """
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/commits/{commit_hash}/comments",
            json={"body": body},
        )
        self._check_status(response, httpx.codes.CREATED)

    def is_pull_request_merge_ref(self, branch_ref: str) -> bool:
        """Return True for refs shaped like ``refs/pull/<number>/merge``."""
        return _pull_request_number(branch_ref) is not None

    async def find_pull_request_head_commit(
        self, owner: str, repo: str, branch_ref: str
    ) -> str | None:
        """Return the current head SHA of the pull request behind ``branch_ref``.

        Returns ``None`` when the ref is not a merge ref or the pull request
        does not exist.

        Raises
        ------
        GitHubAPIError
            If GitHub responds with an unexpected status or is unreachable.
        GitHubResponseShapeError
            If the pull request payload lacks ``head.sha``.

        """
        number = _pull_request_number(branch_ref)
        if number is None:
            return None

        response = await self._request("GET", f"/repos/{owner}/{repo}/pulls/{number}")
        if response.status_code == _HTTP_NOT_FOUND:
            return None
        self._check_status(response, httpx.codes.OK)

        try:
            pull_request = msgspec.json.decode(response.content, type=_PullRequest)
        except msgspec.DecodeError as exc:
            raise GitHubResponseShapeError.missing("head.sha") from exc
        return pull_request.head.sha or None
