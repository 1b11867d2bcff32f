"""Typed publisher configuration.

Publisher settings arrive from the build server as a flat ``str -> str`` map.
:meth:`PublisherSettings.from_mapping` validates that map once, when a
publisher is created, and every later component works with the typed value.

Usage
-----
>>> settings = PublisherSettings.from_mapping(
...     {
...         "github_server": "https://api.github.com",
...         "github_auth_type": "token",
...         "github_access_token": "ghp_example",
...         "github_report_on": "finish",
...     }
... )
>>> settings.policy.report_on_start
False

Worker pool sizing comes from the environment instead:

>>> import os
>>> os.environ["HERALD_WORKER_THREADS"] = "8"
>>> WorkerConfig.from_env().worker_threads
8

"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import os

from herald.publisher.errors import PublisherConfigError, WorkerConfigError

SERVER_KEY = "github_server"
AUTH_TYPE_KEY = "github_auth_type"
USERNAME_KEY = "github_username"
PASSWORD_KEY = "github_password"  # noqa: S105 - key name, not a secret
ACCESS_TOKEN_KEY = "github_access_token"  # noqa: S105 - key name, not a secret
REPORT_ON_KEY = "github_report_on"
USE_COMMENTS_KEY = "github_use_comments"
USE_GUEST_URLS_KEY = "github_use_guest_urls"
STATUS_CONTEXT_KEY = "github_status_context"

_KEY_PREFIX = "github_"
_KNOWN_KEYS = frozenset(
    {
        SERVER_KEY,
        AUTH_TYPE_KEY,
        USERNAME_KEY,
        PASSWORD_KEY,
        ACCESS_TOKEN_KEY,
        REPORT_ON_KEY,
        USE_COMMENTS_KEY,
        USE_GUEST_URLS_KEY,
        STATUS_CONTEXT_KEY,
    }
)

DEFAULT_STATUS_CONTEXT = "continuous-integration/herald"


class AuthType(enum.StrEnum):
    """Supported GitHub authentication flows."""

    PASSWORD = "password"  # noqa: S105 - flow name
    TOKEN = "token"  # noqa: S105 - flow name


class ReportOn(enum.StrEnum):
    """Which lifecycle events produce status updates."""

    START = "start"
    FINISH = "finish"
    START_AND_FINISH = "start-and-finish"


@dc.dataclass(frozen=True, slots=True)
class PasswordCredentials:
    """Username and password (or password-equivalent token) pair."""

    username: str
    password: str = dc.field(repr=False)


@dc.dataclass(frozen=True, slots=True)
class TokenCredentials:
    """Personal access token."""

    token: str = dc.field(repr=False)


type Credentials = PasswordCredentials | TokenCredentials


@dc.dataclass(frozen=True, slots=True)
class ReportingPolicy:
    """What a publisher reports, derived once from its settings."""

    report_on_start: bool = True
    report_on_finish: bool = True
    post_comments: bool = False
    use_guest_links: bool = False

    @classmethod
    def for_report_on(
        cls,
        report_on: ReportOn,
        *,
        post_comments: bool = False,
        use_guest_links: bool = False,
    ) -> ReportingPolicy:
        """Build a policy for the given ``report_on`` selection."""
        return cls(
            report_on_start=report_on in {ReportOn.START, ReportOn.START_AND_FINISH},
            report_on_finish=report_on
            in {ReportOn.FINISH, ReportOn.START_AND_FINISH},
            post_comments=post_comments,
            use_guest_links=use_guest_links,
        )


@dc.dataclass(frozen=True, slots=True)
class InvalidSetting:
    """One problem found while validating publisher settings."""

    key: str
    reason: str


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _required(params: cabc.Mapping[str, str], key: str, what: str) -> str:
    value = params.get(key)
    if value is None or not value.strip():
        raise PublisherConfigError.missing(key, what)
    return value.strip()


def _parse_server_url(params: cabc.Mapping[str, str]) -> str:
    return _required(params, SERVER_KEY, "GitHub URL")


def _parse_credentials(params: cabc.Mapping[str, str]) -> Credentials:
    raw_type = _required(params, AUTH_TYPE_KEY, "authentication type")
    try:
        auth_type = AuthType(raw_type.lower())
    except ValueError as exc:
        raise PublisherConfigError.invalid_choice(
            AUTH_TYPE_KEY, raw_type, [member.value for member in AuthType]
        ) from exc

    if auth_type is AuthType.PASSWORD:
        return PasswordCredentials(
            username=_required(params, USERNAME_KEY, "GitHub username"),
            password=_required(params, PASSWORD_KEY, "GitHub password"),
        )
    return TokenCredentials(
        token=_required(params, ACCESS_TOKEN_KEY, "GitHub access token")
    )


def _parse_report_on(params: cabc.Mapping[str, str]) -> ReportOn:
    raw = params.get(REPORT_ON_KEY) or ""
    if not raw.strip():
        return ReportOn.START_AND_FINISH
    try:
        return ReportOn(raw.strip().lower())
    except ValueError as exc:
        raise PublisherConfigError.invalid_choice(
            REPORT_ON_KEY, raw, [member.value for member in ReportOn]
        ) from exc


def _check_known_keys(params: cabc.Mapping[str, str]) -> None:
    for key in sorted(params):
        if key.startswith(_KEY_PREFIX) and key not in _KNOWN_KEYS:
            raise PublisherConfigError.unknown_key(key)


@dc.dataclass(frozen=True, slots=True)
class PublisherSettings:
    """Validated GitHub publisher settings.

    Attributes
    ----------
    server_url
        GitHub REST API base URL.
    credentials
        Either password or token credentials, never both.
    report_on
        Lifecycle events that produce status updates.
    post_comments
        Whether a narrative comment accompanies each status.
    use_guest_urls
        Whether result links carry the ``guest=1`` marker.
    status_context
        Context string identifying Herald's statuses on a commit.

    """

    server_url: str
    credentials: Credentials
    report_on: ReportOn = ReportOn.START_AND_FINISH
    post_comments: bool = False
    use_guest_urls: bool = False
    status_context: str = DEFAULT_STATUS_CONTEXT

    @property
    def auth_type(self) -> AuthType:
        """Return the authentication flow the credentials select."""
        if isinstance(self.credentials, TokenCredentials):
            return AuthType.TOKEN
        return AuthType.PASSWORD

    @property
    def policy(self) -> ReportingPolicy:
        """Return the reporting policy these settings describe."""
        return ReportingPolicy.for_report_on(
            self.report_on,
            post_comments=self.post_comments,
            use_guest_links=self.use_guest_urls,
        )

    @classmethod
    def from_mapping(cls, params: cabc.Mapping[str, str]) -> PublisherSettings:
        """Validate a raw settings map.

        Raises
        ------
        PublisherConfigError
            For the first missing, blank, unknown, or unrecognised setting.

        """
        _check_known_keys(params)
        server_url = _parse_server_url(params)
        credentials = _parse_credentials(params)
        report_on = _parse_report_on(params)
        context = (params.get(STATUS_CONTEXT_KEY) or "").strip()
        return cls(
            server_url=server_url,
            credentials=credentials,
            report_on=report_on,
            post_comments=not _blank(params.get(USE_COMMENTS_KEY)),
            use_guest_urls=not _blank(params.get(USE_GUEST_URLS_KEY)),
            status_context=context or DEFAULT_STATUS_CONTEXT,
        )

    def to_mapping(self) -> dict[str, str]:
        """Return the flat map that :meth:`from_mapping` turns back into self."""
        params = {
            SERVER_KEY: self.server_url,
            AUTH_TYPE_KEY: str(self.auth_type),
            REPORT_ON_KEY: str(self.report_on),
            STATUS_CONTEXT_KEY: self.status_context,
        }
        match self.credentials:
            case PasswordCredentials(username=username, password=password):
                params[USERNAME_KEY] = username
                params[PASSWORD_KEY] = password
            case TokenCredentials(token=token):
                params[ACCESS_TOKEN_KEY] = token
        if self.post_comments:
            params[USE_COMMENTS_KEY] = "true"
        if self.use_guest_urls:
            params[USE_GUEST_URLS_KEY] = "true"
        return params


def validate_settings(params: cabc.Mapping[str, str]) -> list[InvalidSetting]:
    """Report every problem in a settings map, for form-style feedback.

    Unlike :meth:`PublisherSettings.from_mapping`, which stops at the first
    error, each concern is checked independently.
    """
    checks: tuple[cabc.Callable[[cabc.Mapping[str, str]], object], ...] = (
        _check_known_keys,
        _parse_server_url,
        _parse_credentials,
        _parse_report_on,
    )
    problems: list[InvalidSetting] = []
    for check in checks:
        try:
            check(params)
        except PublisherConfigError as exc:
            problems.append(InvalidSetting(key=exc.key or "", reason=str(exc)))
    return problems


_DEFAULT_WORKER_THREADS = 4


@dc.dataclass(frozen=True, slots=True)
class WorkerConfig:
    """Sizing for the shared background worker pool.

    Attributes
    ----------
    worker_threads
        Number of Dramatiq worker threads, bounding concurrent remote calls.

    """

    worker_threads: int = _DEFAULT_WORKER_THREADS

    @classmethod
    def from_env(cls) -> WorkerConfig:
        """Create configuration from ``HERALD_WORKER_THREADS``.

        Raises
        ------
        WorkerConfigError
            If ``HERALD_WORKER_THREADS`` is set but not a positive integer.

        """
        env_var = "HERALD_WORKER_THREADS"
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return cls()
        try:
            threads = int(raw)
        except ValueError as exc:
            raise WorkerConfigError.not_positive(env_var, raw) from exc
        if threads < 1:
            raise WorkerConfigError.not_positive(env_var, raw)
        return cls(worker_threads=threads)
