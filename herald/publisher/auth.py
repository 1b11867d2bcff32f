"""Build authenticated GitHub clients from publisher settings."""

from __future__ import annotations

import threading
import typing as typ

from herald.github import CommitStatusClient, GitHubRestConfig, GitHubStatusClient
from herald.publisher.config import PasswordCredentials, TokenCredentials

if typ.TYPE_CHECKING:
    from herald.publisher.config import PublisherSettings


class GitHubClientFactory(typ.Protocol):
    """Opens clients for the two supported authentication flows."""

    def open_for_user(
        self, server_url: str, username: str, password: str
    ) -> CommitStatusClient:
        """Return a client using basic authentication."""
        ...

    def open_for_token(self, server_url: str, token: str) -> CommitStatusClient:
        """Return a client using a personal access token."""
        ...


class RestClientFactory:
    """Default factory producing :class:`GitHubStatusClient` instances."""

    def open_for_user(
        self, server_url: str, username: str, password: str
    ) -> CommitStatusClient:
        """Return a REST client using basic authentication."""
        return GitHubStatusClient(
            GitHubRestConfig(
                server_url=server_url, username=username, password=password
            )
        )

    def open_for_token(self, server_url: str, token: str) -> CommitStatusClient:
        """Return a REST client using a personal access token."""
        return GitHubStatusClient(GitHubRestConfig(server_url=server_url, token=token))


class AuthContextResolver:
    """Resolve one shared client per distinct settings value.

    Clients are immutable once built, so the cache hands the same instance to
    every engine and worker task in the process that uses equal settings.
    Thread-safe: Dramatiq worker threads resolve clients concurrently.
    """

    def __init__(self, factory: GitHubClientFactory | None = None) -> None:
        """Use ``factory`` to open clients, defaulting to the REST factory."""
        self._factory = factory or RestClientFactory()
        self._cache: dict[PublisherSettings, CommitStatusClient] = {}
        self._lock = threading.Lock()

    def _open(self, settings: PublisherSettings) -> CommitStatusClient:
        match settings.credentials:
            case PasswordCredentials(username=username, password=password):
                return self._factory.open_for_user(
                    settings.server_url, username, password
                )
            case TokenCredentials(token=token):
                return self._factory.open_for_token(settings.server_url, token)
        msg = f"Unsupported credentials: {type(settings.credentials).__name__}"
        raise TypeError(msg)

    def resolve(self, settings: PublisherSettings) -> CommitStatusClient:
        """Return the client bound to ``settings``' server and credentials.

        Raises
        ------
        GitHubConfigError
            If the factory rejects the server URL or credentials.

        """
        with self._lock:
            client = self._cache.get(settings)
            if client is None:
                client = self._open(settings)
                self._cache[settings] = client
            return client

    def clear(self) -> None:
        """Forget cached clients."""
        with self._lock:
            self._cache.clear()


_DEFAULT_RESOLVER = AuthContextResolver()


def default_resolver() -> AuthContextResolver:
    """Return the process-wide resolver shared by engines and workers."""
    return _DEFAULT_RESOLVER
