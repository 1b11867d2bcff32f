"""Errors raised by the GitHub REST transport."""

from __future__ import annotations


class GitHubError(RuntimeError):
    """Base class for failures talking to GitHub.

    Status publishing treats every subclass as a recoverable remote failure.
    """


class GitHubAPIError(GitHubError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, detail: str = "") -> GitHubAPIError:
        """Return an error for non-success HTTP responses."""
        msg = f"GitHub REST HTTP {status_code}"
        if detail:
            msg = f"{msg}: {detail}"
        return cls(msg, status_code=status_code)

    @classmethod
    def timeout(cls) -> GitHubAPIError:
        """Return an error for request timeouts."""
        return cls("GitHub REST request timed out")

    @classmethod
    def network_error(cls, detail: str) -> GitHubAPIError:
        """Return an error for DNS, connection, or TLS failures."""
        return cls(f"GitHub REST network error: {detail}")

    @classmethod
    def invalid_url(cls, detail: str) -> GitHubAPIError:
        """Return an error when the server URL or request path is malformed."""
        return cls(f"GitHub REST invalid URL: {detail}")


class GitHubResponseShapeError(GitHubError):
    """Raised when GitHub responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub REST response missing expected field: {field}")


class GitHubConfigError(ValueError):
    """Raised when a GitHub client is constructed with unusable settings."""

    @classmethod
    def empty_server_url(cls) -> GitHubConfigError:
        """Return an error when the API base URL is blank."""
        return cls("GitHub server URL must be non-empty")

    @classmethod
    def empty_credential(cls, name: str) -> GitHubConfigError:
        """Return an error when a credential component is blank."""
        return cls(f"GitHub {name} must be non-empty")
