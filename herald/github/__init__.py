"""GitHub REST transport and repository identity helpers."""

from __future__ import annotations

from .client import CommitStatusClient, GitHubRestConfig, GitHubStatusClient
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubError,
    GitHubResponseShapeError,
)
from .models import ChangeState, RepositoryIdentity
from .repository import IdentityParseFailure, parse_repository_identity

__all__ = [
    "ChangeState",
    "CommitStatusClient",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubError",
    "GitHubResponseShapeError",
    "GitHubRestConfig",
    "GitHubStatusClient",
    "IdentityParseFailure",
    "RepositoryIdentity",
    "parse_repository_identity",
]
