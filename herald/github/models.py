"""Typed domain values shared by the GitHub transport and the publisher."""

from __future__ import annotations

import dataclasses
import enum


class ChangeState(enum.StrEnum):
    """Commit status states accepted by the GitHub statuses API."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryIdentity:
    """Owner and name of a GitHub repository.

    Instances are only produced by
    :func:`herald.github.repository.parse_repository_identity`, which
    guarantees both fields are non-empty and the name carries no ``.git``
    suffix.
    """

    owner: str
    name: str

    @property
    def slug(self) -> str:
        """Return ``owner/name`` for logs and telemetry."""
        return f"{self.owner}/{self.name}"
