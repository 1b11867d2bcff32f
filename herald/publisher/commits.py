"""Choose the commit a status update should be attached to.

Builds of pull requests usually track the ephemeral merge ref
(``refs/pull/<n>/merge``). A status on the merge commit is invisible on the
pull request, so the resolver swaps it for the pull request's head commit.
Resolution is best effort: when the lookup fails the tracked hash is used.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from herald.github import GitHubError
from herald.publisher.observability import PublisherEventLogger

if typ.TYPE_CHECKING:
    from herald.build import TrackedRevision
    from herald.github import CommitStatusClient, RepositoryIdentity


class CommitSource(enum.StrEnum):
    """Where a resolved commit hash came from."""

    TRACKED = "tracked"
    PULL_REQUEST_HEAD = "pull_request_head"


@dataclasses.dataclass(frozen=True, slots=True)
class CommitResolution:
    """The commit to annotate and how it was chosen."""

    commit_hash: str
    source: CommitSource
    failure: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class HeadLookup:
    """A pull request head commit found on GitHub."""

    commit_hash: str


@dataclasses.dataclass(frozen=True, slots=True)
class HeadLookupFailure:
    """Why a pull request head commit could not be found."""

    reason: str


type HeadLookupResult = HeadLookup | HeadLookupFailure


class CommitResolver:
    """Resolve the commit hash for a tracked revision."""

    def __init__(
        self,
        client: CommitStatusClient,
        *,
        events: PublisherEventLogger | None = None,
    ) -> None:
        """Bind the resolver to a client and an event logger."""
        self._client = client
        self._events = events or PublisherEventLogger()

    async def _lookup_head(
        self, identity: RepositoryIdentity, branch_ref: str
    ) -> HeadLookupResult:
        try:
            head = await self._client.find_pull_request_head_commit(
                identity.owner, identity.name, branch_ref
            )
        except GitHubError as exc:
            return HeadLookupFailure(str(exc))
        if head is None:
            return HeadLookupFailure(
                f"Failed to find head hash for commit from {branch_ref}"
            )
        return HeadLookup(head)

    async def resolve(
        self, revision: TrackedRevision, identity: RepositoryIdentity
    ) -> CommitResolution:
        """Return the commit to annotate; never raises for remote failures."""
        branch_ref = revision.branch_ref
        if branch_ref is None or not self._client.is_pull_request_merge_ref(
            branch_ref
        ):
            return CommitResolution(revision.version_hash, CommitSource.TRACKED)

        lookup = await self._lookup_head(identity, branch_ref)
        if isinstance(lookup, HeadLookupFailure):
            self._events.log_commit_resolution_failed(
                identity,
                branch_ref=branch_ref,
                tracked_hash=revision.version_hash,
                reason=lookup.reason,
            )
            return CommitResolution(
                revision.version_hash, CommitSource.TRACKED, failure=lookup.reason
            )

        self._events.log_commit_resolved(
            identity,
            branch_ref=branch_ref,
            tracked_hash=revision.version_hash,
            head_hash=lookup.commit_hash,
        )
        return CommitResolution(lookup.commit_hash, CommitSource.PULL_REQUEST_HEAD)
