"""Units of work passed from lifecycle callbacks to the worker pool."""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

from herald.build import TrackedRevision
from herald.github import ChangeState, RepositoryIdentity


class UpdateRequest(msgspec.Struct, kw_only=True, frozen=True):
    """Everything a worker needs to publish one status update.

    This is the broker message body. It is built on the lifecycle thread,
    where build data is at hand, and carries no live objects: the worker
    re-resolves its GitHub client from ``settings``.
    """

    identity: RepositoryIdentity
    revision: TrackedRevision
    state: ChangeState
    description: str
    target_url: str
    context: str
    build_id: int
    settings: dict[str, str]
    comment_body: str | None = None

    def to_message(self) -> dict[str, typ.Any]:
        """Encode into JSON-safe builtins for the broker."""
        return msgspec.to_builtins(self)

    @classmethod
    def from_message(cls, payload: dict[str, typ.Any]) -> UpdateRequest:
        """Decode a broker payload produced by :meth:`to_message`."""
        return msgspec.convert(payload, cls)


@dataclasses.dataclass(frozen=True, slots=True)
class UpdateTask:
    """A fully resolved status update, ready to send."""

    identity: RepositoryIdentity
    commit_hash: str
    state: ChangeState
    status_message: str
    target_url: str
    context: str
    build_id: int
    comment_body: str | None = None
