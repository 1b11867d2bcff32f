"""Map build outcomes onto GitHub commit status states and descriptions."""

from __future__ import annotations

import typing as typ

from herald.build import BuildStatus
from herald.github import ChangeState

if typ.TYPE_CHECKING:
    from herald.build import Build

BUILD_SERVER_LABEL = "CI"
# GitHub rejects status descriptions longer than this.
_MAX_DESCRIPTION_LENGTH = 140
_ELLIPSIS = "..."


def map_status_state(priority: int) -> ChangeState:
    """Map a build status priority to a commit status state.

    Normal builds succeed, failed builds fail, and every other priority
    (warnings, errors, unknown values) is reported as an error.

    Examples
    --------
    >>> map_status_state(BuildStatus.NORMAL)
    <ChangeState.SUCCESS: 'success'>
    >>> map_status_state(42)
    <ChangeState.ERROR: 'error'>

    """
    if priority == BuildStatus.NORMAL:
        return ChangeState.SUCCESS
    if priority == BuildStatus.FAILURE:
        return ChangeState.FAILURE
    return ChangeState.ERROR


def _truncate(text: str) -> str:
    if len(text) <= _MAX_DESCRIPTION_LENGTH:
        return text
    return text[: _MAX_DESCRIPTION_LENGTH - len(_ELLIPSIS)] + _ELLIPSIS


def describe_started(build: Build) -> str:
    """Return the status description for a build that just started."""
    return _truncate(f"Started {BUILD_SERVER_LABEL} build {build.full_name}")


def describe_finished(build: Build) -> str:
    """Return the status description for a finished or interrupted build."""
    suffix = f": {build.status_text}" if build.status_text is not None else ""
    return _truncate(f"Finished {BUILD_SERVER_LABEL} build {build.full_name}{suffix}")
