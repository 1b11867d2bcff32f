"""Compose the Markdown comment posted alongside a commit status.

Comments are bounded: at most :data:`MAX_LISTED_FAILURES` failed tests are
listed individually, and any remainder is summarised as a single count line,
keeping the body well inside GitHub's comment payload limit.
"""

from __future__ import annotations

import typing as typ

from herald.build import BuildStatus
from herald.publisher.status import BUILD_SERVER_LABEL

if typ.TYPE_CHECKING:
    from herald.build import Build, FailedTest

MAX_LISTED_FAILURES = 10
NO_DETAILS = "<no details available>"
GUEST_PARAMETER = "guest=1"


def format_duration(seconds: int) -> str:
    """Render a duration as ``HH:MM:SS``; hours are not wrapped.

    Examples
    --------
    >>> format_duration(3725)
    '01:02:05'

    """
    hours, remainder = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def with_guest_access(url: str) -> str:
    """Append the guest-access marker to a result page URL."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{GUEST_PARAMETER}"


def _failure_text(test: FailedTest) -> str:
    stacktrace = test.short_stacktrace
    if stacktrace is None or not stacktrace.strip():
        return NO_DETAILS
    return stacktrace


def _failed_tests_section(build: Build) -> list[str]:
    failed = list(build.failed_tests)
    if not failed:
        return []

    listed = failed[:MAX_LISTED_FAILURES]
    lines = ["### Failed tests", "```"]
    for test in listed:
        lines.extend((f"{test.name}: {_failure_text(test)}", ""))

    total = max(build.failed_test_count, len(failed))
    remaining = total - len(listed)
    if remaining > 0:
        lines.append(
            f"##### there are {remaining} more failed tests, see build details"
        )
    lines.append("```")
    return lines


def compose_comment(
    build: Build,
    *,
    completed: bool,
    target_url: str,
    label: str = BUILD_SERVER_LABEL,
) -> str:
    """Build the comment body for a build event.

    Parameters
    ----------
    build
        The build being reported.
    completed
        ``False`` for start events, ``True`` for finish and interrupt events.
    target_url
        Link to the build's result page, already carrying any guest marker.
    label
        Build server name leading the header.

    Returns
    -------
    str
        Markdown comment body, always ending with a newline.

    """
    header = label
    if build.build_type_name:
        header = f"{header} {build.build_type_name}"
    header = f"{header} [Build {build.build_number}]({target_url}) "
    if completed:
        header += f"outcome was **{build.status.text}**"
    else:
        header += "is now running"

    lines = [header]
    if completed and build.status_text is not None:
        lines.append(
            f"Summary: {build.status_text} "
            f"Build time: {format_duration(build.duration_s)}"
        )
        if build.status != BuildStatus.NORMAL:
            lines.extend(_failed_tests_section(build))

    return "\n".join(lines) + "\n"
