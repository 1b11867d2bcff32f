"""Unit tests for build comment composition."""

from __future__ import annotations

import pytest

from herald.build import BuildDetails, BuildStatus, FailedTest
from herald.publisher.comment import (
    MAX_LISTED_FAILURES,
    NO_DETAILS,
    compose_comment,
    format_duration,
    with_guest_access,
)
from tests.helpers.publisher_fakes import make_build

TARGET_URL = "https://ci.example.com/viewLog.html?buildId=4021"


def _listed_failures(body: str) -> list[str]:
    return [line for line in body.splitlines() if line.startswith("tests.test_reef.")]


def test_running_comment() -> None:
    """Start comments link the build and say it is running."""
    body = compose_comment(make_build(), completed=False, target_url=TARGET_URL)

    assert body == (
        f"CI Reef :: Unit tests [Build 118]({TARGET_URL}) is now running\n"
    ), "Unexpected start comment."


def test_successful_build_has_summary_but_no_failures() -> None:
    """Successful builds report outcome, summary and duration only."""
    build = make_build(status_text="Tests passed: 120", duration_s=3725)

    body = compose_comment(build, completed=True, target_url=TARGET_URL)

    assert body.splitlines() == [
        f"CI Reef :: Unit tests [Build 118]({TARGET_URL}) outcome was **Success**",
        "Summary: Tests passed: 120 Build time: 01:02:05",
    ], "Unexpected success comment."


def test_failed_build_caps_listed_failures() -> None:
    """Fifteen failures list ten entries and summarise the other five."""
    build = make_build(
        status=BuildStatus.FAILURE,
        status_text="Tests failed: 15, passed: 105",
        failures=15,
        duration_s=61,
    )

    body = compose_comment(build, completed=True, target_url=TARGET_URL)
    lines = body.splitlines()

    listed = _listed_failures(body)
    assert len(listed) == MAX_LISTED_FAILURES, "Expected exactly ten entries."
    assert listed[0] == "tests.test_reef.test_case_1: AssertionError: 1", (
        "Expected name and excerpt for the first failure."
    )
    assert listed[-1].startswith("tests.test_reef.test_case_10:"), (
        "Expected the tenth failure to be the last listed."
    )
    assert "outcome was **Failure**" in lines[0], "Expected the outcome label."
    assert "Build time: 00:01:01" in lines[1], "Expected formatted duration."
    assert lines[2:4] == ["### Failed tests", "```"], "Expected fenced section."
    assert lines[-2] == (
        "##### there are 5 more failed tests, see build details"
    ), "Expected the remaining count as the final line in the fence."
    assert lines[-1] == "```", "Expected the fence to be closed."
    assert body.endswith("\n"), "Comments end with a newline."


@pytest.mark.parametrize(
    ("failures", "remainder"),
    [(10, None), (11, "##### there are 1 more failed tests, see build details")],
    ids=["at-cap", "one-over-cap"],
)
def test_cap_boundary(failures: int, remainder: str | None) -> None:
    """The tenth failure is the last listed; only extras get a remainder line."""
    build = make_build(
        status=BuildStatus.FAILURE,
        status_text=f"Tests failed: {failures}",
        failures=failures,
    )

    body = compose_comment(build, completed=True, target_url=TARGET_URL)
    lines = body.splitlines()

    listed = _listed_failures(body)
    assert len(listed) == MAX_LISTED_FAILURES, "Expected exactly ten entries."
    assert listed[-1].startswith("tests.test_reef.test_case_10:"), (
        "Expected the tenth failure to be the last listed."
    )
    assert lines[-1] == "```", "Expected the fence to be closed."
    if remainder is None:
        assert "more failed tests" not in body, "No remainder line at the cap."
        assert lines[-3:-1] == [listed[-1], ""], "Expected the list to end the fence."
    else:
        assert lines[-2] == remainder, "Expected a remainder of one."


def test_remaining_count_uses_reported_total() -> None:
    """The reported total wins when fewer failures were loaded."""
    build = BuildDetails(
        build_id=1,
        full_name="Reef",
        build_number="9",
        status=BuildStatus.FAILURE,
        status_text="Tests failed: 40",
        failed_tests=tuple(FailedTest(f"t{index}") for index in range(12)),
        failed_test_count=40,
    )

    body = compose_comment(build, completed=True, target_url=TARGET_URL)

    assert "there are 30 more failed tests" in body, (
        "Expected total minus listed entries."
    )


@pytest.mark.parametrize(
    "stacktrace", [None, "", "   "], ids=["none", "empty", "blank"]
)
def test_missing_excerpt_uses_placeholder(stacktrace: str | None) -> None:
    """Failures without an excerpt show the fixed placeholder."""
    build = BuildDetails(
        build_id=1,
        full_name="Reef",
        build_number="9",
        status=BuildStatus.ERROR,
        status_text="Exit code 1",
        failed_tests=(FailedTest("tests.test_reef.test_io", stacktrace),),
        failed_test_count=1,
    )

    body = compose_comment(build, completed=True, target_url=TARGET_URL)

    assert f"tests.test_reef.test_io: {NO_DETAILS}" in body, (
        "Expected the placeholder excerpt."
    )
    assert "more failed tests" not in body, "No remainder line for one failure."


def test_completed_without_summary_omits_details() -> None:
    """Without a summary line only the outcome header is rendered."""
    build = make_build(status=BuildStatus.FAILURE, failures=3)

    body = compose_comment(build, completed=True, target_url=TARGET_URL)

    assert body.count("\n") == 1, "Expected a single header line."
    assert "### Failed tests" not in body, "Failures need a summary line."


def test_header_without_build_type() -> None:
    """The build type label is optional."""
    build = make_build(build_type_name=None)

    body = compose_comment(build, completed=False, target_url=TARGET_URL)

    assert body.startswith(f"CI [Build 118]({TARGET_URL})"), "Unexpected header."


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00:00"), (59, "00:00:59"), (3600, "01:00:00"), (90061, "25:01:01")],
    ids=["zero", "seconds", "hour", "over-a-day"],
)
def test_format_duration(seconds: int, expected: str) -> None:
    """Durations render as zero-padded HH:MM:SS."""
    assert format_duration(seconds) == expected, f"Unexpected rendering of {seconds}."


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://ci.example.com/build/1", "https://ci.example.com/build/1?guest=1"),
        (
            "https://ci.example.com/viewLog.html?buildId=1",
            "https://ci.example.com/viewLog.html?buildId=1&guest=1",
        ),
    ],
    ids=["no-query", "existing-query"],
)
def test_with_guest_access(url: str, expected: str) -> None:
    """The guest marker joins any existing query string."""
    assert with_guest_access(url) == expected, "Unexpected guest URL."


def test_custom_label() -> None:
    """The leading build server label can be overridden."""
    body = compose_comment(
        make_build(), completed=False, target_url=TARGET_URL, label="TeamCity"
    )

    assert body.startswith("TeamCity Reef :: Unit tests [Build 118]"), (
        "Expected the custom label."
    )
