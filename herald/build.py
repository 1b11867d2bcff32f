"""Read-only views of the build server consumed by the status publisher.

The build server owns builds, VCS roots and result pages. Herald only reads
them, so the types here are protocols plus small frozen carriers that host
adapters (and tests) can populate.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import enum
import typing as typ

GIT_VCS_NAME = "git"
VCS_URL_PROPERTY = "url"


class BuildStatus(enum.IntEnum):
    """Build outcome, ordered by the build server's priority."""

    UNKNOWN = 0
    NORMAL = 1
    WARNING = 2
    FAILURE = 3
    ERROR = 4

    @property
    def text(self) -> str:
        """Return the human-readable outcome label."""
        return _STATUS_TEXT[self]


_STATUS_TEXT: dict[BuildStatus, str] = {
    BuildStatus.UNKNOWN: "Unknown",
    BuildStatus.NORMAL: "Success",
    BuildStatus.WARNING: "Warning",
    BuildStatus.FAILURE: "Failure",
    BuildStatus.ERROR: "Error",
}


@dataclasses.dataclass(frozen=True, slots=True)
class FailedTest:
    """A failed test run and its optional short stack trace."""

    name: str
    short_stacktrace: str | None = None


class Build(typ.Protocol):
    """The slice of a running or finished build that Herald reads."""

    @property
    def build_id(self) -> int:
        """Server-wide build identifier."""
        ...

    @property
    def full_name(self) -> str:
        """Project and build configuration name."""
        ...

    @property
    def build_type_name(self) -> str | None:
        """Full name of the build configuration, if still known."""
        ...

    @property
    def build_number(self) -> str:
        """User-facing build number."""
        ...

    @property
    def status(self) -> BuildStatus:
        """Current outcome of the build."""
        ...

    @property
    def status_text(self) -> str | None:
        """One-line summary such as ``Tests failed: 3, passed: 120``."""
        ...

    @property
    def duration_s(self) -> int:
        """Elapsed build time in whole seconds."""
        ...

    @property
    def failed_tests(self) -> cabc.Sequence[FailedTest]:
        """Failed test runs, in reporting order."""
        ...

    @property
    def failed_test_count(self) -> int:
        """Total failed tests; may exceed ``len(failed_tests)``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class BuildDetails:
    """Snapshot implementation of :class:`Build`."""

    build_id: int
    full_name: str
    build_number: str
    status: BuildStatus = BuildStatus.NORMAL
    build_type_name: str | None = None
    status_text: str | None = None
    duration_s: int = 0
    failed_tests: tuple[FailedTest, ...] = ()
    failed_test_count: int = 0


@dataclasses.dataclass(frozen=True, slots=True)
class TrackedRevision:
    """The commit (and branch) a build was triggered from."""

    version_hash: str
    branch_ref: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class VcsRoot:
    """A VCS root instance: its VCS type and its connection properties."""

    vcs_name: str
    properties: cabc.Mapping[str, str] = dataclasses.field(default_factory=dict)

    @property
    def url(self) -> str:
        """Return the repository connection URI, or an empty string."""
        return self.properties.get(VCS_URL_PROPERTY, "")


@dataclasses.dataclass(frozen=True, slots=True)
class BuildRevision:
    """A revision of one VCS root that took part in a build."""

    root: VcsRoot
    repository_version: TrackedRevision


class WebLinks(typ.Protocol):
    """Produces externally reachable links to build pages."""

    def view_results_url(self, build: Build) -> str:
        """Return the URL of the build's result page."""
        ...
