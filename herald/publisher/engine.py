"""Dispatch build lifecycle events to GitHub commit statuses.

:class:`GitHubPublisher` receives lifecycle callbacks from the build server.
For each Git VCS root it asks :class:`StatusUpdater` for a
:class:`DispatchEngine`, the immutable per-(root, settings) composition of
repository identity, reporting policy and authenticated client. The engine
builds an :class:`UpdateRequest` on the calling thread and submits it to the
worker pool; no network I/O happens before submission.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from herald.build import GIT_VCS_NAME
from herald.github import (
    ChangeState,
    GitHubConfigError,
    IdentityParseFailure,
    parse_repository_identity,
)
from herald.logging import get_logger, log_debug, log_exception, log_warning
from herald.publisher.auth import AuthContextResolver, default_resolver
from herald.publisher.comment import compose_comment, with_guest_access
from herald.publisher.config import PublisherSettings, ReportingPolicy
from herald.publisher.errors import PublisherConfigError
from herald.publisher.models import UpdateRequest
from herald.publisher.scheduler import UpdateScheduler
from herald.publisher.status import (
    describe_finished,
    describe_started,
    map_status_state,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from herald.build import Build, BuildRevision, TrackedRevision, VcsRoot, WebLinks
    from herald.github import CommitStatusClient, RepositoryIdentity

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchEngine:
    """Status publishing for one VCS root under one publisher configuration."""

    identity: RepositoryIdentity
    settings: PublisherSettings
    client: CommitStatusClient
    scheduler: UpdateScheduler
    links: WebLinks

    @property
    def policy(self) -> ReportingPolicy:
        """Return the reporting policy derived from the settings."""
        return self.settings.policy

    def should_report(self, *, is_starting: bool) -> bool:
        """Return True when this lifecycle event kind should be published."""
        return self.scheduler.should_report(self.policy, is_starting=is_starting)

    def view_results_url(self, build: Build) -> str:
        """Return the build's result link, with guest access when enabled."""
        url = self.links.view_results_url(build)
        if self.policy.use_guest_links:
            return with_guest_access(url)
        return url

    def schedule_change_started(self, revision: TrackedRevision, build: Build) -> None:
        """Publish ``pending`` for a build that has just started."""
        self._schedule(
            revision,
            build,
            state=ChangeState.PENDING,
            description=describe_started(build),
        )

    def schedule_change_completed(
        self, revision: TrackedRevision, build: Build
    ) -> None:
        """Publish the outcome of a finished or interrupted build."""
        log_debug(
            logger,
            "Status: %s, priority: %d",
            build.status.text,
            int(build.status),
        )
        self._schedule(
            revision,
            build,
            state=map_status_state(build.status),
            description=describe_finished(build),
        )

    def _schedule(
        self,
        revision: TrackedRevision,
        build: Build,
        *,
        state: ChangeState,
        description: str,
    ) -> None:
        target_url = self.view_results_url(build)
        comment_body = None
        if self.policy.post_comments:
            comment_body = compose_comment(
                build,
                completed=state is not ChangeState.PENDING,
                target_url=target_url,
            )
        self.scheduler.submit(
            UpdateRequest(
                identity=self.identity,
                revision=revision,
                state=state,
                description=description,
                target_url=target_url,
                context=self.settings.status_context,
                build_id=build.build_id,
                settings=self.settings.to_mapping(),
                comment_body=comment_body,
            )
        )


class StatusUpdater:
    """Build :class:`DispatchEngine` instances for VCS roots."""

    def __init__(
        self,
        links: WebLinks,
        *,
        scheduler: UpdateScheduler | None = None,
        resolver: AuthContextResolver | None = None,
    ) -> None:
        """Share ``scheduler`` and ``resolver`` across every engine built."""
        self._links = links
        self._scheduler = scheduler or UpdateScheduler()
        self._resolver = resolver or default_resolver()

    def get_update_handler(
        self, root: VcsRoot, settings: PublisherSettings
    ) -> DispatchEngine | None:
        """Return an engine for ``root``, or None when it cannot be reported on.

        Unparseable repository URLs and rejected client settings are logged as
        warnings; no update is attempted for that root.
        """
        identity = parse_repository_identity(root.url)
        if isinstance(identity, IdentityParseFailure):
            log_warning(
                logger,
                "Cannot parse GitHub repository url %s: %s",
                identity.uri,
                identity.reason,
            )
            return None

        try:
            client = self._resolver.resolve(settings)
        except GitHubConfigError as exc:
            log_warning(
                logger,
                "Cannot open GitHub client for %s: %s",
                settings.server_url,
                exc,
            )
            return None

        return DispatchEngine(
            identity=identity,
            settings=settings,
            client=client,
            scheduler=self._scheduler,
            links=self._links,
        )


class GitHubPublisher:
    """Lifecycle callbacks publishing build state to GitHub.

    Settings are validated once, on construction. An invalid configuration is
    reported with a single warning and turns every callback into a no-op.
    """

    def __init__(self, updater: StatusUpdater, params: cabc.Mapping[str, str]) -> None:
        """Validate ``params`` and keep the updater used for each event."""
        self._updater = updater
        self._settings: PublisherSettings | None
        try:
            self._settings = PublisherSettings.from_mapping(params)
        except PublisherConfigError as exc:
            log_warning(logger, "GitHub status publishing disabled: %s", exc)
            self._settings = None

    def __str__(self) -> str:
        """Return the publisher id."""
        return "github"

    @property
    def settings(self) -> PublisherSettings | None:
        """Return the validated settings, or None when they were rejected."""
        return self._settings

    def build_started(self, build: Build, revision: BuildRevision) -> None:
        """Handle a build start."""
        self._update_build_status(build, revision, is_starting=True)

    def build_finished(self, build: Build, revision: BuildRevision) -> None:
        """Handle a build finish."""
        self._update_build_status(build, revision, is_starting=False)

    def build_interrupted(self, build: Build, revision: BuildRevision) -> None:
        """Handle an interrupted build; reported like a finish."""
        self._update_build_status(build, revision, is_starting=False)

    def _update_build_status(
        self, build: Build, revision: BuildRevision, *, is_starting: bool
    ) -> None:
        try:
            self._dispatch(build, revision, is_starting=is_starting)
        except Exception as exc:  # noqa: BLE001 - callbacks must never raise
            log_exception(logger, "Failed to publish GitHub status", exc)

    def _dispatch(
        self, build: Build, revision: BuildRevision, *, is_starting: bool
    ) -> None:
        if revision.root.vcs_name != GIT_VCS_NAME:
            log_warning(
                logger,
                "No revisions were found to update GitHub status. "
                "Please check you have Git VCS roots in the build configuration",
            )
            return

        settings = self._settings
        if settings is None:
            return
        if not UpdateScheduler.should_report(settings.policy, is_starting=is_starting):
            return

        engine = self._updater.get_update_handler(revision.root, settings)
        if engine is None:
            return

        if is_starting:
            engine.schedule_change_started(revision.repository_version, build)
        else:
            engine.schedule_change_completed(revision.repository_version, build)
