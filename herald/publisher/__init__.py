"""Publish build lifecycle state as GitHub commit statuses.

Public API
----------
GitHubPublisher
    Lifecycle callbacks (started, finished, interrupted) for one configuration.
StatusUpdater
    Builds a DispatchEngine per VCS root.
DispatchEngine
    Immutable per-root composition that schedules updates.
UpdateScheduler
    Fire-and-forget submission to the Dramatiq worker pool.
PublisherSettings
    Typed, validated publisher configuration.
validate_settings
    Collects every configuration problem for form-style feedback.
AuthContextResolver
    Resolves authenticated GitHub clients from settings.
CommitResolver
    Chooses the commit to annotate, following pull request merge refs.
compose_comment
    Renders the bounded Markdown build comment.
map_status_state
    Maps build status priority to a commit status state.

Examples
--------
>>> updater = StatusUpdater(links)
>>> publisher = GitHubPublisher(updater, feature_params)
>>> publisher.build_started(build, revision)

"""

from __future__ import annotations

from herald.publisher.auth import (
    AuthContextResolver,
    GitHubClientFactory,
    RestClientFactory,
)
from herald.publisher.comment import compose_comment, format_duration
from herald.publisher.commits import CommitResolution, CommitResolver, CommitSource
from herald.publisher.config import (
    AuthType,
    InvalidSetting,
    PublisherSettings,
    ReportingPolicy,
    ReportOn,
    WorkerConfig,
    validate_settings,
)
from herald.publisher.engine import DispatchEngine, GitHubPublisher, StatusUpdater
from herald.publisher.errors import PublisherConfigError, WorkerConfigError
from herald.publisher.models import UpdateRequest, UpdateTask
from herald.publisher.scheduler import (
    UpdateScheduler,
    execute_update,
    publish_commit_status_job,
    start_worker,
)
from herald.publisher.status import map_status_state

__all__ = [
    "AuthContextResolver",
    "AuthType",
    "CommitResolution",
    "CommitResolver",
    "CommitSource",
    "DispatchEngine",
    "GitHubClientFactory",
    "GitHubPublisher",
    "InvalidSetting",
    "PublisherConfigError",
    "PublisherSettings",
    "ReportOn",
    "ReportingPolicy",
    "RestClientFactory",
    "StatusUpdater",
    "UpdateRequest",
    "UpdateScheduler",
    "UpdateTask",
    "WorkerConfig",
    "WorkerConfigError",
    "compose_comment",
    "execute_update",
    "format_duration",
    "map_status_state",
    "publish_commit_status_job",
    "start_worker",
    "validate_settings",
]
