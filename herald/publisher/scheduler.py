"""Fire-and-forget delivery of status updates on a Dramatiq worker pool.

Lifecycle callbacks build an :class:`UpdateRequest` and hand it to
:meth:`UpdateScheduler.submit`, which only enqueues. The
``publish_commit_status_job`` actor later resolves the commit, sets the
status and, when requested, posts the comment. Each remote call is its own
failure domain; failures are logged and dropped, never retried.

Usage
-----
Run the shared pool in-process:

>>> worker = start_worker()
>>> ...
>>> worker.stop()

or, against a real broker, with the Dramatiq CLI::

    dramatiq herald.publisher.scheduler --threads 4

"""

from __future__ import annotations

import asyncio
import typing as typ

import dramatiq

from herald.github import GitHubConfigError, GitHubError
from herald.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
)
from herald.publisher._broker import ensure_broker_configured
from herald.publisher.auth import default_resolver
from herald.publisher.commits import CommitResolver
from herald.publisher.config import PublisherSettings, WorkerConfig
from herald.publisher.errors import PublisherConfigError
from herald.publisher.models import UpdateRequest, UpdateTask
from herald.publisher.observability import PublisherEventLogger

if typ.TYPE_CHECKING:
    from herald.github import CommitStatusClient
    from herald.publisher.config import ReportingPolicy

logger = get_logger(__name__)

QUEUE_NAME = "commit-status"
# Dramatiq runs lower numbers first; build processing keeps precedence.
_LOW_PRIORITY = 100


async def execute_update(
    request: UpdateRequest,
    client: CommitStatusClient,
    *,
    events: PublisherEventLogger | None = None,
) -> UpdateTask:
    """Deliver one status update and its optional comment.

    The status update is attempted first. The comment is attempted whenever a
    body is present, whether or not the status update succeeded.

    Parameters
    ----------
    request
        The update built by the lifecycle callback.
    client
        Authenticated client for the request's GitHub server.
    events
        Event logger; a default instance is used when omitted.

    Returns
    -------
    UpdateTask
        The resolved task that was attempted.

    """
    events = events or PublisherEventLogger()
    resolution = await CommitResolver(client, events=events).resolve(
        request.revision, request.identity
    )
    task = UpdateTask(
        identity=request.identity,
        commit_hash=resolution.commit_hash,
        state=request.state,
        status_message=request.description,
        target_url=request.target_url,
        context=request.context,
        build_id=request.build_id,
        comment_body=request.comment_body,
    )

    try:
        await client.set_change_status(
            task.identity.owner,
            task.identity.name,
            task.commit_hash,
            task.state,
            task.target_url,
            task.status_message,
            task.context,
        )
    except GitHubError as exc:
        events.log_status_update_failed(task, exc)
    else:
        events.log_status_updated(task)

    if task.comment_body is not None:
        try:
            await client.post_comment(
                task.identity.owner,
                task.identity.name,
                task.commit_hash,
                task.comment_body,
            )
        except GitHubError as exc:
            events.log_comment_failed(task, exc)
        else:
            events.log_comment_posted(task)

    return task


@dramatiq.actor(
    broker=ensure_broker_configured(),
    queue_name=QUEUE_NAME,
    priority=_LOW_PRIORITY,
    max_retries=0,
)
def publish_commit_status_job(request: dict[str, typ.Any]) -> None:
    """Dramatiq actor delivering one encoded :class:`UpdateRequest`.

    Nothing escapes to Dramatiq: its own failure log renders the message
    arguments, which carry the GitHub credentials.
    """
    update = UpdateRequest.from_message(request)
    try:
        settings = PublisherSettings.from_mapping(update.settings)
        client = default_resolver().resolve(settings)
    except (PublisherConfigError, GitHubConfigError) as exc:
        log_error(
            logger,
            "Dropping status update for hash: %s, buildId: %d: %s",
            update.revision.version_hash,
            update.build_id,
            exc,
        )
        return
    try:
        asyncio.run(execute_update(update, client))
    except Exception as exc:  # noqa: BLE001 - keep the payload out of logs
        log_exception(
            logger,
            f"Status update failed for hash: {update.revision.version_hash}, "
            f"buildId: {update.build_id}",
            exc,
        )


class UpdateScheduler:
    """Submit status updates to the shared worker pool without waiting."""

    def __init__(
        self,
        actor: dramatiq.Actor | None = None,
        *,
        events: PublisherEventLogger | None = None,
    ) -> None:
        """Send through ``actor``, defaulting to ``publish_commit_status_job``."""
        self._actor = actor or publish_commit_status_job
        self._events = events or PublisherEventLogger()

    @staticmethod
    def should_report(policy: ReportingPolicy, *, is_starting: bool) -> bool:
        """Return True when ``policy`` reports this kind of lifecycle event."""
        if is_starting:
            return policy.report_on_start
        return policy.report_on_finish

    def submit(self, request: UpdateRequest) -> None:
        """Enqueue ``request`` and return immediately.

        Broker failures of any kind are logged rather than raised so that
        build processing is never interrupted by status publishing.
        """
        self._events.log_status_scheduled(request)
        try:
            self._actor.send(request.to_message())
        except Exception as exc:  # noqa: BLE001 - broker client errors vary
            log_exception(
                logger,
                f"Failed to enqueue status update for hash: "
                f"{request.revision.version_hash}, buildId: {request.build_id}",
                exc,
            )


def start_worker(
    config: WorkerConfig | None = None,
    *,
    broker: dramatiq.Broker | None = None,
) -> dramatiq.Worker:
    """Start an in-process worker pool consuming status updates.

    The pool size bounds how many remote calls run at once. The returned
    worker must be stopped with :meth:`dramatiq.Worker.stop`; queued messages
    that have not started are abandoned on shutdown. Logging is configured
    from ``HERALD_LOG_LEVEL`` first.
    """
    configure_logging()
    config = config or WorkerConfig.from_env()
    worker = dramatiq.Worker(
        broker or publish_commit_status_job.broker,
        queues={QUEUE_NAME},
        worker_threads=config.worker_threads,
    )
    worker.start()
    return worker
