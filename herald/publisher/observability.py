"""Structured log events for the status publishing pipeline.

Every event is a single ``[event.type] key=value ...`` line so log
aggregators can follow one update from scheduling to delivery by commit hash
and build id.

Usage
-----
>>> events = PublisherEventLogger()
>>> events.log_status_updated(task)

"""

from __future__ import annotations

import enum
import typing as typ

from herald.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from herald.github import RepositoryIdentity
    from herald.publisher.models import UpdateRequest, UpdateTask

logger = get_logger(__name__)


class PublisherEventType(enum.StrEnum):
    """Structured log event types for status publishing."""

    STATUS_SCHEDULED = "status.scheduled"
    STATUS_UPDATED = "status.updated"
    STATUS_UPDATE_FAILED = "status.update_failed"
    COMMENT_POSTED = "comment.posted"
    COMMENT_FAILED = "comment.failed"
    COMMIT_RESOLVED = "commit.resolved"
    COMMIT_RESOLUTION_FAILED = "commit.resolution_failed"


class PublisherEventLogger:
    """Emit status publishing events via femtologging."""

    def log_status_scheduled(self, request: UpdateRequest) -> None:
        """Log that an update was handed to the worker pool."""
        log_info(
            logger,
            "[%s] repo_slug=%s hash=%s branch=%s build_id=%d state=%s",
            PublisherEventType.STATUS_SCHEDULED,
            request.identity.slug,
            request.revision.version_hash,
            request.revision.branch_ref,
            request.build_id,
            request.state,
        )

    def log_status_updated(self, task: UpdateTask) -> None:
        """Log a successful commit status update."""
        log_info(
            logger,
            "[%s] repo_slug=%s hash=%s build_id=%d state=%s",
            PublisherEventType.STATUS_UPDATED,
            task.identity.slug,
            task.commit_hash,
            task.build_id,
            task.state,
        )

    def log_status_update_failed(self, task: UpdateTask, error: Exception) -> None:
        """Log a failed commit status update with the remote error attached.

        Parameters
        ----------
        task
            The update that could not be delivered.
        error
            The remote failure; attached as ``exc_info``.

        """
        log_warning(
            logger,
            "[%s] repo_slug=%s hash=%s build_id=%d state=%s error=%s",
            PublisherEventType.STATUS_UPDATE_FAILED,
            task.identity.slug,
            task.commit_hash,
            task.build_id,
            task.state,
            error,
            exc_info=error,
        )

    def log_comment_posted(self, task: UpdateTask) -> None:
        """Log a comment added to the commit."""
        log_info(
            logger,
            "[%s] repo_slug=%s hash=%s build_id=%d state=%s",
            PublisherEventType.COMMENT_POSTED,
            task.identity.slug,
            task.commit_hash,
            task.build_id,
            task.state,
        )

    def log_comment_failed(self, task: UpdateTask, error: Exception) -> None:
        """Log a comment that could not be posted."""
        log_warning(
            logger,
            "[%s] repo_slug=%s hash=%s build_id=%d state=%s error=%s",
            PublisherEventType.COMMENT_FAILED,
            task.identity.slug,
            task.commit_hash,
            task.build_id,
            task.state,
            error,
            exc_info=error,
        )

    def log_commit_resolved(
        self,
        identity: RepositoryIdentity,
        *,
        branch_ref: str,
        tracked_hash: str,
        head_hash: str,
    ) -> None:
        """Log that a merge ref was redirected to its pull request head."""
        log_info(
            logger,
            "[%s] repo_slug=%s branch=%s hash=%s new_hash=%s",
            PublisherEventType.COMMIT_RESOLVED,
            identity.slug,
            branch_ref,
            tracked_hash,
            head_hash,
        )

    def log_commit_resolution_failed(
        self,
        identity: RepositoryIdentity,
        *,
        branch_ref: str,
        tracked_hash: str,
        reason: str,
    ) -> None:
        """Log a failed pull request head lookup and the fallback hash."""
        log_warning(
            logger,
            "[%s] repo_slug=%s branch=%s fallback_hash=%s reason=%s",
            PublisherEventType.COMMIT_RESOLUTION_FAILED,
            identity.slug,
            branch_ref,
            tracked_hash,
            reason,
        )
