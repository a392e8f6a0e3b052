"""SyncEngine - Per-record state machine from task record to linked issue."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from boardsync.sync.models import SyncResult, SyncState
from boardsync.synthesizer import IssuePayload, synthesize
from boardsync.tracker.exceptions import TrackerError

if TYPE_CHECKING:
    from boardsync.records import AssignmentResolver, TaskRecord
    from boardsync.tracker import ProjectSelector, ProjectTarget, TrackerGateway

logger = logging.getLogger("boardsync.sync")

T = TypeVar("T")

DEFAULT_RETRY_DELAY = 1.0


def _is_retryable(error: BaseException) -> bool:
    """Only failures the tracker flagged as transient are retried."""
    return isinstance(error, TrackerError) and getattr(error, "retryable", False)


def preview(records: Iterable[TaskRecord], resolver: AssignmentResolver) -> list[IssuePayload]:
    """Synthesize the payload of every record, in order, without any tracker call."""
    return [synthesize(record, resolver.resolve(record.assignee_label)) for record in records]


class SyncEngine:
    """Reconciles task records against the tracker, one record at a time.

    Each record moves Pending -> Created -> Linked, or ends in CreateFailed
    or LinkFailed. A failing record never stops the batch. A created issue
    whose linking fails is left in place; it is never deleted.
    """

    def __init__(
        self,
        gateway: TrackerGateway,
        resolver: AssignmentResolver,
        repo: str,
        max_retries: int = 0,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the engine.

        Args:
            gateway: Tracker Gateway used for every remote call.
            resolver: Resolves assignee labels to tracker handles.
            repo: Target repository in "owner/repo" format.
            max_retries: Extra attempts per gateway call for retryable errors.
            retry_delay: Base backoff in seconds, doubled after each retry.
            sleep: Sleep function (injectable for tests).
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.gateway = gateway
        self.resolver = resolver
        self.repo = repo
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._target: ProjectTarget | None = None

    @property
    def target(self) -> ProjectTarget | None:
        """The project resolved for this run, if any."""
        return self._target

    def resolve_target(self, selector: ProjectSelector | str) -> ProjectTarget:
        """Resolve the destination project once and cache it for the run.

        Raises:
            ProjectNotFoundError: If no project matches.
            AmbiguousProjectError: If several projects match.
        """
        if self._target is None:
            self._target = self.gateway.resolve_project(selector)
            logger.info("Destination project: %s", self._target.project_id)
        return self._target

    def run(
        self,
        records: Iterable[TaskRecord],
        selector: ProjectSelector | str,
        on_result: Callable[[SyncResult], None] | None = None,
    ) -> list[SyncResult]:
        """Sync all records in input order.

        The project is resolved before any issue is created; resolution
        errors propagate. Per-record failures are captured in the results.

        Args:
            records: Task records in input order.
            selector: Destination project id or title.
            on_result: Called with each final result as soon as it is known.

        Returns:
            One SyncResult per record, in input order.
        """
        target = self.resolve_target(selector)

        results: list[SyncResult] = []
        for record in records:
            result = self.sync_record(record, target)
            results.append(result)
            if on_result is not None:
                on_result(result)

        failed = sum(1 for r in results if r.state.is_failure)
        logger.info("Synced %d record(s) into %s, %d failed", len(results), self.repo, failed)
        return results

    def sync_record(self, record: TaskRecord, target: ProjectTarget) -> SyncResult:
        """Create the issue for one record and link it to the project.

        Args:
            record: The task record.
            target: Resolved destination project.

        Returns:
            The record's terminal SyncResult.
        """
        payload = synthesize(record, self.resolver.resolve(record.assignee_label))
        result = SyncResult(record=record, payload=payload)

        issue, error, attempts = self._call_with_retry(
            f"Create issue for row {record.row_number}",
            lambda: self.gateway.create_issue(self.repo, payload),
        )
        if error is not None or issue is None:
            logger.error("Failed to create issue '%s': %s", record.title, error)
            return result.advance(SyncState.CREATE_FAILED, error=str(error), attempts=attempts)

        result = result.advance(
            SyncState.CREATED,
            issue_id=issue.issue_id,
            issue_url=issue.url,
            issue_number=issue.number,
            attempts=attempts,
        )

        # Retries reuse the created issue; it is never created twice
        _, error, link_attempts = self._call_with_retry(
            f"Add issue #{issue.number} to project",
            lambda: self.gateway.add_to_project(target, issue.issue_id),
        )
        attempts += link_attempts
        if error is not None:
            logger.error("Created %s but failed to add it to the project: %s", issue.url, error)
            return result.advance(SyncState.LINK_FAILED, error=str(error), attempts=attempts)

        logger.info("Added to project: %s", record.title)
        return result.advance(SyncState.LINKED, attempts=attempts)

    def _call_with_retry(
        self, action: str, call: Callable[[], T]
    ) -> tuple[T | None, TrackerError | None, int]:
        """Run a gateway call, retrying retryable failures with exponential backoff.

        Returns:
            Tuple of (value, error, attempts); exactly one of value/error is meaningful.
        """

        def log_retry(state: RetryCallState) -> None:
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                action,
                state.attempt_number,
                self.max_retries + 1,
                state.outcome.exception() if state.outcome else None,
                state.next_action.sleep if state.next_action else 0.0,
            )

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_delay),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            before_sleep=log_retry,
            reraise=True,
        )

        attempts = 0
        value: T | None = None
        try:
            for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    value = call()
        except TrackerError as e:
            return None, e, attempts
        return value, None, attempts
