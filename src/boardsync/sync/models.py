"""Data models for the Sync Engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from boardsync.records.models import TaskRecord
from boardsync.sync.exceptions import InvalidTransitionError
from boardsync.synthesizer.models import IssuePayload


class SyncState(StrEnum):
    """Per-record sync state."""

    PENDING = "pending"
    CREATED = "created"
    LINKED = "linked"
    CREATE_FAILED = "create_failed"
    LINK_FAILED = "link_failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncState.LINKED, SyncState.CREATE_FAILED, SyncState.LINK_FAILED)

    @property
    def is_failure(self) -> bool:
        return self in (SyncState.CREATE_FAILED, SyncState.LINK_FAILED)


TRANSITIONS: dict[SyncState, frozenset[SyncState]] = {
    SyncState.PENDING: frozenset({SyncState.CREATED, SyncState.CREATE_FAILED}),
    SyncState.CREATED: frozenset({SyncState.LINKED, SyncState.LINK_FAILED}),
    SyncState.LINKED: frozenset(),
    SyncState.CREATE_FAILED: frozenset(),
    SyncState.LINK_FAILED: frozenset(),
}


@dataclass(frozen=True)
class SyncResult:
    """Outcome of syncing one task record.

    Attributes:
        record: The task record this result belongs to.
        state: Current state in the sync state machine.
        payload: Issue payload synthesized for the record.
        issue_id: Durable node id of the created issue.
        issue_url: URL of the created issue.
        issue_number: Issue number in the repository.
        error: Error detail for failure states.
        attempts: Gateway calls made for this record, retries included.
    """

    record: TaskRecord
    state: SyncState = SyncState.PENDING
    payload: IssuePayload | None = None
    issue_id: str | None = None
    issue_url: str | None = None
    issue_number: int | None = None
    error: str | None = None
    attempts: int = 0

    def advance(self, state: SyncState, **changes: Any) -> SyncResult:
        """Return a copy moved to ``state``.

        Raises:
            InvalidTransitionError: If ``state`` is not reachable from the current state.
        """
        if state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Row {self.record.row_number}: cannot move from {self.state} to {state}"
            )
        return replace(self, state=state, **changes)
