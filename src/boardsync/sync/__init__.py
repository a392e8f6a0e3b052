"""Sync Engine - Drives task records through issue creation and project linking."""

from boardsync.sync.engine import DEFAULT_RETRY_DELAY, SyncEngine, preview
from boardsync.sync.exceptions import InvalidTransitionError, SyncError
from boardsync.sync.models import TRANSITIONS, SyncResult, SyncState

__all__ = [
    "DEFAULT_RETRY_DELAY",
    "TRANSITIONS",
    "InvalidTransitionError",
    "SyncEngine",
    "SyncError",
    "SyncResult",
    "SyncState",
    "preview",
]
