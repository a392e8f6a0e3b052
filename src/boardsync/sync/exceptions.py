"""Exceptions for the Sync Engine."""


class SyncError(Exception):
    """Base exception for sync engine errors."""


class InvalidTransitionError(SyncError):
    """A record was moved between states the state machine does not connect."""
